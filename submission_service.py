"""Anonymous candidate submission flow.

token -> documents -> per-document recognition -> aggregate -> rules engine
-> AI review -> guardrail arbitration.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from ai_review.ai_review_models import AiOpinion
from ai_review.ai_review_service import AiReviewService
from document_reader import UploadedDocument, empty_extraction, recognize_document, validate_upload_batch
from evidence_aggregator import aggregate
from evidence_models import AggregatedEvidence, DocumentExtraction
from guardrail_arbiter import GuardrailOutcome, arbitrate
from permit_facts_mapper import HiringContext, facts_from_evidence
from rtw_rules.decision_engine import evaluate_right_to_work, is_expiring_soon
from rtw_rules.rtw_rules_models import DecisionResult
from upload_token import UploadGrant, UploadTokenSigner

logger = logging.getLogger(__name__)

Recognizer = Callable[[UploadedDocument], DocumentExtraction]


class SubmissionOutcome(BaseModel):
    submission_id: str
    issuer_id: str
    subject_id: str
    evidence: AggregatedEvidence
    rules_result: DecisionResult
    ai_opinion: AiOpinion
    outcome: GuardrailOutcome
    expiring_soon: bool = False

    def to_logging_dict(self) -> dict:
        return {
            "submission_id": self.submission_id,
            "subject_id": self.subject_id,
            "document_count": len(self.evidence.source_names),
            "rules_status": self.rules_result.status.value,
            "ai_status": self.ai_opinion.status.value,
            "final_status": self.outcome.final_status.value,
            "has_conflict": self.outcome.conflict_note is not None,
        }


class PublicSubmissionService:
    def __init__(
        self,
        *,
        signer: UploadTokenSigner,
        ai_review: Optional[AiReviewService] = None,
        recognizer: Optional[Recognizer] = None,
    ) -> None:
        self.signer = signer
        self.ai_review = ai_review or AiReviewService()
        self.recognizer = recognizer or recognize_document

    # -------------------------------------------------------
    # LINKS
    # -------------------------------------------------------
    def issue_link_token(
        self,
        issuer_id: str,
        subject_id: str,
        ttl: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> str:
        grant = UploadGrant.create(issuer_id, subject_id, ttl=ttl, now=now)
        logger.info(
            "public_upload_link_issued",
            extra={"issuer_id": issuer_id, "subject_id": subject_id, "expires_at": grant.expires_at.isoformat()},
        )
        return self.signer.issue(grant)

    def validate_token(self, token: str, now: Optional[datetime] = None) -> UploadGrant:
        return self.signer.verify(token, now=now)

    # -------------------------------------------------------
    # DOCUMENTS
    # -------------------------------------------------------
    def _recognize(self, document: UploadedDocument) -> DocumentExtraction:
        try:
            return self.recognizer(document)
        except Exception as exc:
            logger.warning(
                "document_recognition_failed",
                extra={"source": document.filename, "error": str(exc)},
                exc_info=True,
            )
            return empty_extraction(document.filename)

    def recognize_all(self, documents: Sequence[UploadedDocument]) -> List[DocumentExtraction]:
        """One extraction per upload, kept in upload order."""
        return [self._recognize(document) for document in documents]

    def process(
        self,
        grant: UploadGrant,
        documents: Sequence[UploadedDocument],
        hiring: Optional[HiringContext] = None,
        today: Optional[date] = None,
    ) -> SubmissionOutcome:
        """
        Run a verified submission through the decision core.

        Raises:
            SubmissionRejectedError: if the batch has the wrong number, size or type of files.
        """
        validate_upload_batch(documents)
        today = today or date.today()
        submission_id = str(uuid.uuid4())

        extractions = self.recognize_all(documents)
        evidence = aggregate(extractions)
        facts = facts_from_evidence(evidence, hiring=hiring, today=today)
        rules_result = evaluate_right_to_work(facts, today=today)

        ai_opinion = self.ai_review.assess(
            rules_result.status.value,
            evidence.combined_raw_text,
            evidence.extracted_fields(),
        )
        outcome = arbitrate(rules_result, ai_opinion)

        result = SubmissionOutcome(
            submission_id=submission_id,
            issuer_id=grant.issuer_id,
            subject_id=grant.subject_id,
            evidence=evidence,
            rules_result=rules_result,
            ai_opinion=ai_opinion,
            outcome=outcome,
            expiring_soon=evidence.expiry_date is not None and is_expiring_soon(evidence.expiry_date, today=today),
        )
        logger.info("public_submission_processed", extra=result.to_logging_dict())
        return result
