"""Merges per-document OCR guesses into one evidence record for the rules engine."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from evidence_models import (
    AggregatedEvidence,
    DocumentExtraction,
    PermissionGuess,
    ScannedDocumentType,
)

logger = logging.getLogger(__name__)


class EmptyEvidenceError(ValueError):
    """Raised when a submission batch contains no extractions."""


def document_separator(position: int, source_name: str) -> str:
    return f"--- Document {position}: {source_name} ---"


def parse_guessed_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def _first_text(current: Optional[str], candidate: Optional[str]) -> Optional[str]:
    if current:
        return current
    if candidate and candidate.strip():
        return candidate.strip()
    return None


def aggregate(extractions: Sequence[DocumentExtraction]) -> AggregatedEvidence:
    """
    Combine N extractions, in upload order, into one best-guess record.

    Every field picks its own winner, so fields may come from different documents:
    - document type, number, employer, permission: first usable guess
    - expiry date: earliest real calendar date across all documents

    Raises:
        EmptyEvidenceError: if ``extractions`` is empty.
    """
    if not extractions:
        raise EmptyEvidenceError("at least one document extraction is required")

    text_blocks: List[str] = []
    document_type = ScannedDocumentType.UNRECOGNIZED
    document_number: Optional[str] = None
    expiry_date: Optional[date] = None
    employer_name: Optional[str] = None
    permission = PermissionGuess.UNKNOWN

    for position, extraction in enumerate(extractions, start=1):
        text_blocks.append(document_separator(position, extraction.source_name))
        text_blocks.append(extraction.raw_text)

        if (
            document_type == ScannedDocumentType.UNRECOGNIZED
            and extraction.document_type_guess != ScannedDocumentType.UNRECOGNIZED
        ):
            document_type = extraction.document_type_guess

        document_number = _first_text(document_number, extraction.document_number_guess)
        employer_name = _first_text(employer_name, extraction.employer_name_guess)

        if permission == PermissionGuess.UNKNOWN:
            permission = extraction.permission_guess

        guessed_expiry = parse_guessed_date(extraction.expiry_date_guess)
        if extraction.expiry_date_guess and guessed_expiry is None:
            logger.info(
                "evidence_expiry_guess_discarded",
                extra={"source": extraction.source_name, "value": extraction.expiry_date_guess},
            )
        if guessed_expiry is not None and (expiry_date is None or guessed_expiry < expiry_date):
            expiry_date = guessed_expiry

    evidence = AggregatedEvidence(
        combined_raw_text="\n".join(text_blocks),
        document_type=document_type,
        document_number=document_number,
        expiry_date=expiry_date,
        employer_name=employer_name,
        permission=permission,
        source_names=tuple(extraction.source_name for extraction in extractions),
    )
    logger.info(
        "evidence_aggregated",
        extra={
            "document_count": len(extractions),
            "document_type": evidence.document_type.value,
            "has_expiry": evidence.expiry_date is not None,
            "has_document_number": evidence.document_number is not None,
        },
    )
    return evidence
