"""Map scanned evidence onto rules-engine input.

We collect very little structured data, so the mapping is deliberately
cautious: anything not positively known is left UNKNOWN and most checks
therefore end in NEEDS_REVIEW.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional

from evidence_models import AggregatedEvidence, PermissionGuess, ScannedDocumentType
from rtw_rules.rtw_rules_models import (
    CitizenshipCategory,
    DocumentCategory,
    EmploymentPermission,
    PermitFacts,
    TriState,
)

NOT_SPECIFIED = "Not specified"
DEFAULT_CONTRACT_HOURS = 40

SCANNED_TYPE_TO_CATEGORY: Dict[ScannedDocumentType, DocumentCategory] = {
    ScannedDocumentType.EU_BLUE_CARD: DocumentCategory.EU_BLUE_CARD,
    ScannedDocumentType.EAT: DocumentCategory.EAT_EMPLOYMENT,
    ScannedDocumentType.FIKTIONSBESCHEINIGUNG: DocumentCategory.FIKTIONSBESCHEINIGUNG,
    ScannedDocumentType.UNRECOGNIZED: DocumentCategory.OTHER,
}

PERMISSION_GUESS_TO_PERMISSION: Dict[PermissionGuess, EmploymentPermission] = {
    PermissionGuess.ANY_EMPLOYMENT_ALLOWED: EmploymentPermission.ANY_EMPLOYMENT_ALLOWED,
    PermissionGuess.RESTRICTED: EmploymentPermission.EMPLOYMENT_ALLOWED_WITH_LIMITS,
    PermissionGuess.UNKNOWN: EmploymentPermission.UNCLEAR,
}


@dataclass
class HiringContext:
    """What HR knows about the job being offered."""

    employer_name: str = NOT_SPECIFIED
    planned_role: str = NOT_SPECIFIED
    planned_work_city: str = NOT_SPECIFIED
    contract_hours_per_week: float = DEFAULT_CONTRACT_HOURS


def _default_valid_from(today: date) -> date:
    return today - timedelta(days=365)


def facts_from_evidence(
    evidence: AggregatedEvidence,
    hiring: Optional[HiringContext] = None,
    today: Optional[date] = None,
) -> PermitFacts:
    """
    Rules input for an anonymous submission.

    A missing expiry is read as "valid today" so it cannot trigger the expiry
    hard stop; the UNKNOWN permit conditions still keep the result in review.
    """
    today = today or date.today()
    hiring = hiring or HiringContext()
    category = SCANNED_TYPE_TO_CATEGORY[evidence.document_type]
    valid_to = evidence.expiry_date or today
    notes = f"Built from {len(evidence.source_names)} uploaded document(s)."
    if evidence.expiry_date is None:
        notes += " No expiry date could be read from the documents."

    return PermitFacts(
        citizenship_category=CitizenshipCategory.THIRD_COUNTRY,
        document_category=category,
        valid_from=_default_valid_from(today),
        valid_to=valid_to,
        employment_permission=PERMISSION_GUESS_TO_PERMISSION[evidence.permission],
        hiring_employer_name=hiring.employer_name,
        employer_tie=TriState.UNKNOWN,
        employer_on_permit=evidence.employer_name,
        occupation_tie=TriState.UNKNOWN,
        planned_role=hiring.planned_role,
        hours_limit=TriState.UNKNOWN,
        contract_hours_per_week=hiring.contract_hours_per_week,
        location_restriction=TriState.UNKNOWN,
        planned_work_city=hiring.planned_work_city,
        is_qualification_permit=category == DocumentCategory.EU_BLUE_CARD,
        is_changing_employer=True,
        months_on_qualification_permit=0,
        continuation_of_same_job=TriState.UNKNOWN,
        free_text_notes=notes,
    )
