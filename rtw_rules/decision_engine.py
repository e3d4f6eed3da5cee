import logging
from datetime import date
from typing import List, Optional

from rtw_rules import decision_policy as policy
from rtw_rules.rtw_rules_models import (
    CitizenshipCategory,
    DecisionResult,
    EmploymentPermission,
    PermitFacts,
    TriState,
    WorkStatus,
)

logger = logging.getLogger(__name__)


def _names_overlap(left: str, right: str) -> bool:
    left_lower = left.lower().strip()
    right_lower = right.lower().strip()
    return left_lower in right_lower or right_lower in left_lower


def _hard_stop(reason: str, summary: str) -> DecisionResult:
    return DecisionResult(status=WorkStatus.NOT_ELIGIBLE, reasons=(reason,), summary=summary)


def evaluate_right_to_work(facts: PermitFacts, today: Optional[date] = None) -> DecisionResult:
    """
    Classifies a residence title as ELIGIBLE, NOT_ELIGIBLE or NEEDS_REVIEW.

    This is a triage helper for HR, not legal advice. The rules are conservative:
    - Anything unclear -> NEEDS_REVIEW
    - Expired / clearly no work rights -> NOT_ELIGIBLE
    - Clean, straightforward cases only -> ELIGIBLE

    Policy:
    - EU/EEA/Swiss nationals are ELIGIBLE unless the ID has expired (NEEDS_REVIEW);
      no other check applies to them.
    - Third-country hard stops (expired title, visitor/no-work title, employment
      explicitly not allowed) return NOT_ELIGIBLE immediately.
    - Every remaining check can only escalate to NEEDS_REVIEW, never back.
    """
    today = today or date.today()
    reasons: List[str] = []
    is_expired = facts.valid_to < today

    # --- 1. Citizenship shortcut ---

    if facts.citizenship_category == CitizenshipCategory.EU_EEA_CH:
        reasons.append(policy.REASON_EU_NATIONAL)
        if is_expired:
            reasons.append(policy.REASON_EU_EXPIRED)
            return DecisionResult(
                status=WorkStatus.NEEDS_REVIEW,
                reasons=tuple(reasons),
                summary=policy.SUMMARY_EU_EXPIRED,
            )
        return DecisionResult(
            status=WorkStatus.ELIGIBLE,
            reasons=tuple(reasons),
            summary=policy.SUMMARY_EU_ELIGIBLE,
        )

    # --- 2. Hard stops ---

    if is_expired:
        return _hard_stop(policy.REASON_EXPIRED, policy.SUMMARY_EXPIRED)

    if facts.document_category in policy.HARD_STOP_DOCUMENT_CATEGORIES:
        return _hard_stop(policy.REASON_NO_WORK_TITLE, policy.SUMMARY_NO_WORK_TITLE)

    if facts.employment_permission == EmploymentPermission.EMPLOYMENT_NOT_ALLOWED:
        return _hard_stop(policy.REASON_EMPLOYMENT_NOT_ALLOWED, policy.SUMMARY_EMPLOYMENT_NOT_ALLOWED)

    # --- 3. Escalating checks ---

    needs_review = False

    if facts.employment_permission == EmploymentPermission.UNCLEAR:
        needs_review = True
        reasons.append(policy.REASON_PERMISSION_UNCLEAR)

    # Employer tie
    if facts.employer_tie == TriState.TRUE and facts.employer_on_permit:
        if _names_overlap(facts.employer_on_permit, facts.hiring_employer_name):
            reasons.append(policy.REASON_EMPLOYER_MATCH)
        else:
            needs_review = True
            reasons.append(
                f'Permit appears tied to a different employer ("{facts.employer_on_permit}") '
                f'than the hiring company ("{facts.hiring_employer_name}").'
            )
    elif facts.employer_tie == TriState.UNKNOWN:
        needs_review = True
        reasons.append(policy.REASON_EMPLOYER_UNKNOWN)

    # Occupation tie
    if facts.occupation_tie == TriState.TRUE and facts.occupation_on_permit:
        if _names_overlap(facts.occupation_on_permit, facts.planned_role):
            reasons.append(policy.REASON_OCCUPATION_MATCH)
        else:
            needs_review = True
            reasons.append(
                f'Permit appears limited to occupation "{facts.occupation_on_permit}", '
                f'which may not match the planned role ("{facts.planned_role}").'
            )
    elif facts.occupation_tie == TriState.UNKNOWN:
        needs_review = True
        reasons.append(policy.REASON_OCCUPATION_UNKNOWN)

    # Hours limit
    if facts.hours_limit == TriState.TRUE and facts.hours_limit_per_week is not None:
        hours = f"{facts.contract_hours_per_week:g}h/week"
        limit = f"{facts.hours_limit_per_week:g}h/week"
        if facts.contract_hours_per_week > facts.hours_limit_per_week:
            needs_review = True
            reasons.append(f"Contract hours ({hours}) exceed the permitted limit ({limit}).")
        else:
            reasons.append(f"Contract hours ({hours}) are within the stated limit ({limit}).")
    elif facts.hours_limit == TriState.UNKNOWN:
        needs_review = True
        reasons.append(policy.REASON_HOURS_UNKNOWN)

    # Location restriction
    if facts.location_restriction == TriState.TRUE and facts.location_restriction_text:
        if facts.planned_work_city.lower() in facts.location_restriction_text.lower():
            reasons.append(policy.REASON_LOCATION_MATCH)
        else:
            needs_review = True
            reasons.append(
                f'Permit may have a regional/location restriction ("{facts.location_restriction_text}") '
                f"that may not match the planned work location ({facts.planned_work_city})."
            )
    elif facts.location_restriction == TriState.UNKNOWN:
        needs_review = True
        reasons.append(policy.REASON_LOCATION_UNKNOWN)

    # EU Blue Card
    if facts.is_qualification_permit:
        months_held = facts.months_on_qualification_permit or 0
        if facts.is_changing_employer and months_held < policy.QUALIFICATION_PERMIT_EMPLOYER_CHANGE_MIN_MONTHS:
            needs_review = True
            reasons.append(policy.REASON_BLUE_CARD_EARLY_CHANGE)
        elif facts.is_changing_employer:
            reasons.append(policy.REASON_BLUE_CARD_LATE_CHANGE)
        else:
            reasons.append(policy.REASON_BLUE_CARD_SAME_EMPLOYER)

    # Fiktionsbescheinigung
    if facts.document_category in policy.ALWAYS_REVIEW_DOCUMENT_CATEGORIES:
        needs_review = True
        if facts.continuation_of_same_job == TriState.TRUE:
            reasons.append(policy.REASON_FIKTION_CONTINUATION)
        elif facts.continuation_of_same_job == TriState.FALSE:
            reasons.append(policy.REASON_FIKTION_CHANGE)
        else:
            reasons.append(policy.REASON_FIKTION_UNKNOWN)

    if not reasons:
        reasons.append(policy.REASON_NO_RED_FLAGS)

    status = WorkStatus.NEEDS_REVIEW if needs_review else WorkStatus.ELIGIBLE
    logger.debug(
        "rtw_evaluation_complete",
        extra={
            "status": status.value,
            "document_category": facts.document_category.value,
            "reason_count": len(reasons),
        },
    )
    return DecisionResult(
        status=status,
        reasons=tuple(reasons),
        summary=str(policy.RTW_POLICY[status]["summary"]),
    )


def is_expiring_soon(
    valid_to: date,
    today: Optional[date] = None,
    threshold_days: int = policy.EXPIRING_SOON_DAYS,
) -> bool:
    """True when a still-valid document expires within ``threshold_days``."""
    today = today or date.today()
    days_until_expiry = (valid_to - today).days
    return 0 < days_until_expiry <= threshold_days
