"""Centralized policy definitions for right-to-work decisions.

Thresholds and the wording shown to HR live here so the decision engine,
guidance surfaces, and tests all share a single set of values.
"""

from __future__ import annotations

from typing import Dict

from rtw_rules.rtw_rules_models import DocumentCategory, WorkStatus

QUALIFICATION_PERMIT_EMPLOYER_CHANGE_MIN_MONTHS = 12
"""Months on an EU Blue Card before an employer change no longer needs authority sign-off."""

EXPIRING_SOON_DAYS = 60
"""Days before expiry at which a valid document is surfaced for a follow-up check."""

HARD_STOP_DOCUMENT_CATEGORIES = {DocumentCategory.VISITOR_OR_NO_WORK}
"""Residence titles that never permit employment for third-country nationals."""

ALWAYS_REVIEW_DOCUMENT_CATEGORIES = {DocumentCategory.FIKTIONSBESCHEINIGUNG}
"""Provisional titles whose work rights depend on an underlying application."""

SUMMARY_ELIGIBLE = "Likely eligible to work in Germany based on the provided residence title and conditions."
SUMMARY_NEEDS_REVIEW = (
    "Needs manual review - potential restrictions, missing information, or uncertainties were detected."
)
SUMMARY_EU_ELIGIBLE = "Eligible to work in Germany as EU/EEA/Swiss national."
SUMMARY_EU_EXPIRED = "Likely eligible as EU/EEA/Swiss national, but updated ID is required."
SUMMARY_EXPIRED = "Not eligible - residence title expired."
SUMMARY_NO_WORK_TITLE = "Not eligible - residence status does not permit employment."
SUMMARY_EMPLOYMENT_NOT_ALLOWED = "Not eligible - employment not permitted by the title."

REASON_EU_NATIONAL = (
    "EU/EEA/Swiss national - generally free right to work in Germany (subject to registration obligations)."
)
REASON_EU_EXPIRED = "Document appears to be expired - ask for updated ID/passport."
REASON_EXPIRED = "Residence title is expired - cannot be used for employment."
REASON_NO_WORK_TITLE = "Residence status appears to be a visit/tourist or no-work title."
REASON_EMPLOYMENT_NOT_ALLOWED = "Permit explicitly does not allow employment."
REASON_PERMISSION_UNCLEAR = "Work permission wording is unclear - manual review required."
REASON_EMPLOYER_MATCH = "Permit appears to name the same employer as the hiring company."
REASON_EMPLOYER_UNKNOWN = (
    "We could not determine from the information provided whether the permit is tied to a specific employer."
)
REASON_OCCUPATION_MATCH = "Planned role broadly matches the occupation indicated on the permit."
REASON_OCCUPATION_UNKNOWN = (
    "We could not determine from the information provided whether the permit is limited to a specific occupation."
)
REASON_HOURS_UNKNOWN = (
    "We could not determine from the information provided whether there is an hours-per-week limit on the permit."
)
REASON_LOCATION_MATCH = "Location restriction text appears to include the planned work city."
REASON_LOCATION_UNKNOWN = (
    "We could not determine from the information provided whether the permit has any regional/location restriction."
)
REASON_BLUE_CARD_EARLY_CHANGE = (
    "EU Blue Card holder changing employer within the first year - immigration authority "
    "notification/approval is typically required."
)
REASON_BLUE_CARD_LATE_CHANGE = (
    "EU Blue Card holder changing employer after 12+ months - still ensure authority has been "
    "notified according to current rules."
)
REASON_BLUE_CARD_SAME_EMPLOYER = "EU Blue Card holder continuing with same employer."
REASON_FIKTION_CONTINUATION = (
    "Fiktionsbescheinigung - appears to continue previous work-eligible title with same job/employer. "
    "Treat as temporary extension and review carefully."
)
REASON_FIKTION_CHANGE = (
    "Fiktionsbescheinigung with change of job/employer - work rights depend on underlying application; "
    "manual review required."
)
REASON_FIKTION_UNKNOWN = (
    "Fiktionsbescheinigung - unclear whether it continues a previous work-eligible title; manual review required."
)
REASON_NO_RED_FLAGS = "No obvious red flags based on the information provided."

RTW_POLICY: Dict[WorkStatus, Dict[str, object]] = {
    WorkStatus.ELIGIBLE: {
        "summary": SUMMARY_ELIGIBLE,
        "recommended_actions": "Verify the original document, then track the expiry date for a follow-up check.",
    },
    WorkStatus.NEEDS_REVIEW: {
        "summary": SUMMARY_NEEDS_REVIEW,
        "recommended_actions": "A human reviewer must clarify employer, occupation, hours, or region conditions.",
    },
    WorkStatus.NOT_ELIGIBLE: {
        "summary": "Not eligible - the title does not permit this employment.",
        "recommended_actions": "Do not start employment on this title; ask the candidate for other documents.",
    },
}
