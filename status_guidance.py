"""HR-facing interpretation of each work status."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from rtw_rules.decision_policy import RTW_POLICY
from rtw_rules.rtw_rules_models import WorkStatus


@dataclass
class StatusGuidance:
    title: str
    description: str
    recommended_action: str
    bullets: List[str] = field(default_factory=list)
    needs_human_attention: bool = False


def get_status_guidance(status: WorkStatus) -> StatusGuidance:
    recommended_action = str(RTW_POLICY[status]["recommended_actions"])

    if status == WorkStatus.ELIGIBLE:
        return StatusGuidance(
            title="What ELIGIBLE usually means",
            description=(
                "Based on the current documents, this person appears eligible to work in Germany "
                "under the conditions shown."
            ),
            recommended_action=recommended_action,
            bullets=[
                "Verify that the scanned document matches the original.",
                "Check that the job offer respects any occupation or employer limitations.",
                "Track the expiry date and schedule a follow-up check before it expires.",
            ],
        )

    if status == WorkStatus.NOT_ELIGIBLE:
        return StatusGuidance(
            title="What NOT ELIGIBLE usually means",
            description="Based on the current documents, this person does not appear eligible to work in Germany.",
            recommended_action=recommended_action,
            bullets=[
                "Do not start or continue employment based solely on this permit.",
                "Confirm with the candidate whether they have other valid documents.",
                "Consider contacting legal counsel or the local immigration authority if this is unexpected.",
            ],
        )

    return StatusGuidance(
        title="NEEDS REVIEW: needs human attention",
        description=(
            "There are missing details, possible restrictions, or AI/rules conflicts. "
            "A human review is required before any decision."
        ),
        recommended_action=recommended_action,
        bullets=[
            "Carefully review the original document text (not just the scan).",
            "Clarify unclear conditions such as employer, hours, or region.",
            "Escalate to HR legal/compliance if you are unsure.",
        ],
        needs_human_attention=True,
    )
