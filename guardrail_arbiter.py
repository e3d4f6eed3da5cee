"""Reconciles the rules-engine status with an independent AI opinion.

Disagreement never resolves to ELIGIBLE or NOT_ELIGIBLE: whichever side was
more permissive, a conflict always lands on NEEDS_REVIEW.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ai_review.ai_review_models import AiOpinion, AiStatus
from rtw_rules.rtw_rules_models import DecisionResult, WorkStatus

logger = logging.getLogger(__name__)


class GuardrailOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    final_status: WorkStatus
    summary: str
    reasons: Tuple[str, ...] = ()
    conflict_note: Optional[str] = None
    ai_status: AiStatus = AiStatus.UNKNOWN


def conflict_note_for(rules_status: WorkStatus, ai_status: AiStatus) -> str:
    return (
        f"Conflict between rules engine ({rules_status.value}) and AI review ({ai_status.value}); "
        "escalated to manual review."
    )


def arbitrate_status(rules_status: WorkStatus, ai_opinion: AiOpinion) -> Tuple[WorkStatus, Optional[str]]:
    if ai_opinion.status == AiStatus.UNKNOWN:
        return rules_status, None
    if ai_opinion.status.value == rules_status.value:
        return rules_status, None
    return WorkStatus.NEEDS_REVIEW, conflict_note_for(rules_status, ai_opinion.status)


def arbitrate(rules_result: DecisionResult, ai_opinion: AiOpinion) -> GuardrailOutcome:
    """
    Combine a rules decision with an AI opinion.

    Reasons are always ordered: rules reasons, then AI missing-information
    items, then the conflict note.
    """
    final_status, conflict_note = arbitrate_status(rules_result.status, ai_opinion)

    if ai_opinion.status == AiStatus.UNKNOWN:
        return GuardrailOutcome(
            final_status=final_status,
            summary=rules_result.summary,
            reasons=rules_result.reasons,
            ai_status=ai_opinion.status,
        )

    reasons = list(rules_result.reasons)
    reasons.extend(ai_opinion.missing_information)

    if conflict_note is None:
        summary = ai_opinion.explanation.strip() or rules_result.summary
    else:
        reasons.append(conflict_note)
        summary = conflict_note
        logger.info(
            "guardrail_conflict_escalated",
            extra={"rules_status": rules_result.status.value, "ai_status": ai_opinion.status.value},
        )

    return GuardrailOutcome(
        final_status=final_status,
        summary=summary,
        reasons=tuple(reasons),
        conflict_note=conflict_note,
        ai_status=ai_opinion.status,
    )
