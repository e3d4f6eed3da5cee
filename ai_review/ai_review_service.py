# ai_review_service.py

import json
import logging
import re
from typing import Any, Dict, Optional

from openai import OpenAI
from pydantic import ValidationError

from ai_review.ai_review_models import AiOpinion
from ai_review.ai_review_prompt import AI_REVIEW_RESPONSE_INSTRUCTION, AI_REVIEW_SYSTEM_PROMPT
from upload_config import (
    AI_REVIEW_API_KEY,
    AI_REVIEW_BASE_URL,
    AI_REVIEW_MODEL,
    AI_REVIEW_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_SECTION_CHARS = 4000
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_user_message(
    rules_status: Optional[str],
    raw_text: Optional[str],
    extracted_fields: Optional[Dict[str, Any]],
) -> str:
    message = f"Current rules-engine status: {rules_status or 'NEEDS_REVIEW'}.\n\n"

    trimmed_raw_text = (raw_text or "")[:MAX_PROMPT_SECTION_CHARS]
    if trimmed_raw_text:
        message += f"OCR raw text:\n{trimmed_raw_text}\n\n"
    else:
        message += "OCR raw text: (none available)\n\n"

    extracted_json = ""
    if extracted_fields:
        try:
            extracted_json = json.dumps(extracted_fields, indent=2, default=str)
        except (TypeError, ValueError) as exc:
            logger.warning("ai_review_fields_not_serializable", extra={"error": str(exc)})
    trimmed_json = extracted_json[:MAX_PROMPT_SECTION_CHARS]
    if trimmed_json:
        message += f"Extracted fields JSON:\n{trimmed_json}\n\n"
    else:
        message += "Extracted fields JSON: (none available)\n\n"

    message += AI_REVIEW_RESPONSE_INSTRUCTION
    return message


def parse_ai_response(content: str) -> AiOpinion:
    match = _JSON_OBJECT.search(content or "")
    if not match:
        logger.warning("ai_review_response_missing_json")
        return AiOpinion.unknown("Failed to parse AI review response.")

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("ai_review_response_invalid_json", extra={"raw": content[:200]})
        return AiOpinion.unknown("Failed to parse AI review response.")

    if not isinstance(payload, dict):
        return AiOpinion.unknown("Failed to parse AI review response.")

    try:
        return AiOpinion(
            status=payload.get("status"),
            explanation=str(payload.get("explanation") or "No explanation provided."),
            missing_information=payload.get("missingInformation") or [],
        )
    except ValidationError as exc:
        logger.warning("ai_review_response_invalid_shape", extra={"error": str(exc)})
        return AiOpinion.unknown("Failed to parse AI review response.")


class AiReviewService:
    """
    Second opinion on a right-to-work check from an OpenAI-compatible chat model.

    ``assess`` never raises: missing configuration, transport errors and
    unparseable replies all come back as an UNKNOWN opinion.
    """

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        self.model = model or AI_REVIEW_MODEL
        self.client = client
        if self.client is None and AI_REVIEW_API_KEY and self.model:
            self.client = OpenAI(
                api_key=AI_REVIEW_API_KEY,
                base_url=AI_REVIEW_BASE_URL,
                timeout=AI_REVIEW_TIMEOUT_SECONDS,
            )

    @property
    def is_configured(self) -> bool:
        return self.client is not None and bool(self.model)

    def assess(
        self,
        rules_status: Optional[str],
        raw_text: Optional[str],
        extracted_fields: Optional[Dict[str, Any]] = None,
    ) -> AiOpinion:
        if not self.is_configured:
            logger.info("ai_review_not_configured")
            return AiOpinion.unknown("AI review integration is not configured.")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": AI_REVIEW_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_message(rules_status, raw_text, extracted_fields)},
                ],
                temperature=0,
            )
            content = response.choices[0].message.content
        except Exception as exc:
            logger.warning(
                "ai_review_request_failed",
                extra={"model": self.model, "error": str(exc)},
                exc_info=True,
            )
            return AiOpinion.unknown("Failed to communicate with the AI reviewer.")

        if not content:
            logger.warning("ai_review_empty_response", extra={"model": self.model})
            return AiOpinion.unknown("AI reviewer returned no response content.")

        opinion = parse_ai_response(content)
        logger.info(
            "ai_review_complete",
            extra={
                "model": self.model,
                "status": opinion.status.value,
                "missing_information_count": len(opinion.missing_information),
            },
        )
        return opinion
