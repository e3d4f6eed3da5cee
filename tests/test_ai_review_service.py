from unittest.mock import MagicMock

from ai_review.ai_review_models import AiOpinion, AiStatus
from ai_review.ai_review_service import (
    MAX_PROMPT_SECTION_CHARS,
    AiReviewService,
    build_user_message,
    parse_ai_response,
)


def _client_returning(content):
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create.return_value = response
    return client


def test_assess_parses_model_reply():
    client = _client_returning(
        '{"status": "NEEDS_REVIEW", "explanation": "Employer unclear.", "missingInformation": ["contract"]}'
    )
    service = AiReviewService(client=client, model="test-model")

    opinion = service.assess("ELIGIBLE", "Blaue Karte EU", {"document_type": "EU_BLUE_CARD"})

    assert opinion.status == AiStatus.NEEDS_REVIEW
    assert opinion.explanation == "Employer unclear."
    assert opinion.missing_information == ["contract"]

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["temperature"] == 0
    assert kwargs["messages"][0]["role"] == "system"
    assert "Current rules-engine status: ELIGIBLE." in kwargs["messages"][1]["content"]


def test_assess_without_client_is_unknown(monkeypatch):
    monkeypatch.setattr("ai_review.ai_review_service.AI_REVIEW_API_KEY", None)
    service = AiReviewService(client=None, model=None)

    assert service.is_configured is False
    assert service.assess("ELIGIBLE", "text").status == AiStatus.UNKNOWN


def test_assess_transport_error_is_unknown():
    client = MagicMock()
    client.chat.completions.create.side_effect = TimeoutError("timed out")
    service = AiReviewService(client=client, model="test-model")

    opinion = service.assess("ELIGIBLE", "text")

    assert opinion.status == AiStatus.UNKNOWN
    assert "communicate" in opinion.explanation


def test_assess_empty_reply_is_unknown():
    service = AiReviewService(client=_client_returning(None), model="test-model")
    assert service.assess("ELIGIBLE", "text").status == AiStatus.UNKNOWN


def test_parse_reply_wrapped_in_prose():
    opinion = parse_ai_response('Sure! Here you go:\n```json\n{"status": "eligible", "explanation": "ok"}\n```')

    assert opinion.status == AiStatus.ELIGIBLE
    assert opinion.missing_information == []


def test_parse_reply_without_json_is_unknown():
    assert parse_ai_response("I cannot help with that.").status == AiStatus.UNKNOWN


def test_parse_reply_with_broken_json_is_unknown():
    assert parse_ai_response('{"status": "ELIGIBLE",}').status == AiStatus.UNKNOWN


def test_parse_reply_with_unexpected_values_is_tolerant():
    opinion = parse_ai_response('{"status": "PROBABLY", "explanation": 42, "missingInformation": "none"}')

    assert opinion.status == AiStatus.UNKNOWN
    assert opinion.explanation == "42"
    assert opinion.missing_information == []


def test_user_message_truncates_long_sections():
    message = build_user_message("NEEDS_REVIEW", "x" * (MAX_PROMPT_SECTION_CHARS + 500), None)

    assert "x" * MAX_PROMPT_SECTION_CHARS in message
    assert "x" * (MAX_PROMPT_SECTION_CHARS + 1) not in message
    assert "Extracted fields JSON: (none available)" in message


def test_user_message_defaults_missing_status():
    message = build_user_message(None, "", {})

    assert message.startswith("Current rules-engine status: NEEDS_REVIEW.")
    assert "OCR raw text: (none available)" in message


def test_unknown_opinion_helper():
    opinion = AiOpinion.unknown("why")
    assert opinion.status == AiStatus.UNKNOWN
    assert opinion.explanation == "why"
