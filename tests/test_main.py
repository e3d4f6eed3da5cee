from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

import document_reader
import main
from ai_review.ai_review_models import AiOpinion
from evidence_models import DocumentExtraction, ScannedDocumentType
from rate_limiter import SlidingWindowRateLimiter
from rtw_rules.decision_policy import RTW_POLICY
from rtw_rules.rtw_rules_models import WorkStatus
from submission_service import PublicSubmissionService
from upload_token import INVALID_TOKEN_MESSAGE, UploadGrant, UploadTokenSigner


def _recognizer(document):
    return DocumentExtraction(
        source_name=document.filename,
        raw_text="Elektronischer Aufenthaltstitel",
        document_type_guess=ScannedDocumentType.EAT,
    )


@pytest.fixture
def signer(monkeypatch):
    signer = UploadTokenSigner(b"test-secret")
    ai_review = MagicMock()
    ai_review.assess.return_value = AiOpinion()

    monkeypatch.setattr(main, "upload_signer", signer)
    monkeypatch.setattr(
        main,
        "submission_service",
        PublicSubmissionService(signer=signer, ai_review=ai_review, recognizer=_recognizer),
    )
    monkeypatch.setattr(main, "submission_rate_limiter", SlidingWindowRateLimiter(limit=1, window_seconds=60))
    return signer


@pytest.fixture
def client():
    return TestClient(main.app)


def _token(signer: UploadTokenSigner) -> str:
    return signer.issue(UploadGrant.create("hr-user-1", "employee-42"))


def _pdf_upload(name: str = "front.pdf"):
    return ("documents", (name, b"%PDF-1.4", "application/pdf"))


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/healthz").json() == {"status": "ok"}


def test_validate_accepts_signed_link(client, signer):
    response = client.get("/public-upload/validate", params={"token": _token(signer)})

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["subjectId"] == "employee-42"


@pytest.mark.parametrize("params", [{}, {"token": "forged.token"}])
def test_validate_rejects_bad_links(client, signer, params):
    response = client.get("/public-upload/validate", params=params)

    assert response.status_code == 401
    assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}


def test_submit_returns_guardrail_outcome(client, signer):
    response = client.post(
        "/public-upload/submit",
        data={"token": _token(signer)},
        files=[_pdf_upload("front.pdf"), _pdf_upload("back.pdf")],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "NEEDS_REVIEW"
    assert body["needsHumanAttention"] is True
    assert body["conflictNote"] is None
    assert body["documents"] == ["front.pdf", "back.pdf"]
    assert body["reasons"]
    assert body["guidance"]["title"].startswith("NEEDS REVIEW")


def test_submit_without_token_is_unauthorized(client, signer):
    response = client.post("/public-upload/submit", files=[_pdf_upload()])

    assert response.status_code == 401
    assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}


def test_submit_rejects_unsupported_files(client, signer):
    response = client.post(
        "/public-upload/submit",
        data={"token": _token(signer)},
        files=[("documents", ("notes.txt", b"hello", "text/plain"))],
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


def test_submit_without_documents_is_bad_request(client, signer):
    response = client.post("/public-upload/submit", data={"token": _token(signer)})
    assert response.status_code == 400


def test_submit_is_rate_limited_per_employee(client, signer):
    token = _token(signer)

    first = client.post("/public-upload/submit", data={"token": token}, files=[_pdf_upload()])
    second = client.post("/public-upload/submit", data={"token": token}, files=[_pdf_upload()])

    assert first.status_code == 200
    assert second.status_code == 429


def test_submit_rejects_declared_mime_type_even_with_allowed_extension(client, signer):
    response = client.post(
        "/public-upload/submit",
        data={"token": _token(signer)},
        files=[("documents", ("evil.pdf", b"<html></html>", "text/html"))],
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


def test_submit_rejects_oversized_file_without_reading_it_whole(client, signer, monkeypatch):
    monkeypatch.setattr(document_reader, "MAX_UPLOAD_BYTES", 10)
    process = MagicMock()
    monkeypatch.setattr(main.submission_service, "process", process)

    reads = []
    original_read = StarletteUploadFile.read

    async def _recording_read(self, size=-1):
        data = await original_read(self, size)
        reads.append(len(data))
        return data

    monkeypatch.setattr(StarletteUploadFile, "read", _recording_read)

    response = client.post(
        "/public-upload/submit",
        data={"token": _token(signer)},
        files=[("documents", ("big.pdf", b"x" * 5_000_004, "application/pdf"))],
    )

    assert response.status_code == 400
    assert "too large" in response.json()["detail"]
    assert all(length <= 11 for length in reads)
    process.assert_not_called()


def test_submit_rejects_too_many_files_before_reading(client, signer, monkeypatch):
    monkeypatch.setattr(document_reader, "MAX_UPLOAD_FILES", 1)
    process = MagicMock()
    monkeypatch.setattr(main.submission_service, "process", process)

    response = client.post(
        "/public-upload/submit",
        data={"token": _token(signer)},
        files=[_pdf_upload("front.pdf"), _pdf_upload("back.pdf")],
    )

    assert response.status_code == 400
    assert "at most 1" in response.json()["detail"]
    process.assert_not_called()


def test_submit_returns_recommended_action(client, signer):
    response = client.post("/public-upload/submit", data={"token": _token(signer)}, files=[_pdf_upload()])

    assert response.status_code == 200
    assert response.json()["recommendedAction"] == RTW_POLICY[WorkStatus.NEEDS_REVIEW]["recommended_actions"]
