# main.py

from dotenv import load_dotenv
load_dotenv()

import logging
import time
import uuid
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from document_reader import (
    SubmissionRejectedError,
    UploadedDocument,
    check_upload_count,
    check_upload_size,
    check_upload_type,
    upload_read_limit,
)
from public_upload_security import verify_upload_request
from rate_limiter import SlidingWindowRateLimiter
from status_guidance import get_status_guidance
from submission_service import PublicSubmissionService
from upload_config import APP_ENV, is_ai_review_configured, load_upload_secret
from upload_token import UploadTokenSigner


# Request Logging Middleware
request_logger = logging.getLogger("request_logging")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        start_time = time.time()

        actor = "API"
        if request.url.path.startswith("/public-upload"):
            actor = "Candidate"

        response = await call_next(request)

        latency_ms = (time.time() - start_time) * 1000

        # Query strings carry upload tokens, so only the path is logged.
        request_logger.info(
            "request_completed",
            extra={
                "request_id": request_id,
                "endpoint": request.url.path,
                "method": request.method,
                "actor": actor,
                "status_code": response.status_code,
                "latency_ms": round(latency_ms, 2),
            },
        )

        return response


app = FastAPI()
app.add_middleware(RequestLoggingMiddleware)

startup_logger = logging.getLogger("startup")

upload_signer = UploadTokenSigner(load_upload_secret())
submission_service = PublicSubmissionService(signer=upload_signer)
submission_rate_limiter = SlidingWindowRateLimiter()

if not is_ai_review_configured():
    startup_logger.warning("ai_review_not_configured", extra={"app_env": APP_ENV})


# ------------------------------------------------------------------
# Health check
# ------------------------------------------------------------------
def _healthy_response():
    return {"status": "ok"}


@app.get("/health")
def health():
    return _healthy_response()


@app.get("/healthz")
def healthz():
    return _healthy_response()


# ------------------------------------------------------------------
# Public upload
# ------------------------------------------------------------------
@app.get("/public-upload/validate")
def validate_public_upload(token: Optional[str] = None):
    grant = verify_upload_request(token, upload_signer)
    return {
        "valid": True,
        "subjectId": grant.subject_id,
        "expiresAt": grant.expires_at.isoformat(),
    }


async def _read_uploads(documents: List[UploadFile]) -> List[UploadedDocument]:
    """Buffer uploads one at a time, never reading past the size limit."""
    check_upload_count(len(documents))

    uploaded = []
    for index, document in enumerate(documents, start=1):
        filename = document.filename or f"document-{index}"
        check_upload_type(filename, document.content_type)
        if document.size is not None:
            check_upload_size(filename, document.size)

        data = await document.read(upload_read_limit())
        check_upload_size(filename, len(data))
        uploaded.append(UploadedDocument(filename=filename, content_type=document.content_type, data=data))
    return uploaded


@app.post("/public-upload/submit")
async def submit_public_upload(
    token: Optional[str] = Form(None),
    documents: Optional[List[UploadFile]] = File(None),
):
    grant = verify_upload_request(token, upload_signer)

    rate_limit = submission_rate_limiter.check(grant.subject_id)
    if not rate_limit.allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many submissions. Please wait a bit before trying again.",
        )

    try:
        uploaded = await _read_uploads(documents or [])
        result = await run_in_threadpool(submission_service.process, grant, uploaded)
    except SubmissionRejectedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    guidance = get_status_guidance(result.outcome.final_status)
    return {
        "submissionId": result.submission_id,
        "status": result.outcome.final_status.value,
        "summary": result.outcome.summary,
        "reasons": list(result.outcome.reasons),
        "conflictNote": result.outcome.conflict_note,
        "needsHumanAttention": guidance.needs_human_attention,
        "guidance": {"title": guidance.title, "description": guidance.description, "bullets": guidance.bullets},
        "recommendedAction": guidance.recommended_action,
        "expiringSoon": result.expiring_soon,
        "documents": list(result.evidence.source_names),
    }
