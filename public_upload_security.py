"""Shared helpers for validating public upload links at the HTTP edge."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from upload_token import INVALID_TOKEN_MESSAGE, InvalidUploadTokenError, UploadGrant, UploadTokenSigner


def verify_upload_request(
    token: Optional[str],
    signer: Optional[UploadTokenSigner],
    now: Optional[datetime] = None,
) -> UploadGrant:
    """Validate the token of an anonymous upload request and return its grant."""
    if signer is None:
        raise HTTPException(status_code=500, detail="Public upload signing secret not configured")

    if not token:
        raise HTTPException(status_code=401, detail=INVALID_TOKEN_MESSAGE)

    try:
        return signer.verify(token, now=now)
    except InvalidUploadTokenError as exc:
        raise HTTPException(status_code=401, detail=INVALID_TOKEN_MESSAGE) from exc
