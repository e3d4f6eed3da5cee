"""Signed, time-bound links that let a candidate upload documents without logging in."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from upload_config import PUBLIC_UPLOAD_TTL_DAYS

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "."
INVALID_TOKEN_MESSAGE = "Invalid or expired upload link"


class InvalidUploadTokenError(Exception):
    """Raised for every rejected token; the message never says why."""

    def __init__(self) -> None:
        super().__init__(INVALID_TOKEN_MESSAGE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_epoch_ms(moment: datetime) -> int:
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def _from_epoch_ms(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=value)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class UploadGrant(BaseModel):
    """Who issued the link, which employee it is for, and when it stops working."""

    model_config = ConfigDict(frozen=True)

    issuer_id: str = Field(..., min_length=1, description="Authenticated user who created the link")
    subject_id: str = Field(..., min_length=1, description="Employee the documents belong to")
    expires_at: datetime = Field(..., description="Absolute expiry instant (UTC, millisecond precision)")

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return _from_epoch_ms(_to_epoch_ms(v))

    @classmethod
    def create(
        cls,
        issuer_id: str,
        subject_id: str,
        ttl: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> "UploadGrant":
        ttl = ttl if ttl is not None else timedelta(days=PUBLIC_UPLOAD_TTL_DAYS)
        return cls(issuer_id=issuer_id, subject_id=subject_id, expires_at=(now or _utcnow()) + ttl)

    def to_payload(self) -> dict:
        return {"uid": self.issuer_id, "empId": self.subject_id, "exp": _to_epoch_ms(self.expires_at)}

    @classmethod
    def from_payload(cls, payload: Any) -> "UploadGrant":
        expires_ms = payload.get("exp") if isinstance(payload, dict) else None
        if not isinstance(expires_ms, int) or isinstance(expires_ms, bool):
            raise ValueError("malformed upload grant payload")
        return cls(
            issuer_id=payload.get("uid"),
            subject_id=payload.get("empId"),
            expires_at=_from_epoch_ms(expires_ms),
        )


class UploadTokenSigner:
    """
    Issues and verifies HMAC-SHA-256 upload tokens of the form
    ``base64url(json payload) + "." + base64url(signature)``.

    Tokens are stateless: nothing is stored server-side, so an issued link stays
    valid until it expires or the secret is rotated.
    """

    def __init__(self, secret: bytes) -> None:
        if not secret:
            raise ValueError("upload token secret must not be empty")
        self._secret = bytes(secret)

    def _sign(self, encoded_payload: str) -> str:
        digest = hmac.new(self._secret, encoded_payload.encode("ascii"), hashlib.sha256).digest()
        return _b64url_encode(digest)

    def issue(self, grant: UploadGrant) -> str:
        payload_json = json.dumps(grant.to_payload(), separators=(",", ":"))
        encoded_payload = _b64url_encode(payload_json.encode("utf-8"))
        return f"{encoded_payload}{TOKEN_SEPARATOR}{self._sign(encoded_payload)}"

    def verify(self, token: str, now: Optional[datetime] = None) -> UploadGrant:
        """
        Returns the embedded grant, or raises InvalidUploadTokenError.

        The signature is checked in constant time before the payload is parsed;
        expired grants are rejected even when correctly signed.
        """
        if not isinstance(token, str):
            return self._reject("not_a_string")

        parts = token.split(TOKEN_SEPARATOR)
        if len(parts) != 2:
            return self._reject("wrong_segment_count")
        encoded_payload, received_signature = parts

        try:
            expected = self._sign(encoded_payload).encode("ascii")
            received = received_signature.encode("utf-8")
        except UnicodeError:
            return self._reject("non_ascii_payload")

        if not hmac.compare_digest(expected, received):
            return self._reject("signature_mismatch")

        try:
            grant = UploadGrant.from_payload(json.loads(_b64url_decode(encoded_payload)))
        except (binascii.Error, UnicodeError, ValueError, OverflowError, ValidationError):
            return self._reject("malformed_payload")

        if not (now or _utcnow()) < grant.expires_at:
            return self._reject("expired")

        return grant

    @staticmethod
    def _reject(reason: str) -> UploadGrant:
        logger.info("upload_token_rejected", extra={"reason": reason})
        raise InvalidUploadTokenError()
