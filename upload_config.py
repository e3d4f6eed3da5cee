# upload_config.py
"""
Configuration for the public document submission flow and the AI reviewer.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

APP_ENV = os.getenv("APP_ENV", "development").lower()

PUBLIC_UPLOAD_TTL_DAYS = int(os.getenv("PUBLIC_UPLOAD_TTL_DAYS", "14"))
MAX_UPLOAD_FILES = int(os.getenv("MAX_UPLOAD_FILES", "5"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

SUBMISSION_RATE_LIMIT = int(os.getenv("SUBMISSION_RATE_LIMIT", "30"))
SUBMISSION_RATE_WINDOW_SECONDS = int(os.getenv("SUBMISSION_RATE_WINDOW_SECONDS", "3600"))

AI_REVIEW_API_KEY = os.getenv("AI_REVIEW_API_KEY")
AI_REVIEW_BASE_URL = os.getenv("AI_REVIEW_BASE_URL", "https://api.venice.ai/api/v1")
AI_REVIEW_MODEL = os.getenv("AI_REVIEW_MODEL")
AI_REVIEW_TIMEOUT_SECONDS = float(os.getenv("AI_REVIEW_TIMEOUT_SECONDS", "30"))

DEV_PUBLIC_UPLOAD_SECRET = "certia-dev-secret-do-not-use-in-production-replace-with-env-var"

if PUBLIC_UPLOAD_TTL_DAYS <= 0:
    raise ValueError(f"PUBLIC_UPLOAD_TTL_DAYS must be positive, got {PUBLIC_UPLOAD_TTL_DAYS}")


def is_production(env: Optional[str] = None) -> bool:
    """Check if we are running a production deployment."""
    return (env if env is not None else APP_ENV).lower() == "production"


def is_ai_review_configured() -> bool:
    """Check if the AI reviewer has both a key and a model."""
    return bool(AI_REVIEW_API_KEY and AI_REVIEW_MODEL)


def load_upload_secret(env: Optional[str] = None, secret: Optional[str] = None) -> bytes:
    """
    Resolve the signing secret for public upload links.

    Production deployments must set PUBLIC_UPLOAD_SECRET; anywhere else we fall
    back to a fixed development secret and say so loudly.
    """
    value = secret if secret is not None else os.getenv("PUBLIC_UPLOAD_SECRET")
    if value:
        return value.encode("utf-8")

    if is_production(env):
        raise RuntimeError("PUBLIC_UPLOAD_SECRET environment variable must be set in production")

    logger.warning(
        "public_upload_secret_missing_using_dev_secret",
        extra={"app_env": env if env is not None else APP_ENV},
    )
    return DEV_PUBLIC_UPLOAD_SECRET.encode("utf-8")
