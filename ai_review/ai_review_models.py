# ai_review_models.py

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AiStatus(str, Enum):
    ELIGIBLE = "ELIGIBLE"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    NEEDS_REVIEW = "NEEDS_REVIEW"
    UNKNOWN = "UNKNOWN"


class AiOpinion(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: AiStatus = AiStatus.UNKNOWN
    explanation: str = ""
    missing_information: List[str] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> AiStatus:
        if isinstance(v, AiStatus):
            return v
        if isinstance(v, str) and v.strip().upper() in AiStatus.__members__:
            return AiStatus[v.strip().upper()]
        return AiStatus.UNKNOWN

    @field_validator("missing_information", mode="before")
    @classmethod
    def validate_missing_information(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if str(item).strip()]

    @classmethod
    def unknown(cls, explanation: str) -> "AiOpinion":
        return cls(status=AiStatus.UNKNOWN, explanation=explanation)
