# rtw_rules_models.py

from datetime import date
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TriState(str, Enum):
    TRUE = "TRUE"
    FALSE = "FALSE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def coerce(cls, value: Any) -> "TriState":
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.TRUE
        if value is False:
            return cls.FALSE
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized in cls.__members__:
                return cls[normalized]
        raise ValueError(f"tri-state value must be true, false or unknown, got {value!r}")


class CitizenshipCategory(str, Enum):
    EU_EEA_CH = "EU_EEA_CH"
    THIRD_COUNTRY = "THIRD_COUNTRY"


class DocumentCategory(str, Enum):
    EU_BLUE_CARD = "EU_BLUE_CARD"
    EAT_EMPLOYMENT = "EAT_EMPLOYMENT"
    RESIDENCE_PERMIT_EMPLOYMENT = "RESIDENCE_PERMIT_EMPLOYMENT"
    STUDENT_PERMIT = "STUDENT_PERMIT"
    JOB_SEEKER = "JOB_SEEKER"
    FIKTIONSBESCHEINIGUNG = "FIKTIONSBESCHEINIGUNG"
    VISITOR_OR_NO_WORK = "VISITOR_OR_NO_WORK"
    OTHER = "OTHER"


class EmploymentPermission(str, Enum):
    ANY_EMPLOYMENT_ALLOWED = "ANY_EMPLOYMENT_ALLOWED"
    EMPLOYMENT_ALLOWED_WITH_LIMITS = "EMPLOYMENT_ALLOWED_WITH_LIMITS"
    EMPLOYMENT_NOT_ALLOWED = "EMPLOYMENT_NOT_ALLOWED"
    UNCLEAR = "UNCLEAR"


class WorkStatus(str, Enum):
    ELIGIBLE = "ELIGIBLE"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    NEEDS_REVIEW = "NEEDS_REVIEW"


class PermitFacts(BaseModel):
    """Legally relevant attributes of one residence/work title."""

    model_config = ConfigDict(frozen=True)

    citizenship_category: CitizenshipCategory
    document_category: DocumentCategory
    valid_from: Optional[date] = Field(None, description="First day of validity")
    valid_to: date = Field(..., description="Last day of validity")
    employment_permission: EmploymentPermission

    hiring_employer_name: str = Field(default="", description="The company doing the hiring")
    employer_tie: TriState = TriState.UNKNOWN
    employer_on_permit: Optional[str] = None

    occupation_tie: TriState = TriState.UNKNOWN
    occupation_on_permit: Optional[str] = None
    planned_role: str = ""

    hours_limit: TriState = TriState.UNKNOWN
    hours_limit_per_week: Optional[float] = Field(None, ge=0)
    contract_hours_per_week: float = Field(default=0, ge=0)

    location_restriction: TriState = TriState.UNKNOWN
    location_restriction_text: Optional[str] = None
    planned_work_city: str = ""

    is_qualification_permit: bool = False
    is_changing_employer: bool = False
    months_on_qualification_permit: Optional[int] = Field(None, ge=0)

    continuation_of_same_job: TriState = TriState.UNKNOWN

    free_text_notes: Optional[str] = None

    @field_validator(
        "employer_tie",
        "occupation_tie",
        "hours_limit",
        "location_restriction",
        "continuation_of_same_job",
        mode="before",
    )
    @classmethod
    def validate_tri_state(cls, v: Any) -> TriState:
        if v is None:
            return TriState.UNKNOWN
        return TriState.coerce(v)


class DecisionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: WorkStatus
    reasons: Tuple[str, ...] = ()
    summary: str
