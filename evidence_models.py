# evidence_models.py
"""
Pydantic models for per-document OCR guesses and the merged evidence record.
Both are immutable once built; the aggregator derives one from many.
"""

from datetime import date
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ScannedDocumentType(str, Enum):
    EU_BLUE_CARD = "EU_BLUE_CARD"
    EAT = "EAT"
    FIKTIONSBESCHEINIGUNG = "FIKTIONSBESCHEINIGUNG"
    UNRECOGNIZED = "UNRECOGNIZED"


class PermissionGuess(str, Enum):
    ANY_EMPLOYMENT_ALLOWED = "ANY_EMPLOYMENT_ALLOWED"
    RESTRICTED = "RESTRICTED"
    UNKNOWN = "UNKNOWN"


class DocumentExtraction(BaseModel):
    """Best-effort guesses recognised from one uploaded file."""

    model_config = ConfigDict(frozen=True)

    source_name: str = Field(..., description="Uploaded file name")
    raw_text: str = Field(default="", description="Recognised text, empty when recognition failed")
    document_type_guess: ScannedDocumentType = ScannedDocumentType.UNRECOGNIZED
    document_number_guess: Optional[str] = None
    expiry_date_guess: Optional[str] = Field(None, description="ISO date; may not be a real calendar date")
    employer_name_guess: Optional[str] = None
    permission_guess: PermissionGuess = PermissionGuess.UNKNOWN


class AggregatedEvidence(BaseModel):
    """One consolidated record merged from every extraction in a submission."""

    model_config = ConfigDict(frozen=True)

    combined_raw_text: str
    document_type: ScannedDocumentType = ScannedDocumentType.UNRECOGNIZED
    document_number: Optional[str] = None
    expiry_date: Optional[date] = None
    employer_name: Optional[str] = None
    permission: PermissionGuess = PermissionGuess.UNKNOWN
    source_names: Tuple[str, ...] = ()

    def extracted_fields(self) -> dict:
        """Field guesses without the raw text, as handed to the AI reviewer."""
        return self.model_dump(mode="json", exclude={"combined_raw_text"})
