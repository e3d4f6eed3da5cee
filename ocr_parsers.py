"""Keyword heuristics that turn recognised permit text into field guesses.

Every guess is best-effort: a miss returns ``None`` / ``UNRECOGNIZED`` /
``UNKNOWN`` rather than raising, so downstream rules fall back to review.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterator, List, Optional

from evidence_models import DocumentExtraction, PermissionGuess, ScannedDocumentType

DOCUMENT_NUMBER_KEYWORDS = ("dokumentennummer", "ausweis-nr", "card no", "nummer", "number", "nr.")
EXPIRY_KEYWORDS = ("gültig bis", "valid until", "expiry", "expires", "ablauf")
EMPLOYER_KEYWORDS = ("arbeitgeber", "employer", "firma", "company")
COMPANY_SUFFIXES = ("GMBH", "AG", "UG")

ANY_EMPLOYMENT_PHRASES = (
    "erwerbstätigkeit erlaubt",
    "beschäftigung gestattet",
    "any employment permitted",
    "employment permitted",
)
RESTRICTED_EMPLOYMENT_PHRASES = ("nur bei", "nur als", "nur in", "employment only")

_DATE_PATTERNS = (
    re.compile(r"(\d{2})\.(\d{2})\.(\d{4})"),
    re.compile(r"(\d{2})\.(\d{2})\.(\d{2})(?!\d)"),
    re.compile(r"(\d{2})/(\d{2})/(\d{4})"),
)
_NUMBER_NEAR_KEYWORD = re.compile(r"[A-Z0-9]{6,15}")
_NUMBER_ANYWHERE = re.compile(r"[A-Z0-9]{8,12}")
_EAT_WORD = re.compile(r"\beat\b")


def guess_document_type(text: str) -> ScannedDocumentType:
    lower_text = text.lower()

    if "blaue karte" in lower_text or "blue card" in lower_text:
        return ScannedDocumentType.EU_BLUE_CARD

    if (
        "elektronischer aufenthaltstitel" in lower_text
        or "aufenthaltstitel" in lower_text
        or _EAT_WORD.search(lower_text)
    ):
        return ScannedDocumentType.EAT

    if "fiktionsbescheinigung" in lower_text:
        return ScannedDocumentType.FIKTIONSBESCHEINIGUNG

    return ScannedDocumentType.UNRECOGNIZED


def guess_document_number(text: str) -> Optional[str]:
    lines = text.split("\n")

    for index, line in enumerate(lines):
        line_lower = line.lower()
        if not any(keyword in line_lower for keyword in DOCUMENT_NUMBER_KEYWORDS):
            continue
        if index + 1 < len(lines):
            match = _NUMBER_NEAR_KEYWORD.search(lines[index + 1])
            if match:
                return match.group(0)
        match = _NUMBER_NEAR_KEYWORD.search(line)
        if match:
            return match.group(0)

    match = _NUMBER_ANYWHERE.search(text)
    return match.group(0) if match else None


def _dates_in(text: str) -> Iterator[date]:
    for pattern in _DATE_PATTERNS:
        for match in pattern.finditer(text):
            day, month, raw_year = int(match.group(1)), int(match.group(2)), match.group(3)
            year = int(raw_year)
            if len(raw_year) == 2:
                year += 2000 if year < 50 else 1900
            try:
                yield date(year, month, day)
            except ValueError:
                continue


def guess_expiry_date(text: str, today: Optional[date] = None) -> Optional[str]:
    """
    Returns an ISO date string for the most likely expiry.

    A future date on or right after an expiry keyword line wins; otherwise the
    earliest future date anywhere in the text is used.
    """
    today = today or date.today()
    lines = text.split("\n")

    for index, line in enumerate(lines):
        if not any(keyword in line.lower() for keyword in EXPIRY_KEYWORDS):
            continue
        nearby = line + "\n" + (lines[index + 1] if index + 1 < len(lines) else "")
        for candidate in _dates_in(nearby):
            if candidate > today:
                return candidate.isoformat()

    future_dates: List[date] = [candidate for candidate in _dates_in(text) if candidate > today]
    if future_dates:
        return min(future_dates).isoformat()
    return None


def guess_employer_name(text: str) -> Optional[str]:
    lines = text.split("\n")

    for index, line in enumerate(lines):
        line_lower = line.lower()
        for keyword in EMPLOYER_KEYWORDS:
            position = line_lower.find(keyword)
            if position < 0:
                continue
            if index + 1 < len(lines) and len(lines[index + 1].strip()) > 3:
                return lines[index + 1].strip()
            after_keyword = line[position + len(keyword):].strip(" :\t")
            if len(after_keyword) > 3:
                return after_keyword

    for line in lines:
        trimmed = line.strip()
        if trimmed == trimmed.upper() and len(trimmed) > 5 and trimmed.endswith(COMPANY_SUFFIXES):
            return trimmed

    return None


def guess_employment_permission(text: str) -> PermissionGuess:
    lower_text = text.lower()

    if any(phrase in lower_text for phrase in ANY_EMPLOYMENT_PHRASES):
        return PermissionGuess.ANY_EMPLOYMENT_ALLOWED

    if any(phrase in lower_text for phrase in RESTRICTED_EMPLOYMENT_PHRASES):
        return PermissionGuess.RESTRICTED

    return PermissionGuess.UNKNOWN


def build_extraction(source_name: str, raw_text: str, today: Optional[date] = None) -> DocumentExtraction:
    if not raw_text.strip():
        return DocumentExtraction(source_name=source_name, raw_text=raw_text)

    return DocumentExtraction(
        source_name=source_name,
        raw_text=raw_text,
        document_type_guess=guess_document_type(raw_text),
        document_number_guess=guess_document_number(raw_text),
        expiry_date_guess=guess_expiry_date(raw_text, today=today),
        employer_name_guess=guess_employer_name(raw_text),
        permission_guess=guess_employment_permission(raw_text),
    )
