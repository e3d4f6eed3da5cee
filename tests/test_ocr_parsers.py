from datetime import date

import pytest

from evidence_models import PermissionGuess, ScannedDocumentType
from ocr_parsers import (
    build_extraction,
    guess_document_number,
    guess_document_type,
    guess_employer_name,
    guess_employment_permission,
    guess_expiry_date,
)

TODAY = date(2025, 3, 1)

EAT_SCAN = """BUNDESREPUBLIK DEUTSCHLAND
AUFENTHALTSTITEL
Dokumentennummer
Y4F7K2L9M
Gültig bis 31.12.2026
Erwerbstätigkeit erlaubt"""


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Blaue Karte EU", ScannedDocumentType.EU_BLUE_CARD),
        ("EU BLUE CARD", ScannedDocumentType.EU_BLUE_CARD),
        ("Elektronischer Aufenthaltstitel", ScannedDocumentType.EAT),
        ("eAT card", ScannedDocumentType.EAT),
        ("Fiktionsbescheinigung nach § 81", ScannedDocumentType.FIKTIONSBESCHEINIGUNG),
        ("theater tickets", ScannedDocumentType.UNRECOGNIZED),
        ("", ScannedDocumentType.UNRECOGNIZED),
    ],
)
def test_guess_document_type(text, expected):
    assert guess_document_type(text) == expected


def test_document_number_on_line_after_keyword():
    assert guess_document_number(EAT_SCAN) == "Y4F7K2L9M"


def test_document_number_on_keyword_line():
    assert guess_document_number("Card No: X12345678") == "X12345678"


def test_document_number_falls_back_to_any_long_token():
    assert guess_document_number("Card ID ABCD1234XY") == "ABCD1234XY"
    assert guess_document_number("hello world") is None


def test_expiry_prefers_keyword_line():
    assert guess_expiry_date(EAT_SCAN, today=TODAY) == "2026-12-31"


def test_expiry_keyword_may_be_followed_by_date_on_next_line():
    text = "Printed 01.01.2026\nValid until\n31.12.2027"
    assert guess_expiry_date(text, today=TODAY) == "2027-12-31"


def test_expiry_falls_back_to_earliest_future_date():
    text = "Issued 01.01.2020\nSomething 15.06.2027\nOther 01.03.2026"
    assert guess_expiry_date(text, today=TODAY) == "2026-03-01"


def test_expiry_handles_short_years_and_skips_impossible_dates():
    text = "31.02.2026\n01.06.26\n05/07/2028"
    assert guess_expiry_date(text, today=TODAY) == "2026-06-01"


def test_expiry_ignores_past_dates():
    assert guess_expiry_date("Gültig bis 01.01.2024", today=TODAY) is None


def test_employer_on_line_after_keyword():
    assert guess_employer_name("Arbeitgeber:\nACME Software GmbH") == "ACME Software GmbH"


def test_employer_after_keyword_on_same_line():
    assert guess_employer_name("Employer: Globex AG") == "Globex AG"


def test_employer_from_uppercase_company_line():
    assert guess_employer_name("Some text\nACME SOFTWARE GMBH") == "ACME SOFTWARE GMBH"
    assert guess_employer_name("nothing useful here") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Erwerbstätigkeit erlaubt", PermissionGuess.ANY_EMPLOYMENT_ALLOWED),
        ("Any employment permitted", PermissionGuess.ANY_EMPLOYMENT_ALLOWED),
        ("Beschäftigung nur bei Acme", PermissionGuess.RESTRICTED),
        ("Erwerbstätigkeit gestattet", PermissionGuess.UNKNOWN),
        ("Keine Angaben", PermissionGuess.UNKNOWN),
    ],
)
def test_guess_employment_permission(text, expected):
    assert guess_employment_permission(text) == expected


def test_build_extraction_collects_all_guesses():
    extraction = build_extraction("permit.pdf", EAT_SCAN, today=TODAY)

    assert extraction.source_name == "permit.pdf"
    assert extraction.document_type_guess == ScannedDocumentType.EAT
    assert extraction.document_number_guess == "Y4F7K2L9M"
    assert extraction.expiry_date_guess == "2026-12-31"
    assert extraction.employer_name_guess is None
    assert extraction.permission_guess == PermissionGuess.ANY_EMPLOYMENT_ALLOWED


def test_build_extraction_with_blank_text_is_empty():
    extraction = build_extraction("blank.pdf", "   ", today=TODAY)

    assert extraction.document_type_guess == ScannedDocumentType.UNRECOGNIZED
    assert extraction.document_number_guess is None
    assert extraction.expiry_date_guess is None
