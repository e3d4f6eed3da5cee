"""Text-layer recognition for uploaded permit scans.

Digital PDFs and DOCX files carry their own text; image OCR is an external
service and is not attempted here. Any file we cannot read becomes an empty
extraction so the aggregator still sees one entry per upload.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

# TODO: Migrate from PyPDF2 to pypdf to resolve deprecation warnings when convenient.
import PyPDF2  # type: ignore[import-not-found]
from docx import Document

from evidence_models import DocumentExtraction
from ocr_parsers import build_extraction
from upload_config import MAX_UPLOAD_BYTES, MAX_UPLOAD_FILES

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {"application/pdf"}
IMAGE_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png"}
DOCX_MIME_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
ALLOWED_MIME_TYPES = PDF_MIME_TYPES | IMAGE_MIME_TYPES | DOCX_MIME_TYPES


class SubmissionRejectedError(ValueError):
    """Raised when an upload batch has the wrong shape (count, size or type)."""


@dataclass
class UploadedDocument:
    filename: str
    content_type: Optional[str]
    data: bytes


def extract_pdf_text(file_bytes: bytes) -> str:
    """
    Returns cleaned text from a PDF byte stream.
    """
    pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_bytes))
    text = ""

    for page in pdf_reader.pages:
        extracted = page.extract_text() or ""
        text += extracted + "\n"

    # Clean formatting
    return text.replace("\t", " ").strip()


def extract_docx_text(file_bytes: bytes) -> str:
    """
    Extracts plain text from a DOCX file byte buffer.
    """
    doc = Document(io.BytesIO(file_bytes))
    paragraphs = [p.text for p in doc.paragraphs]
    return "\n".join(paragraphs).strip()


def _resolve_kind(filename: str, content_type: Optional[str]) -> Optional[str]:
    """A declared content type decides; the extension is only used when none was sent."""
    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type:
        if content_type not in ALLOWED_MIME_TYPES:
            return None
        if content_type in PDF_MIME_TYPES:
            return "pdf"
        if content_type in DOCX_MIME_TYPES:
            return "docx"
        return "image"

    name = filename.lower()
    if name.endswith(".pdf"):
        return "pdf"
    if name.endswith(".docx"):
        return "docx"
    if name.endswith((".jpg", ".jpeg", ".png")):
        return "image"
    return None


def check_upload_count(count: int) -> None:
    if count == 0:
        raise SubmissionRejectedError("Please upload at least one document.")
    if count > MAX_UPLOAD_FILES:
        raise SubmissionRejectedError(f"You can upload at most {MAX_UPLOAD_FILES} documents at once.")


def check_upload_type(filename: str, content_type: Optional[str]) -> None:
    if _resolve_kind(filename, content_type) is None:
        raise SubmissionRejectedError(
            f"Unsupported file type for '{filename}'. Only PDF, DOCX, JPG, and PNG files are supported."
        )


def check_upload_size(filename: str, size: int) -> None:
    if size > MAX_UPLOAD_BYTES:
        raise SubmissionRejectedError(
            f"'{filename}' is too large. File size must be less than {MAX_UPLOAD_BYTES // (1024 * 1024)}MB."
        )


def upload_read_limit() -> int:
    """Bytes to read from an upload stream; one past the limit so oversize files show up."""
    return MAX_UPLOAD_BYTES + 1


def validate_upload_batch(documents: Sequence[UploadedDocument]) -> None:
    check_upload_count(len(documents))
    for document in documents:
        check_upload_type(document.filename, document.content_type)
        check_upload_size(document.filename, len(document.data))


def empty_extraction(source_name: str) -> DocumentExtraction:
    return DocumentExtraction(source_name=source_name)


def recognize_document(document: UploadedDocument, today: Optional[date] = None) -> DocumentExtraction:
    """Never raises: unreadable files yield an empty, unrecognized extraction."""
    kind = _resolve_kind(document.filename, document.content_type)

    if kind == "image":
        logger.info(
            "document_image_requires_external_ocr",
            extra={"source": document.filename, "content_type": document.content_type},
        )
        return empty_extraction(document.filename)

    try:
        if kind == "pdf":
            raw_text = extract_pdf_text(document.data)
        elif kind == "docx":
            raw_text = extract_docx_text(document.data)
        else:
            return empty_extraction(document.filename)
    except Exception as exc:
        logger.warning(
            "document_text_extraction_failed",
            extra={"source": document.filename, "kind": kind, "error": str(exc)},
            exc_info=True,
        )
        return empty_extraction(document.filename)

    extraction = build_extraction(document.filename, raw_text, today=today)
    logger.info(
        "document_recognized",
        extra={
            "source": document.filename,
            "has_raw_text": bool(extraction.raw_text),
            "document_type_guess": extraction.document_type_guess.value,
            "has_document_number": extraction.document_number_guess is not None,
            "has_expiry_date": extraction.expiry_date_guess is not None,
        },
    )
    return extraction
