"""
Recover readable text from uploaded resume PDFs. In-memory only.

The default "heuristic" mode does not parse PDF structure: it keeps bytes that
look like text. It only works when the PDF stores text in uncompressed,
single-byte content streams, and yields near-empty or garbled output for
compressed (e.g. Flate-encoded) or non-Latin PDFs. The "pdfplumber" mode uses
a real PDF text extractor and shares the same normalization and length check.
"""

import re
from io import BytesIO
from typing import Optional

import pdfplumber

from config import (
    MAX_UPLOAD_BYTES,
    PDF_CONTENT_TYPE,
    PRIMARY_PASS_MIN_CHARS,
    RECOVERED_TEXT_MIN_CHARS,
    TEXT_RECOVERY_MODE,
)
from errors import InputError, RecoveryError
from utils.logger import get_logger

logger = get_logger(__name__)

# Whitespace includes the Latin-1 no-break space (0xA0) common in WinAnsi PDFs
_WS = r" \t\n\x0b\x0c\r\xa0"
# Letters, digits, whitespace, @ . - ( )
_PRIMARY_CHAR = re.compile(rf"[^a-zA-Z0-9{_WS}@.\-()]")
# Same plus , ; : ! ? ' "
_BROAD_RUN = re.compile(rf"[a-zA-Z0-9{_WS}@.\-(),;:!?'\"]+")
_OUTSIDE_BROAD = re.compile(rf"[^a-zA-Z0-9_{_WS}@.\-(),;:!?'\"]")
_WHITESPACE = re.compile(rf"[{_WS}]+")

RECOVERY_FAILED_MESSAGE = (
    "Could not extract readable text from PDF. Please ensure the PDF contains selectable text."
)


def validate_upload(file_name: str, size: int, content_type: Optional[str] = None) -> None:
    """
    Reject anything that is not a PDF of at most 10 MB.
    The MIME type decides; the .pdf suffix is only checked when no type is given.
    """
    if content_type:
        is_pdf = content_type == PDF_CONTENT_TYPE
    else:
        is_pdf = (file_name or "").lower().strip().endswith(".pdf")
    if not is_pdf:
        logger.warning("Rejected upload %s (content_type=%s)", file_name, content_type)
        raise InputError("Please upload a PDF file only.")
    if size > MAX_UPLOAD_BYTES:
        logger.warning("Rejected upload %s: %s bytes", file_name, size)
        raise InputError("File size must be less than 10MB.")


def _primary_pass(file_bytes: bytes) -> str:
    """Treat each byte as one character and keep the text-like ones, in order."""
    return _PRIMARY_CHAR.sub("", file_bytes.decode("latin-1"))


def _fallback_pass(file_bytes: bytes) -> str:
    """Decode as UTF-8 (lenient) and join every readable run with spaces."""
    decoded = file_bytes.decode("utf-8", errors="replace")
    return " ".join(_BROAD_RUN.findall(decoded))


def normalize_text(text: str) -> str:
    """Drop characters outside the readable class, collapse whitespace, trim."""
    text = _OUTSIDE_BROAD.sub(" ", text or "")
    return _WHITESPACE.sub(" ", text).strip()


def _require_min_length(text: str) -> str:
    if len(text) < RECOVERED_TEXT_MIN_CHARS:
        raise RecoveryError(RECOVERY_FAILED_MESSAGE)
    return text


def recover_text_heuristic(file_bytes: bytes) -> str:
    """
    Best-effort byte-level text recovery.
    Falls back to UTF-8 decoding when the first pass keeps fewer than 50 characters.
    Raises RecoveryError if fewer than 20 characters survive.
    """
    text = _primary_pass(file_bytes)
    if len(text) < PRIMARY_PASS_MIN_CHARS:
        logger.info("Primary pass kept %s chars; falling back to UTF-8 runs", len(text))
        text = _fallback_pass(file_bytes)
    return _require_min_length(normalize_text(text))


def recover_text_pdfplumber(file_bytes: bytes) -> str:
    """Extract page text with pdfplumber, then normalize like the heuristic."""
    try:
        with pdfplumber.open(BytesIO(file_bytes)) as pdf:
            parts = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.exception("PDF extraction failed: %s", e)
        raise RecoveryError(RECOVERY_FAILED_MESSAGE) from e
    return _require_min_length(normalize_text("\n".join(parts)))


def recover_text(file_bytes: bytes, mode: Optional[str] = None) -> str:
    """
    Recover plain text from raw PDF bytes using the configured mode.
    Returns normalized text or raises RecoveryError.
    """
    m = (mode or TEXT_RECOVERY_MODE).strip().lower()
    if m == "pdfplumber":
        text = recover_text_pdfplumber(file_bytes)
    else:
        text = recover_text_heuristic(file_bytes)
    logger.info("Recovered %s chars from %s bytes (mode=%s)", len(text), len(file_bytes), m)
    return text
