"""Utility exports."""

from .helpers import (
    format_file_size,
    parse_iso_datetime,
    preview_text,
    timestamp_id,
    utc_now_iso,
)
from .logger import get_logger

__all__ = [
    "get_logger",
    "format_file_size",
    "parse_iso_datetime",
    "preview_text",
    "timestamp_id",
    "utc_now_iso",
]
