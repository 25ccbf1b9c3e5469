"""Helper utilities for the Resume Review app."""

import time
from datetime import datetime, timezone
from typing import Optional

from config import EXTRACTED_TEXT_PREVIEW_CHARS


def format_file_size(size_bytes: int) -> str:
    """Human-readable size in kilobytes, e.g. '12.35 KB'."""
    return f"{size_bytes / 1024:.2f} KB"


def preview_text(text: str, max_chars: int = EXTRACTED_TEXT_PREVIEW_CHARS) -> str:
    """First max_chars characters of text followed by an ellipsis."""
    return (text or "")[:max_chars] + "..."


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_id(last_id: Optional[int] = None) -> int:
    """
    Millisecond creation timestamp usable as an entry identifier.
    Strictly greater than last_id so ids stay monotonic within a store.
    """
    now_ms = int(time.time() * 1000)
    if last_id is not None and now_ms <= last_id:
        return last_id + 1
    return now_ms


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (accepts a trailing 'Z'); None if invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
