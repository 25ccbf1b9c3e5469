"""Display helpers for analysis results. No UI logic; used by app layer."""

from typing import Any, Dict, List, Sequence

from schemas.history_entry import HistoryEntry
from utils.helpers import parse_iso_datetime

NOT_SPECIFIED = "Not specified"


def rating_value(rating: Any) -> float:
    """Numeric rating; anything non-numeric counts as 0."""
    try:
        return float(rating)
    except (TypeError, ValueError):
        return 0.0


def rating_label(rating: Any) -> str:
    r = rating_value(rating)
    if r >= 8:
        return "Excellent"
    if r >= 6:
        return "Good"
    if r >= 4:
        return "Fair"
    return "Needs Improvement"


def filled_stars(rating: Any, total: int = 5) -> int:
    """Number of filled stars out of total (star i is filled when i < rating / 2)."""
    half = rating_value(rating) / 2
    return sum(1 for i in range(total) if i < half)


def star_string(rating: Any, total: int = 5) -> str:
    filled = filled_stars(rating, total)
    return "★" * filled + "☆" * (total - filled)


def is_specified(value: Any) -> bool:
    """False for empty values and the LLM's 'Not specified' placeholder."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text != NOT_SPECIFIED


def as_list(value: Any) -> List[Any]:
    """
    Coerce a possibly malformed list field for rendering.
    None -> [], a single string or object -> [value], lists pass through without empties.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v not in (None, "")]
    if isinstance(value, str) and not value.strip():
        return []
    return [value]


def as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def format_analyzed_at(value: str, with_time: bool = True) -> str:
    """Render an ISO timestamp in local time; unparsable values are shown as-is."""
    dt = parse_iso_datetime(value)
    if dt is None:
        return str(value or "")
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S" if with_time else "%Y-%m-%d")


def history_table_rows(entries: Sequence[HistoryEntry]) -> List[Dict[str, Any]]:
    """Rows for the history table, one per entry, in insertion order."""
    rows = []
    for entry in entries:
        details = as_dict(entry.personal_details)
        rows.append(
            {
                "Name": details.get("name") or NOT_SPECIFIED,
                "Email": details.get("email") or NOT_SPECIFIED,
                "File": entry.file_name,
                "Rating": f"{entry.rating}/10 {star_string(entry.rating)}",
                "Analyzed": format_analyzed_at(entry.analyzed_at, with_time=False),
            }
        )
    return rows
