"""Service exports."""

from .generation_client import (
    GeminiGenerationClient,
    GenerationClient,
    OpenAIGenerationClient,
    get_generation_client,
)
from .history_store import HistoryStore
from .report_service import history_table_rows, rating_label

__all__ = [
    "GenerationClient",
    "GeminiGenerationClient",
    "OpenAIGenerationClient",
    "get_generation_client",
    "HistoryStore",
    "history_table_rows",
    "rating_label",
]
