"""Schema exports."""

from .analysis_result import AnalysisResult
from .history_entry import HistoryEntry

__all__ = ["AnalysisResult", "HistoryEntry"]
