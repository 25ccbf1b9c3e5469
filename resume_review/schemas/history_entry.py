"""History entry: an analysis plus metadata about the uploaded file."""

from pydantic import Field

from schemas.analysis_result import AnalysisResult


class HistoryEntry(AnalysisResult):
    """One completed analysis as stored in the history list."""

    id: int = Field(..., description="Creation timestamp in milliseconds; unique within a store")
    file_name: str = Field(..., alias="fileName", description="Uploaded file name")
    file_size: str = Field(..., alias="fileSize", description="Size formatted as 'N.NN KB'")
    analyzed_at: str = Field(..., alias="analyzedAt", description="ISO-8601 completion time")
    extracted_text: str = Field(
        default="", alias="extractedText", description="Preview of the recovered text"
    )
