"""Resume upload pipeline: text recovery, LLM analysis, history entry assembly."""

from resume_pipeline.resume_analyzer import analyze_resume, run_resume_pipeline
from resume_pipeline.text_extractor import recover_text, validate_upload

__all__ = ["run_resume_pipeline", "analyze_resume", "recover_text", "validate_upload"]
