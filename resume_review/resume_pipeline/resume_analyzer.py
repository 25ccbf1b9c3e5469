"""LLM-based resume analysis: prompt, JSON extraction and shape validation."""

import asyncio
import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from errors import ParseError, ShapeError
from resume_pipeline.text_extractor import recover_text, validate_upload
from schemas.analysis_result import AnalysisResult
from schemas.history_entry import HistoryEntry
from services.generation_client import GenerationClient, get_generation_client
from utils.helpers import format_file_size, preview_text, timestamp_id, utc_now_iso
from utils.logger import get_logger

logger = get_logger(__name__)

RESUME_ANALYSIS_PROMPT = """You are an expert resume analyzer for a modern Applicant Tracking System (ATS).
Parse the resume text below and extract structured information with high accuracy.
Return ONLY a single JSON object matching this schema (no markdown, no extra text):
{{
  "personalDetails": {{
    "name": "extracted name or 'Not specified'",
    "email": "extracted email or 'Not specified'",
    "phone": "extracted phone or 'Not specified'",
    "linkedin": "extracted linkedin url or 'Not specified'",
    "portfolio": "extracted portfolio/website url or 'Not specified'",
    "location": "extracted location/address or 'Not specified'"
  }},
  "summary": "professional summary or objective (2-3 sentences)",
  "workExperience": [
    {{
      "company": "company name",
      "position": "job title",
      "duration": "employment period",
      "description": "brief, achievement-oriented job description"
    }}
  ],
  "education": [
    {{
      "institution": "school/university name",
      "degree": "degree type and field",
      "duration": "study period",
      "gpa": "gpa if mentioned or 'Not specified'"
    }}
  ],
  "projects": [
    {{
      "name": "project name",
      "description": "project description",
      "technologies": ["tech1", "tech2"]
    }}
  ],
  "certifications": ["certification1", "certification2"],
  "technicalSkills": ["skill1", "skill2", "skill3"],
  "softSkills": ["skill1", "skill2", "skill3"],
  "rating": 7,
  "improvementAreas": ["area1", "area2"],
  "suggestedSkills": ["skill1", "skill2"]
}}
- Keys and structure must match exactly; do not add or rename keys.
- Use the exact string 'Not specified' for anything that is missing.
- rating: 1-10, judged on clarity, completeness and keyword relevance for the likely target roles.
- improvementAreas: specific, actionable ATS feedback (formatting, keyword density, missing metrics or sections).
- suggestedSkills: high-demand skills or technologies that fit the candidate's experience and industry.
- workExperience descriptions: concise, achievement-focused, using action verbs where present.
- projects technologies: one technology per string.

Resume Text:
{resume_text}"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_CODE_FENCE = re.compile(r"```(?:json)?")


def build_analysis_prompt(resume_text: str) -> str:
    return RESUME_ANALYSIS_PROMPT.format(resume_text=resume_text)


def extract_json_object(text: str) -> dict:
    """
    Pull the brace-delimited JSON object out of an LLM reply that may wrap it in
    prose or markdown code fences. Raises ParseError when none can be parsed.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ParseError("No valid JSON found in API response")
    cleaned = _CODE_FENCE.sub("", match.group(0)).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in API response: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise ParseError("No valid JSON found in API response")
    return parsed


def validate_analysis(parsed: dict) -> AnalysisResult:
    """Require personalDetails and rating; everything else is trusted as returned."""
    if not parsed.get("personalDetails") or not parsed.get("rating"):
        raise ShapeError("Invalid data structure from API")
    try:
        return AnalysisResult.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Analysis shape validation failed: %s", e)
        raise ShapeError("Invalid data structure from API") from e


async def analyze_resume(
    resume_text: str,
    client: Optional[GenerationClient] = None,
) -> AnalysisResult:
    """Send recovered text to the generation API and return the validated analysis."""
    client = client or get_generation_client()
    generated = await client.generate(build_analysis_prompt(resume_text))
    result = validate_analysis(extract_json_object(generated))
    logger.info("Resume analysis complete: rating=%s", result.rating)
    return result


def build_history_entry(
    analysis: AnalysisResult,
    file_name: str,
    file_size: int,
    resume_text: str,
    entry_id: Optional[int] = None,
    analyzed_at: Optional[str] = None,
) -> HistoryEntry:
    """Attach file metadata and a text preview to an analysis."""
    record: dict[str, Any] = analysis.to_record()
    record.update(
        {
            "fileName": file_name,
            "fileSize": format_file_size(file_size),
            "analyzedAt": analyzed_at or utc_now_iso(),
            "id": entry_id if entry_id is not None else timestamp_id(),
            "extractedText": preview_text(resume_text),
        }
    )
    return HistoryEntry.model_validate(record)


def run_resume_pipeline(
    file_bytes: bytes,
    file_name: str,
    content_type: Optional[str] = None,
    client: Optional[GenerationClient] = None,
    entry_id: Optional[int] = None,
) -> HistoryEntry:
    """
    Run the full upload pipeline: validate, recover text, analyze, build the entry.
    Uses asyncio to call the async client; safe to call from sync context (e.g. Streamlit).
    Raises a ResumeReviewError subclass on any failure; never persists anything.
    """
    validate_upload(file_name, len(file_bytes), content_type)
    resume_text = recover_text(file_bytes)
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        analysis = loop.run_until_complete(analyze_resume(resume_text, client))
    finally:
        loop.close()
    return build_history_entry(analysis, file_name, len(file_bytes), resume_text, entry_id)
