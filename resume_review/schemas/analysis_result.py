"""Structured resume analysis returned by the generation API."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class AnalysisResult(BaseModel):
    """
    Resume analysis as produced by the LLM. Only personalDetails and rating are
    checked; every other field is kept as returned and may be absent or malformed.
    Unknown keys are preserved so history round-trips what the service sent.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    personal_details: Dict[str, Any] = Field(
        ..., alias="personalDetails", description="name, email, phone, linkedin, portfolio, location"
    )
    rating: Any = Field(..., description="Resume quality rating, 1-10")
    summary: Any = Field(default=None, description="Professional summary (2-3 sentences)")
    work_experience: Any = Field(
        default=None, alias="workExperience", description="company, position, duration, description"
    )
    education: Any = Field(default=None, description="institution, degree, duration, gpa")
    projects: Any = Field(default=None, description="name, description, technologies")
    certifications: Any = Field(default=None, description="List of certifications")
    technical_skills: Any = Field(default=None, alias="technicalSkills")
    soft_skills: Any = Field(default=None, alias="softSkills")
    improvement_areas: Any = Field(default=None, alias="improvementAreas")
    suggested_skills: Any = Field(default=None, alias="suggestedSkills")

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict using the service's camelCase keys."""
        return self.model_dump(by_alias=True, mode="json", exclude_unset=True)
