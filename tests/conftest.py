"""Shared fixtures for the Resume Review test suite."""

import copy
from typing import List

import pytest

from schemas.history_entry import HistoryEntry

SAMPLE_ANALYSIS = {
    "personalDetails": {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "linkedin": "Not specified",
        "portfolio": "Not specified",
        "location": "Berlin",
    },
    "summary": "Backend engineer with six years of Python experience.",
    "workExperience": [
        {
            "company": "Acme",
            "position": "Senior Engineer",
            "duration": "2019-2024",
            "description": "Cut API latency by 40%.",
        }
    ],
    "education": [
        {"institution": "TU Berlin", "degree": "BSc Computer Science", "duration": "2013-2017", "gpa": "Not specified"}
    ],
    "projects": [{"name": "Queue", "description": "Job queue", "technologies": ["Python", "Redis"]}],
    "certifications": ["AWS SAA"],
    "technicalSkills": ["Python", "SQL"],
    "softSkills": ["Communication"],
    "rating": 7,
    "improvementAreas": ["Add metrics"],
    "suggestedSkills": ["Kubernetes"],
}

_RESUME_BYTES = (
    b"%\xe2\xe3\xcf\xd3\n"
    b"Jane Doe - Senior Engineer (Acme)\n"
    b"jane@example.com  555-0100\n"
    b"Python SQL Redis and six years of backend work\n"
)


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sample_analysis() -> dict:
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_entry():
    def _make(entry_id: int, name: str = "Jane Doe", rating=7) -> HistoryEntry:
        record = copy.deepcopy(SAMPLE_ANALYSIS)
        record["personalDetails"]["name"] = name
        record["rating"] = rating
        record.update(
            {
                "id": entry_id,
                "fileName": f"{name.lower().replace(' ', '_')}.pdf",
                "fileSize": "12.00 KB",
                "analyzedAt": "2024-05-01T10:00:00.000Z",
                "extractedText": "Jane Doe Senior Engineer...",
            }
        )
        return HistoryEntry.model_validate(record)

    return _make


@pytest.fixture
def resume_bytes() -> bytes:
    """Uncompressed PDF-like bytes whose text survives the byte-level scrape."""
    return _RESUME_BYTES
