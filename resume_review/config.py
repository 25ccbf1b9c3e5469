"""Configuration loaded from environment variables."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


# Generation provider: "gemini" (REST via httpx) or "openai" (SDK)
LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "gemini")

# API keys – never hardcode
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_BASE: str = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

# Generation parameters (fixed)
GENERATION_TEMPERATURE: float = 0.7
GENERATION_TOP_K: int = 40
GENERATION_TOP_P: float = 0.95
GENERATION_MAX_OUTPUT_TOKENS: int = 2048

# HTTP / retry settings. None means no timeout on the generation request.
HTTP_TIMEOUT_SECONDS: Optional[float] = _optional_float("HTTP_TIMEOUT_SECONDS")
RATE_LIMIT_MAX_RETRIES: int = int(os.getenv("RATE_LIMIT_MAX_RETRIES", "3"))
RATE_LIMIT_BASE_DELAY_SECONDS: float = float(os.getenv("RATE_LIMIT_BASE_DELAY_SECONDS", "5.0"))

# Upload limits
MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
PDF_CONTENT_TYPE: str = "application/pdf"

# Text recovery: "heuristic" (byte-level scrape) or "pdfplumber"
TEXT_RECOVERY_MODE: str = os.getenv("TEXT_RECOVERY_MODE", "heuristic")
PRIMARY_PASS_MIN_CHARS: int = 50
RECOVERED_TEXT_MIN_CHARS: int = 20
EXTRACTED_TEXT_PREVIEW_CHARS: int = 500

# History persistence (single JSON document holding one key)
HISTORY_PATH: Path = Path(os.getenv("HISTORY_PATH", str(_base.parent / "data" / "history.json")))
HISTORY_KEY: str = os.getenv("HISTORY_KEY", "resumeAnalysisHistory")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
