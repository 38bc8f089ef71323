"""Runtime settings read from the environment (and a local .env file)."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.0-flash-001"
DEFAULT_MAX_QUESTION_LENGTH = 2000

# Generation parameters sent with every analysis request
TEMPERATURE = 0.7
TOP_K = 40
TOP_P = 0.95
MAX_OUTPUT_TOKENS = 2048


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_question_length: int = DEFAULT_MAX_QUESTION_LENGTH
    model_timeout: Optional[float] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    sentry_dsn: Optional[str] = None
    phoenix_api_key: Optional[str] = None
    port: int = 3000

    @property
    def ai_configured(self) -> bool:
        return bool(self.api_key)


def _optional_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if not value:
        return None
    return float(value)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build Settings once per process."""
    load_dotenv()
    origins = os.environ.get("CORS_ORIGINS", "*")
    return Settings(
        api_key=os.environ.get("OPENROUTER_API_KEY") or None,
        base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
        model=os.environ.get("DECISION_MODEL", DEFAULT_MODEL),
        max_question_length=int(
            os.environ.get("MAX_QUESTION_LENGTH", DEFAULT_MAX_QUESTION_LENGTH)
        ),
        model_timeout=_optional_float("MODEL_TIMEOUT_SECONDS"),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        sentry_dsn=os.environ.get("SENTRY_DSN") or None,
        phoenix_api_key=os.environ.get("PHOENIX_API_KEY") or None,
        port=int(os.environ.get("PORT", 3000)),
    )
