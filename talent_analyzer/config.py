"""
Environment configuration.

- Loads .env once for the whole app
- Validates required credentials at boot (RuntimeError lists what is missing)
- Holds the tuning constants used by the pipeline
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv(override=False)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
ENVIRONMENTS = ("development", "production", "test")

# Report cache: 50 reports for 10 minutes
REPORT_CACHE_SIZE = 50
REPORT_CACHE_TTL_SECONDS = 10 * 60

# Local rate limit: 20 analyses per client per hour
RATE_LIMIT_MAX_REQUESTS = 20
RATE_LIMIT_WINDOW_SECONDS = 60 * 60
RATE_LIMIT_SWEEP_SECONDS = 5 * 60

# GitHub fetch budget
MAX_REPOS = 30
MAX_CONTENT_REPOS = 8
GITHUB_RESPONSE_TTL_SECONDS = 10 * 60

# Wall-clock ceiling for one analysis request
ANALYSIS_TIMEOUT_SECONDS = 60


@dataclass(frozen=True)
class Settings:
    github_token: str
    gemini_api_key: str
    gemini_model: str = DEFAULT_GEMINI_MODEL
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Raises RuntimeError naming every missing credential so boot fails fast.
    """
    github_token = (os.getenv("GITHUB_TOKEN") or "").strip()
    gemini_api_key = (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or "").strip()

    missing = []
    if not github_token:
        missing.append("GITHUB_TOKEN")
    if not gemini_api_key:
        missing.append("GEMINI_API_KEY")
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Check your .env file."
        )

    environment = os.getenv("ENVIRONMENT", "development").lower()
    if environment not in ENVIRONMENTS:
        raise RuntimeError(
            f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}, got '{environment}'"
        )

    return Settings(
        github_token=github_token,
        gemini_api_key=gemini_api_key,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        environment=environment,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
