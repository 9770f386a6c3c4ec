"""Configuration for PromptQA."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Global configuration."""

    # API (used only by the CLI's model adapter)
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    MODEL = os.getenv("MODEL", "claude-sonnet-4-20250514")
    MAX_TOKENS = int(os.getenv("MAX_TOKENS", "4096"))
    DEFAULT_TEMPERATURE = 0.7

    # QA gate
    VERIFIED_THRESHOLD = 85
    SUBMITTED_THRESHOLD = 70
    GOLD_THRESHOLD = 90

    # Penalty caps shared by the modality scorers
    CONTRADICTION_PENALTY = 10
    CONTRADICTION_PENALTY_CAP = 30
    INSTABILITY_PENALTY = 5
    INSTABILITY_PENALTY_CAP = 15

    # Submission scoring
    COMPLIANCE_ERROR_PENALTY = 5
    COMPLIANCE_WARNING_PENALTY = 2

    # Repair loop
    DEFAULT_MAX_RETRIES = 1
    MAX_REPAIR_ISSUES = 6

    # Asset QA heuristics
    MIN_REQUIRED_BLOCK_LENGTH = 20
    MIN_OPTIONAL_BLOCK_LENGTH = 10

    # Paths
    SUBMISSIONS_DIR = Path(os.getenv("PROMPTQA_SUBMISSIONS_DIR", "submissions"))

    # Logging
    LOG_LEVEL = os.getenv("PROMPTQA_LOG_LEVEL", "WARNING")
    LOG_DIR = os.getenv("PROMPTQA_LOG_DIR")
    LOG_JSON = _env_flag("PROMPTQA_LOG_JSON")
    LOG_BACKUPS = int(os.getenv("PROMPTQA_LOG_BACKUPS", "7"))

    @classmethod
    def ensure_dirs(cls):
        """Create the submissions directory."""
        cls.SUBMISSIONS_DIR.mkdir(parents=True, exist_ok=True)
        return cls.SUBMISSIONS_DIR
