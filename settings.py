"""
Runtime configuration for the Rizz Ads compliance engine.

Values come from the process environment; a local .env file is loaded first
so developers can keep GOOGLE_API_KEY out of their shell profile.
"""
import os
import logging
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


class Settings:
    PROJECT_NAME: str = "Rizz Ads Compliance"

    def __init__(self):
        # --- MODEL ---
        self.GOOGLE_API_KEY: Optional[str] = os.getenv("GOOGLE_API_KEY") or None
        self.MODEL_ID: str = os.getenv("MODEL_ID", "gemini-2.5-flash")
        self.AI_TEMPERATURE: float = _env_float("AI_TEMPERATURE", 0.3)

        # --- RETRY BUDGET ---
        self.AI_MAX_RETRIES: int = _env_int("AI_MAX_RETRIES", 2)
        self.AI_INITIAL_RETRY_DELAY: float = _env_float("AI_INITIAL_RETRY_DELAY", 1.0)

        # --- REQUEST LIMITS ---
        self.MAX_AD_COPY_LENGTH: int = _env_int("MAX_AD_COPY_LENGTH", 5000)

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
