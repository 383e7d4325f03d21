# config.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MODEL = "gemini-2.0-flash"
# Flows that weigh a whole resume or transcript run on the pro tier
PRO_MODEL = "gemini-2.5-pro"
DEFAULT_TEMPERATURE = 0.3

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str]
    gemini_model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    def require_api_key(self) -> str:
        if not self.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not set in .env or environment variables.")
        return self.gemini_api_key


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Load environment variables (and a .env file if present) into Settings.
    """
    load_dotenv(dotenv_path)

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        temperature=float(os.getenv("GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    # The SDK's HTTP layer logs full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
