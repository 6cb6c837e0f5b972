"""
Runtime configuration for the D&D Beyond source adapter.

Settings come from the environment, optionally seeded from a ``.env`` file.
The transformation core never reads configuration; only the fetcher and
logging setup do.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .logutils import logger

DEFAULT_PROXY_URL = "http://localhost:3100"


class Settings(BaseModel):
    """Adapter settings."""

    proxy_url: str = Field(default=DEFAULT_PROXY_URL, description="Base URL of the D&D Beyond relay")
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    log_level: str = Field(default="INFO", description="Level for the beyond-foundry logger")
    cobalt: str | None = Field(default=None, description="D&D Beyond session credential (CobaltSession)")


def load_settings(env_file: str | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        env_file: Optional path to a dotenv file. When omitted, python-dotenv
            searches for a ``.env`` file from the working directory upwards.

    Returns:
        Populated Settings instance.
    """
    if not load_dotenv(env_file):
        logger.debug("No .env file found, using process environment only")

    timeout_raw = os.getenv("BEYOND_FOUNDRY_TIMEOUT", "10")
    try:
        timeout = float(timeout_raw)
        if timeout <= 0:
            raise ValueError(timeout_raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid BEYOND_FOUNDRY_TIMEOUT '{timeout_raw}', defaulting to 10 seconds")
        timeout = 10.0

    return Settings(
        proxy_url=os.getenv("BEYOND_FOUNDRY_PROXY_URL", DEFAULT_PROXY_URL).rstrip("/"),
        timeout=timeout,
        log_level=os.getenv("BEYOND_FOUNDRY_LOG_LEVEL", "INFO"),
        cobalt=os.getenv("BEYOND_FOUNDRY_COBALT") or None,
    )
