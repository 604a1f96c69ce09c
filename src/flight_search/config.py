"""Configuration management using Pydantic models."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT_SECONDS, DEFAULT_WEB_UI_PORT
from .models import Credentials

logger = logging.getLogger(__name__)


# Placeholder values that indicate unconfigured credentials
INVALID_PLACEHOLDERS = {
    "YOUR_AMADEUS_API_KEY_HERE",
    "YOUR_AMADEUS_API_SECRET_HERE",
    "",
}

# Environment variables that override the config file
ENV_API_KEY = "AMADEUS_API_KEY"
ENV_API_SECRET = "AMADEUS_API_SECRET"
ENV_API_URL = "AMADEUS_API_URL"


class AmadeusConfig(BaseModel):
    """Amadeus API configuration."""
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with a leading slash."""
        return v.rstrip("/")


class UpstreamConfig(BaseModel):
    """Outbound HTTP settings."""
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
    backoff_retries: int = Field(default=0, ge=0)


class ServerConfig(BaseModel):
    """HTTP API server settings."""
    host: str = "0.0.0.0"
    port: int = DEFAULT_WEB_UI_PORT


class Config(BaseModel):
    """Root configuration model."""
    amadeus: AmadeusConfig = Field(default_factory=AmadeusConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def _unless_placeholder(value: str) -> str:
    value = value.strip()
    return "" if value in INVALID_PLACEHOLDERS else value


class Settings:
    """Application settings loaded from config.yaml and the environment."""

    def __init__(self, config_path: Optional[Path] = None):
        """Load and validate configuration."""
        self.config_path = Path(config_path) if config_path else self._get_config_path()
        self._load_config()

    def _get_config_path(self) -> Path:
        """Get config file path based on environment."""
        if os.path.exists("/.dockerenv"):
            return Path("/app/data/config.yaml")
        return Path("data/config.yaml")

    def _read_yaml(self) -> dict:
        if not self.config_path.exists():
            logger.info(f"No config file at {self.config_path}, using defaults and environment")
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _load_config(self) -> None:
        """Load configuration from YAML using Pydantic."""
        try:
            config = Config(**self._read_yaml())
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise

        # Environment wins over the file
        api_key = os.environ.get(ENV_API_KEY) or config.amadeus.api_key or ""
        api_secret = os.environ.get(ENV_API_SECRET) or config.amadeus.api_secret or ""
        base_url = os.environ.get(ENV_API_URL) or config.amadeus.base_url

        # Placeholders count as missing so the token manager reports them
        self.credentials = Credentials(
            api_key=_unless_placeholder(api_key),
            api_secret=_unless_placeholder(api_secret),
            base_url=base_url.rstrip("/"),
        )
        self.request_timeout = config.upstream.request_timeout
        self.backoff_retries = config.upstream.backoff_retries
        self.host = config.server.host
        self.port = config.server.port
        self.log_level = config.log_level


def validate_credentials(settings: Settings) -> tuple[bool, list[str]]:
    """
    Validate that credentials are not placeholder values.
    Returns (is_valid, list_of_invalid_vars).
    """
    missing_or_invalid = []
    if not settings.credentials.api_key:
        missing_or_invalid.append(ENV_API_KEY)
    if not settings.credentials.api_secret:
        missing_or_invalid.append(ENV_API_SECRET)

    return len(missing_or_invalid) == 0, missing_or_invalid
