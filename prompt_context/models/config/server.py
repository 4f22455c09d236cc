"""Server configuration models."""

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_PROMPTS_DIR = PACKAGE_ROOT / "prompts"

_LOG_LEVEL_NAMES = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
}


class Environment(str, Enum):
    """Deployment environment; selects the MCP transport."""

    LOCAL = "local"
    PRODUCTION = "production"


class MatchStrategy(str, Enum):
    """How the matcher scans rule patterns."""

    LINEAR = "linear"
    AUTOMATON = "automaton"


class ServerSettings(BaseSettings):
    """Settings for the prompt context MCP server."""

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_CONTEXT_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Plain LOG_LEVEL and ENVIRONMENT are honoured as well as the prefixed names
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("PROMPT_CONTEXT_LOG_LEVEL", "LOG_LEVEL"),
    )
    environment: Environment = Field(
        default=Environment.LOCAL,
        validation_alias=AliasChoices("PROMPT_CONTEXT_ENVIRONMENT", "ENVIRONMENT"),
    )
    log_file: Path | None = None

    # HTTP settings, used by the production transport only
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # Engine settings
    prompts_dir: Path = DEFAULT_PROMPTS_DIR
    rules_file: Path | None = None
    match_strategy: MatchStrategy = MatchStrategy.LINEAR
    cache_documents: bool = True

    # Server identity
    server_name: str = "openfga-modeling-mcp-server"
    server_version: str = "1.0.0"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Map level names onto logging's; unknown levels fall back to INFO."""
        if not isinstance(v, str):
            return "INFO"
        return _LOG_LEVEL_NAMES.get(v.strip().upper(), "INFO")

    @field_validator("environment", "match_strategy", mode="before")
    @classmethod
    def lowercase_choice(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate host is not empty."""
        if not v or not v.strip():
            raise ValueError("Host cannot be empty")
        return v.strip()

    @property
    def transport(self) -> str:
        """Transport name derived from the environment."""
        if self.environment == Environment.PRODUCTION:
            return "sse"
        return "stdio"


__all__ = [
    "DEFAULT_PROMPTS_DIR",
    "Environment",
    "MatchStrategy",
    "ServerSettings",
]
