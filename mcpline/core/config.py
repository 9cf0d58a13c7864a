"""
Configuration management for mcpline servers.
"""

import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class Settings(BaseSettings):
    """Server settings, read from MCPLINE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MCPLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server identity
    server_name: str = Field(default="mcpline", description="Implementation name advertised in the manifest")
    server_version: str = Field(default="1.0.0", description="Semantic version handed to every handler")

    # Logging
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Render logs as JSON instead of console output")

    # Resources
    resource_http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for http/https resource fetches",
    )
    resource_encoding: str = Field(default="utf-8", description="Encoding used to read file resources")

    # Transport
    handle_signals: bool = Field(
        default=True,
        description="Install SIGINT/SIGTERM handlers that stop the stdio transport",
    )

    @field_validator("server_version")
    @classmethod
    def _check_semver(cls, value: str) -> str:
        if not SEMVER_PATTERN.match(value):
            raise ValueError("server_version must look like MAJOR.MINOR.PATCH")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return normalized


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
