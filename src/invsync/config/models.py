"""Pydantic configuration models for invsync."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class ControllerConfig(BaseModel):
    """Automation controller connection configuration."""

    url: str = "https://localhost"
    api_path: str = "/api/v2"
    username: str | None = None
    password: str | None = None
    token: str | None = None
    verify_ssl: bool = True
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=600.0)
    page_size: int = Field(default=200, ge=1, le=200)
    follow_pagination: bool = True

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format and strip trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("api_path")
    @classmethod
    def normalize_api_path(cls, v: str) -> str:
        """Ensure a single leading slash and no trailing slash."""
        return "/" + v.strip("/")

    @model_validator(mode="after")
    def validate_credentials(self) -> "ControllerConfig":
        """Basic auth needs both halves of the credential pair."""
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be set together")
        return self


class ReconcileConfig(BaseModel):
    """Reconciliation behavior configuration."""

    default_organization: int = Field(default=1, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class Config(BaseSettings):
    """Root configuration for invsync."""

    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "INVSYNC_",
        "env_nested_delimiter": "__",
    }
