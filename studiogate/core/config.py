"""
studiogate — Configuration Management
======================================
Centralized, validated configuration with environment-based overrides.
All settings are loaded from environment variables with sensible defaults.

Usage:
    from studiogate.core.config import get_settings
    settings = get_settings()
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from studiogate.core.exceptions import ConfigurationError


class Environment(StrEnum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Root configuration object.

    All values can be overridden via environment variables prefixed with
    ``STUDIOGATE_``.
    Example: ``STUDIOGATE_DEFAULT_PRIMARY_CONTACT_WHEN_UNSET=false``
    """

    model_config = SettingsConfigDict(
        env_prefix="STUDIOGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────────
    app_name: str = "studiogate"
    environment: Environment = Environment.DEVELOPMENT

    # ── Logging & Observability ──────────────────────────────────────────
    log_level: str = Field(
        default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = Field(default="json", pattern=r"^(json|console)$")

    # ── Access policy ────────────────────────────────────────────────────
    # MVP fallback: a client without membership data is treated as the
    # primary contact of every project. Pending product-owner review.
    default_primary_contact_when_unset: bool = Field(
        default=True,
        description=(
            "Treat clients with no project membership data as primary "
            "contact for every project."
        ),
    )
    final_file_retention_days: int = Field(
        default=365,
        ge=1,
        description="Days after final delivery during which files stay accessible.",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton Settings instance.

    Cached so environment is read exactly once per process lifetime.
    Call ``get_settings.cache_clear()`` in tests to reset.

    Raises ``ConfigurationError`` if an environment override is invalid.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid studiogate settings: {exc}") from exc
