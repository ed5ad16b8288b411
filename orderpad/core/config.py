"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports two modes:
    - DEVELOPMENT: Uses mock services (no microphone or API key needed)
    - PRODUCTION: Uses the real microphone and the OpenAI API

The ENV_MODE variable controls which services are instantiated throughout
the application, so the same order flow can be exercised on a laptop
without hardware and then deployed on the restaurant tablet unchanged.

Usage:
    from orderpad.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock services
    else:
        # Use real services

Author: OrderPad Team
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock services
        PRODUCTION: Live environment with real microphone and API
        STAGING: Pre-production testing with real services
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class ReadFailurePolicy(str, Enum):
    """
    What the order table does when a read hits a storage error.

    Attributes:
        DEGRADE: Log the failure and return an empty result
        RAISE: Propagate the failure as a StorageError
    """
    DEGRADE = "degrade"
    RAISE = "raise"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    The OpenAI key should NEVER be committed to version control; in normal
    operation it lives in the credential store and OPENAI_API_KEY only seeds it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="OrderPad Voice Orders",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8081,
        description="API server port"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        default="sqlite+aiosqlite:///data/orders.db",
        description="SQLAlchemy async connection URL for the local order store"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )
    read_failure_policy: ReadFailurePolicy = Field(
        default=ReadFailurePolicy.DEGRADE,
        description="Whether failed reads return empty results or raise"
    )

    # ==========================================================================
    # OPENAI (TRANSCRIPTION + EXTRACTION)
    # ==========================================================================

    openai_api_key: Optional[str] = Field(
        default=None,
        description="Seed API key (sk-...) used when the credential store is empty"
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API"
    )
    transcription_model: str = Field(
        default="whisper-1",
        description="Speech-to-text model identifier"
    )
    extraction_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used to extract meal and drink items"
    )
    extraction_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for order extraction"
    )
    request_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound for a single remote call"
    )

    # ==========================================================================
    # RESTAURANT
    # ==========================================================================

    default_staff_name: str = Field(
        default="Chef",
        description="Staff name recorded when the caller does not supply one"
    )

    # ==========================================================================
    # FILE STORAGE
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    recordings_directory: str = Field(
        default="data/recordings",
        description="Directory where finished recordings are written"
    )
    credential_filename: str = Field(
        default="credentials.json",
        description="Credential file name inside the data directory"
    )
    static_directory: str = Field(
        default="static-build",
        description="Pre-built web client served under /app when present"
    )

    # ==========================================================================
    # MOCK SERVICES
    # ==========================================================================

    mock_latency_seconds: float = Field(
        default=1.5,
        ge=0.0,
        description="Simulated latency of the mock transcription pipeline"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("read_failure_policy", mode="before")
    @classmethod
    def validate_read_failure_policy(cls, v: str) -> ReadFailurePolicy:
        """Accept the policy name in any case."""
        if isinstance(v, ReadFailurePolicy):
            return v
        return ReadFailurePolicy(str(v).lower())

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def credential_path(self) -> Path:
        """Full path of the credential file."""
        return Path(self.data_directory) / self.credential_filename

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.openai_api_key and not self.credential_path.exists():
                missing.append("OPENAI_API_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment (tests do this).

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        The application logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    return logging.getLogger("orderpad")
