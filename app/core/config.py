"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the in-memory order store (no MongoDB needed)
    - STAGING: Uses MongoDB, typically a shared test cluster
    - PRODUCTION: Uses MongoDB

The ENV_MODE variable controls which order store is instantiated,
enabling seamless switching between local testing and deployment.

Usage:
    from app.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # In-memory store
    else:
        # MongoDB
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MONGO_URL = "mongodb://localhost:27017"


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the in-memory store
        PRODUCTION: Live environment backed by MongoDB
        STAGING: Pre-production environment backed by MongoDB
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Connection strings with credentials should NEVER be committed to
    version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # API Configuration
        api_host: Host to bind the API server
        api_port: Port for the API server (PORT is honoured too)
        cors_allow_origins: Comma-separated list of allowed origins

        # MongoDB
        mongo_url: MongoDB connection string
        mongo_database: Database holding the orders collection
        orders_collection: Name of the orders collection
        mongo_server_selection_timeout_ms: Driver server selection timeout

        # Request handling
        db_operation_timeout: Seconds a single store operation may take
        strict_object_ids: Reject malformed order ids with 400
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
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
        default="Order Management API",
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
        default=8000,
        validation_alias=AliasChoices("api_port", "port"),
        description="API server port"
    )
    cors_allow_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    # ==========================================================================
    # MONGODB
    # ==========================================================================

    mongo_url: str = Field(
        default=DEFAULT_MONGO_URL,
        description="MongoDB connection URL"
    )
    mongo_database: str = Field(
        default="restaurant",
        description="MongoDB database name"
    )
    orders_collection: str = Field(
        default="orders",
        description="Collection storing order documents"
    )
    mongo_server_selection_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="Milliseconds the driver waits for a usable server"
    )

    # ==========================================================================
    # REQUEST HANDLING
    # ==========================================================================

    db_operation_timeout: float = Field(
        default=100.0,
        gt=0,
        description="Seconds a single store operation may block"
    )
    strict_object_ids: bool = Field(
        default=False,
        description="Answer 400 for malformed order ids instead of looking up the zero id"
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
    def use_mongo(self) -> bool:
        """Check if the MongoDB store should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Get allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

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

        if self.is_production and self.mongo_url == DEFAULT_MONGO_URL:
            missing.append("MONGO_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once
    and stay consistent across the application lifecycle.

    Returns:
        Settings: Configured application settings

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
        Configured root logger
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
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    return logging.getLogger("app")
