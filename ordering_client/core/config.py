"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the in-memory mock transport (no API key needed)
    - STAGING: Uses the real catalog/payment API with test credentials
    - PRODUCTION: Uses the real catalog/payment API

The ENV_MODE variable controls which transport is instantiated for an
ordering session, enabling seamless switching between local testing and
a live catalog.

Usage:
    from ordering_client.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use the mock transport
    else:
        # Use the HTTP transport
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the mock transport
        PRODUCTION: Live catalog and payment API
        STAGING: Real API with a test partner key
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Language(str, Enum):
    """Catalog languages understood by the upstream API."""
    ENGLISH = "en"
    HINDI = "hi"

    @property
    def display_name(self) -> str:
        return {"en": "English", "hi": "हिंदी"}[self.value]

    def toggled(self) -> "Language":
        return Language.HINDI if self is Language.ENGLISH else Language.ENGLISH


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    The partner API key should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Upstream API
        api_base_url: Base URL of the catalog/payment API
        partner_api_key: Value sent in the X-Partner-API-Key header
        request_timeout: Per-request timeout in seconds

        # Catalog
        catalog_page_size: Cuisines requested per page
        catalog_max_retries: Retries after a failed page fetch
        catalog_backoff_base: First backoff delay in seconds (doubles)

        # Top dishes
        top_dish_sample_pages: Maximum pages fetched for the sample
        top_dish_sample_target: Stop sampling once this many cuisines are seen
        top_dish_min_rating: Rating threshold for the filtered sample
        top_dish_count: Number of dishes to surface

        # Cart & orders
        tax_rate: Rate applied for each of the two flat taxes
        order_history_capacity: Number of recent orders kept

        # Storage
        data_directory: Directory holding the key-value store
        store_filename: JSON file name of the key-value store
        store_lock_timeout: Seconds to wait for the store lock
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
        default="Cuisine Ordering Client",
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
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # UPSTREAM CATALOG / PAYMENT API
    # ==========================================================================

    api_base_url: str = Field(
        default="https://uat.onebanc.ai",
        description="Base URL of the catalog and payment API"
    )
    partner_api_key: Optional[str] = Field(
        default=None,
        description="Partner API key sent with every upstream request"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Upstream request timeout in seconds"
    )

    # ==========================================================================
    # CATALOG
    # ==========================================================================

    catalog_page_size: int = Field(
        default=10,
        ge=1,
        description="Number of cuisines requested per page"
    )
    catalog_max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries after a failed catalog page fetch"
    )
    catalog_backoff_base: float = Field(
        default=0.5,
        ge=0,
        description="Initial backoff delay in seconds, doubled per retry"
    )

    # ==========================================================================
    # TOP DISHES
    # ==========================================================================

    top_dish_sample_pages: int = Field(
        default=5,
        ge=1,
        description="Maximum catalog pages fetched to sample top dishes"
    )
    top_dish_sample_target: int = Field(
        default=20,
        ge=1,
        description="Stop sampling once this many cuisines were collected"
    )
    top_dish_min_rating: float = Field(
        default=4.8,
        description="Rating threshold for the filtered sample"
    )
    top_dish_count: int = Field(
        default=3,
        ge=1,
        description="Number of top dishes surfaced"
    )

    # ==========================================================================
    # CART & ORDERS
    # ==========================================================================

    tax_rate: float = Field(
        default=0.025,
        description="Rate of each of the two flat taxes (2.5%)"
    )
    order_history_capacity: int = Field(
        default=3,
        ge=1,
        description="Number of recent orders kept in history"
    )
    default_language: Language = Field(
        default=Language.ENGLISH,
        description="Catalog language used at startup"
    )

    # ==========================================================================
    # MOCK TRANSPORT
    # ==========================================================================

    mock_failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Probability that a mock payment is declined"
    )
    mock_min_latency: float = Field(
        default=0.0,
        ge=0.0,
        description="Minimum simulated latency in seconds"
    )
    mock_max_latency: float = Field(
        default=0.0,
        ge=0.0,
        description="Maximum simulated latency in seconds"
    )

    # ==========================================================================
    # FILE STORAGE
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    store_filename: str = Field(
        default="store.json",
        description="Key-value store filename"
    )
    store_lock_timeout: int = Field(
        default=10,
        description="Seconds to wait for file lock"
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

    @field_validator("default_language", mode="before")
    @classmethod
    def validate_language(cls, v: str) -> Language:
        """Accept language codes in any case."""
        if isinstance(v, Language):
            return v
        try:
            return Language(v.lower())
        except ValueError:
            valid = [e.value for e in Language]
            raise ValueError(f"Invalid default_language. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def use_real_services(self) -> bool:
        """Check if the real upstream API should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def store_path(self) -> Path:
        """Full path of the key-value store file."""
        return Path(self.data_directory) / self.store_filename

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
            if not self.partner_api_key:
                missing.append("PARTNER_API_KEY")
            if not self.api_base_url:
                missing.append("API_BASE_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are read once and never mutated afterwards, so every caller
    sees the same configuration for the lifetime of the process.

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
        Configured package logger
    """
    settings = get_settings()

    # Set level based on debug mode
    if settings.debug:
        level = logging.DEBUG

    # Configure format
    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Configure root logger
    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)

    return logging.getLogger("ordering_client")
