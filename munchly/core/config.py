"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Every fee rate, timer interval and route constant used by the core lives here
so it can be overridden from the environment or a .env file and replaced in
tests.

Supports three modes:
    - DEVELOPMENT: Mock catalog, drivers, payments and notifications
    - STAGING / PRODUCTION: Reserved for real integrations; until those exist
      the service factories fall back to the mocks and log a warning

Usage:
    from munchly.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock services
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock services
        PRODUCTION: Live environment with real integrations
        STAGING: Pre-production testing
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
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
        default="Munchly Eats",
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
    default_user_id: str = Field(
        default="guest",
        description="User id stamped on orders when nobody is signed in"
    )

    # ==========================================================================
    # PRICING
    # ==========================================================================

    delivery_fee: float = Field(
        default=2.99,
        ge=0,
        description="Flat delivery fee for a non-empty cart"
    )
    service_fee_rate: float = Field(
        default=0.05,
        ge=0,
        description="Service fee as a fraction of the subtotal"
    )
    tax_rate: float = Field(
        default=0.0875,
        ge=0,
        description="Sales tax as a fraction of the subtotal"
    )
    estimated_delivery_minutes: int = Field(
        default=35,
        ge=1,
        description="Minutes from checkout to the promised delivery time"
    )

    # ==========================================================================
    # ORDER TRACKING SIMULATION
    # ==========================================================================

    tracking_tick_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Interval between driver position refreshes"
    )
    status_advance_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Interval between simulated order status changes"
    )
    route_points: int = Field(
        default=31,
        ge=2,
        description="Number of waypoints in a generated delivery route"
    )
    route_curve_amplitude: float = Field(
        default=0.003,
        ge=0,
        description="Peak sideways bend of a generated route, in degrees"
    )
    route_curve_block: int = Field(
        default=5,
        ge=1,
        description="Waypoints per bend before the curve flips direction"
    )
    route_jitter: float = Field(
        default=0.0001,
        ge=0,
        description="Random GPS noise applied to interior waypoints, in degrees"
    )
    fallback_restaurant_offset_lat: float = Field(
        default=0.015,
        description="Latitude offset from the drop-off used when a restaurant is unknown"
    )
    fallback_restaurant_offset_lon: float = Field(
        default=0.01,
        description="Longitude offset from the drop-off used when a restaurant is unknown"
    )

    # ==========================================================================
    # MOCK SERVICES
    # ==========================================================================

    mock_min_latency: float = Field(
        default=0.2,
        ge=0,
        description="Minimum simulated backend latency in seconds"
    )
    mock_max_latency: float = Field(
        default=0.6,
        ge=0,
        description="Maximum simulated backend latency in seconds"
    )
    mock_payment_failure_rate: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Probability that the mock payment service declines a charge"
    )

    # ==========================================================================
    # CLIENT PREFERENCES
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    preferences_filename: str = Field(
        default="preferences.json",
        description="Favorites and recent searches document"
    )
    preferences_lock_timeout: int = Field(
        default=10,
        description="Seconds to wait for the preferences file lock"
    )
    recent_searches_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum number of remembered searches"
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
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def preferences_path(self) -> Path:
        """Full path of the preferences document."""
        return Path(self.data_directory) / self.preferences_filename


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once. Tests that need
    different values either build their own ``Settings`` and pass it to
    the service container, or set environment variables and call
    ``get_settings.cache_clear()``.

    Returns:
        Settings: Configured application settings
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
    logging.getLogger("filelock").setLevel(logging.WARNING)

    return logging.getLogger("munchly")

