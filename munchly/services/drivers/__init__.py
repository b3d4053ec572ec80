"""
Driver Service Factory

Returns the driver dispatch implementation for the configured ENV_MODE.
"""

import logging
from typing import Optional

from munchly.core.config import Settings, get_settings
from munchly.services.drivers.base import BaseDriverService
from munchly.services.drivers.mock import MockDriverService

logger = logging.getLogger(__name__)


def get_driver_service(settings: Optional[Settings] = None) -> BaseDriverService:
    """Create the configured driver service."""
    settings = settings or get_settings()

    if settings.use_real_services:
        logger.warning(
            f"Driver Service: no dispatch integration for {settings.env_mode.value} mode, "
            f"using MockDriverService"
        )
    else:
        logger.info("Driver Service: Using MockDriverService (development mode)")

    return MockDriverService(
        min_latency=settings.mock_min_latency,
        max_latency=settings.mock_max_latency,
    )


__all__ = [
    "get_driver_service",
    "BaseDriverService",
    "MockDriverService",
]
