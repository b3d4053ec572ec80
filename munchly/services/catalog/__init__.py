"""
Catalog Service Factory

Builds the catalog implementation selected by ENV_MODE. There is no real
catalog backend yet, so every mode gets the mock; non-development modes
log a warning so the gap is visible.

Usage:
    from munchly.services.catalog import get_catalog_service

    catalog = get_catalog_service(settings)
    restaurant = await catalog.get_restaurant("rest_1")
"""

import logging
from typing import Optional

from munchly.core.config import Settings, get_settings
from munchly.services.catalog.base import BaseCatalogService
from munchly.services.catalog.mock import MockCatalogService

logger = logging.getLogger(__name__)


def get_catalog_service(settings: Optional[Settings] = None) -> BaseCatalogService:
    """
    Create the configured catalog service.

    Returns:
        BaseCatalogService: A new catalog instance owned by the caller
    """
    settings = settings or get_settings()

    if settings.use_real_services:
        logger.warning(
            f"Catalog Service: no real backend for {settings.env_mode.value} mode, "
            f"using MockCatalogService"
        )
    else:
        logger.info("Catalog Service: Using MockCatalogService (development mode)")

    return MockCatalogService(
        min_latency=settings.mock_min_latency,
        max_latency=settings.mock_max_latency,
    )


__all__ = [
    "get_catalog_service",
    "BaseCatalogService",
    "MockCatalogService",
]
