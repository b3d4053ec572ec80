"""
Notification Service Factory

Returns the notification implementation for the configured ENV_MODE.
"""

import logging
from typing import Optional

from munchly.core.config import Settings, get_settings
from munchly.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
    build_order_message,
)
from munchly.services.notifications.mock import MockNotificationService, SentNotification

logger = logging.getLogger(__name__)


def get_notification_service(settings: Optional[Settings] = None) -> BaseNotificationService:
    """Create the configured notification service."""
    settings = settings or get_settings()

    if settings.use_real_services:
        logger.warning(
            f"Notification Service: no push provider for {settings.env_mode.value} mode, "
            f"using MockNotificationService"
        )
    else:
        logger.info("Notification Service: Using MockNotificationService (development mode)")

    return MockNotificationService(
        min_latency=settings.mock_min_latency,
        max_latency=settings.mock_max_latency,
    )


__all__ = [
    "get_notification_service",
    "BaseNotificationService",
    "MockNotificationService",
    "NotificationResult",
    "SentNotification",
    "build_order_message",
]
