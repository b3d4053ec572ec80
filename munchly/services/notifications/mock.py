"""
Mock Notification Service

Simulates push delivery for development. Nothing leaves the process:
messages are logged and kept in ``sent`` for inspection.
"""

import asyncio
import random
import uuid
import logging
from dataclasses import dataclass
from typing import List

from munchly.schemas import Order, OrderStatus
from munchly.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
    build_order_message,
)

logger = logging.getLogger(__name__)


@dataclass
class SentNotification:
    message_id: str
    order_id: str
    status: OrderStatus
    title: str
    body: str


class MockNotificationService(BaseNotificationService):
    """Mock notification service for development."""

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.1,
        max_latency: float = 0.3,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max(min_latency, max_latency)
        self.sent: List[SentNotification] = []
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send_order_update(self, order: Order) -> NotificationResult:
        """Simulate a push notification for the order's status."""
        await self._simulate_latency()

        if self._should_fail():
            logger.warning(f"Mock push failed (simulated) for order {order.order_number}")
            return NotificationResult(
                success=False,
                error_message="Simulated push failure",
                provider="mock",
            )

        title, body = build_order_message(order)
        message_id = f"push_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(
            SentNotification(
                message_id=message_id,
                order_id=order.id,
                status=order.status,
                title=title,
                body=body,
            )
        )
        logger.info(f"Mock push for {order.order_number}: {title} (ID: {message_id})")

        return NotificationResult(success=True, message_id=message_id, provider="mock")

    async def health_check(self) -> bool:
        return True
