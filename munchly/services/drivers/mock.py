"""
Mock Driver Assignment Service

Hands out drivers from a small static roster after a simulated delay.
"""

import asyncio
import logging
import random
import uuid
from typing import Optional, Sequence

from munchly.schemas import DriverInfo, Order
from munchly.services.drivers.base import BaseDriverService

logger = logging.getLogger(__name__)


DEFAULT_ROSTER = (
    {
        "name": "Michael S.",
        "phone": "+1 (555) 123-4567",
        "image_url": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=150",
        "vehicle_info": "Silver Toyota Camry • ABC 1234",
    },
    {
        "name": "Alex Johnson",
        "phone": "+1 (555) 987-6543",
        "image_url": None,
        "vehicle_info": "White Honda Civic • XYZ 5678",
    },
)


class MockDriverService(BaseDriverService):
    """
    Mock dispatch.

    Attributes:
        roster: Driver templates to pick from
        availability: Probability that a driver is found (1.0 = always)
    """

    def __init__(
        self,
        roster: Sequence[dict] = DEFAULT_ROSTER,
        availability: float = 1.0,
        min_latency: float = 0.2,
        max_latency: float = 0.6,
    ):
        self.roster = list(roster)
        self.availability = availability
        self.min_latency = min_latency
        self.max_latency = max(min_latency, max_latency)
        logger.info(f"MockDriverService initialized ({len(self.roster)} drivers)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)

    async def assign_driver(self, order: Order) -> Optional[DriverInfo]:
        await self._simulate_latency()

        if not self.roster or random.random() >= self.availability:
            logger.warning(f"Mock: no driver available for order {order.order_number}")
            return None

        template = random.choice(self.roster)
        driver = DriverInfo(id=f"driver_{uuid.uuid4().hex[:12]}", **template)
        logger.info(f"Mock: {driver.name} assigned to order {order.order_number}")
        return driver

    async def health_check(self) -> bool:
        return True
