"""
Driver Assignment Service Abstract Base Class

A dispatch system hands out drivers for orders that are ready for pickup.
The order service calls this once per order, the first time the order
reaches ``driver_assigned``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from munchly.schemas import DriverInfo, Order


class BaseDriverService(ABC):
    """Abstract base class for driver dispatch."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def assign_driver(self, order: Order) -> Optional[DriverInfo]:
        """
        Pick a driver for an order.

        Args:
            order: The order that needs a driver

        Returns:
            DriverInfo, or None when nobody is available
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
