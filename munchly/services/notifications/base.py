"""
Notification Service Abstract Base Class

Order-update notifications pushed to the customer whenever an order
changes status.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from munchly.schemas import Order, OrderStatus


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


# Push copy for the statuses worth interrupting the customer for
_ORDER_MESSAGES = {
    OrderStatus.CONFIRMED: ("Order Confirmed! ✅", "{restaurant} received your order"),
    OrderStatus.PREPARING: ("Your order is being prepared! 👨‍🍳", "{restaurant} has started preparing your order"),
    OrderStatus.DRIVER_ASSIGNED: ("Driver on the way! 🚗", "{driver} is picking up your order from {restaurant}"),
    OrderStatus.ARRIVING: ("Almost there! 📍", "Your order will arrive in about 5 minutes"),
    OrderStatus.DELIVERED: ("Order Delivered! 🎉", "Enjoy your meal! Don't forget to rate your experience."),
    OrderStatus.CANCELLED: ("Order Cancelled", "Your order from {restaurant} was cancelled"),
}


def build_order_message(order: Order) -> Tuple[str, str]:
    """Title and body for an order's current status."""
    template = _ORDER_MESSAGES.get(order.status)
    if template is None:
        return order.status.title, order.status.subtitle
    title, body = template
    return title, body.format(
        restaurant=order.restaurant_name,
        driver=order.driver_name or "A driver",
    )


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_order_update(self, order: Order) -> NotificationResult:
        """Notify the customer about the order's current status."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
