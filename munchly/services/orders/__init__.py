"""
Orders

``state_machine`` holds the pure status transition rules; ``OrderService``
is the order book that applies them with side effects.
"""

from munchly.services.orders import state_machine
from munchly.services.orders.service import OrderService

__all__ = [
    "OrderService",
    "state_machine",
]
