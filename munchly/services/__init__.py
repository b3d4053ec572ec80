"""
                        Services Module

Business logic for the delivery core. External collaborators follow the
same layout: an abstract base, a mock implementation and a factory that
picks the implementation from ENV_MODE.

Services:
    - pricing: Fee, tax, discount and total calculation
    - cart: The active cart and its promo code
    - orders: Order state machine and order book
    - routing: Synthetic driver routes and progress targets
    - tracking: Timers that move tracked orders forward
    - preferences: File-locked favorites and recent searches
    - catalog, drivers, payment, notifications: External collaborators
"""

from munchly.services.cart import CartStore
from munchly.services.orders import OrderService
from munchly.services.preferences import PreferencesStore
from munchly.services.pricing import PricingConfig
from munchly.services.tracking import TrackingScheduler

__all__ = [
    "CartStore",
    "OrderService",
    "PreferencesStore",
    "PricingConfig",
    "TrackingScheduler",
]
