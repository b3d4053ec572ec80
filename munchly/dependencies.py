"""
Service Container

Builds every service once at application startup and hands it to the
routes through FastAPI dependency injection. The container is stored on
``app.state`` by the lifespan handler; nothing here is a module-level
singleton, so tests can build as many independent containers as they like.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request

from munchly.core.config import Settings, get_settings
from munchly.services.cart import CartStore
from munchly.services.catalog import BaseCatalogService, get_catalog_service
from munchly.services.catalog.fixtures import build_past_orders
from munchly.services.drivers import BaseDriverService, get_driver_service
from munchly.services.notifications import BaseNotificationService, get_notification_service
from munchly.services.orders import OrderService
from munchly.services.payment import BasePaymentService, get_payment_service
from munchly.services.preferences import PreferencesStore
from munchly.services.pricing import PricingConfig
from munchly.services.tracking import TrackingScheduler

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    catalog: BaseCatalogService
    drivers: BaseDriverService
    payment: BasePaymentService
    notifications: BaseNotificationService
    cart: CartStore
    orders: OrderService
    tracking: TrackingScheduler
    preferences: PreferencesStore

    async def health(self) -> Dict[str, str]:
        """Health of each collaborator, keyed by service name."""
        checks = {
            "catalog_service": self.catalog,
            "driver_service": self.drivers,
            "payment_service": self.payment,
            "notification_service": self.notifications,
        }
        results = {}
        for name, service in checks.items():
            healthy = await service.health_check()
            results[name] = (
                f"healthy ({service.provider_name})" if healthy
                else f"unhealthy ({service.provider_name})"
            )
        return results

    async def close(self) -> None:
        await self.tracking.shutdown()


def build_container(settings: Optional[Settings] = None, seed_history: bool = True) -> ServiceContainer:
    """
    Wire up the services for one application instance.

    Args:
        settings: Configuration, defaults to the cached environment settings
        seed_history: Load the demo order history into the order book
    """
    settings = settings or get_settings()

    catalog = get_catalog_service(settings)
    drivers = get_driver_service(settings)
    payment = get_payment_service(settings)
    notifications = get_notification_service(settings)

    cart = CartStore(catalog, PricingConfig.from_settings(settings))
    orders = OrderService(catalog, drivers, payment, notifications, settings)
    if seed_history:
        orders.seed_past_orders(build_past_orders(settings.default_user_id))

    tracking = TrackingScheduler(orders, catalog, settings)
    preferences = PreferencesStore.from_settings(settings)

    return ServiceContainer(
        settings=settings,
        catalog=catalog,
        drivers=drivers,
        payment=payment,
        notifications=notifications,
        cart=cart,
        orders=orders,
        tracking=tracking,
        preferences=preferences,
    )


def get_container(request: Request) -> ServiceContainer:
    """Dependency injection for FastAPI routes."""
    return request.app.state.container
