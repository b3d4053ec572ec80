"""
Mock Catalog Service Implementation

Serves the static restaurant, menu and promo fixtures with an artificial
delay in place of a real backend.

Behavior:
    - Simulates network latency between min_latency and max_latency
    - Promo lookup ignores case
    - Latency is an ordinary await, so cancelling the calling task cancels it
"""

import asyncio
import logging
import random
from typing import Iterable, List, Optional

from munchly.schemas import MenuItem, PromoCode, Restaurant
from munchly.services.catalog import fixtures
from munchly.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)


class MockCatalogService(BaseCatalogService):
    """
    In-memory catalog.

    Attributes:
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> catalog = MockCatalogService(min_latency=0, max_latency=0)
        >>> (await catalog.get_restaurant("rest_1")).name
        "Tony's Pizzeria"
    """

    def __init__(
        self,
        restaurants: Optional[Iterable[Restaurant]] = None,
        menu_items: Optional[Iterable[MenuItem]] = None,
        promo_codes: Optional[Iterable[PromoCode]] = None,
        min_latency: float = 0.2,
        max_latency: float = 0.6,
    ):
        self.min_latency = min_latency
        self.max_latency = max(min_latency, max_latency)

        self._restaurants = {
            r.id: r for r in (fixtures.RESTAURANTS if restaurants is None else restaurants)
        }
        self._menu_items = {
            m.id: m for m in (fixtures.MENU_ITEMS if menu_items is None else menu_items)
        }
        self._promos = {
            p.code.upper(): p
            for p in (fixtures.build_promo_codes() if promo_codes is None else promo_codes)
        }

        logger.info(
            f"MockCatalogService initialized "
            f"({len(self._restaurants)} restaurants, "
            f"{len(self._menu_items)} menu items, "
            f"{len(self._promos)} promo codes)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def remove_restaurant(self, restaurant_id: str) -> None:
        """Drop a restaurant and its menu, as when it leaves the platform."""
        self._restaurants.pop(restaurant_id, None)
        self._menu_items = {
            k: v for k, v in self._menu_items.items() if v.restaurant_id != restaurant_id
        }

    async def list_restaurants(self) -> List[Restaurant]:
        await self._simulate_latency()
        return list(self._restaurants.values())

    async def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        await self._simulate_latency()
        return self._restaurants.get(restaurant_id)

    async def search_restaurants(self, query: str) -> List[Restaurant]:
        await self._simulate_latency()
        needle = query.strip().lower()
        if not needle:
            return []

        results = [
            r for r in self._restaurants.values()
            if needle in r.name.lower()
            or any(needle in cuisine.lower() for cuisine in r.cuisine_types)
        ]
        logger.debug(f"Mock: search '{query}' matched {len(results)} restaurants")
        return results

    async def get_menu(self, restaurant_id: str) -> List[MenuItem]:
        await self._simulate_latency()
        return [m for m in self._menu_items.values() if m.restaurant_id == restaurant_id]

    async def get_menu_item(self, menu_item_id: str) -> Optional[MenuItem]:
        await self._simulate_latency()
        return self._menu_items.get(menu_item_id)

    async def find_promo(self, code: str) -> Optional[PromoCode]:
        latency_ms = await self._simulate_latency()
        promo = self._promos.get(code.strip().upper())
        logger.debug(
            f"Mock: promo lookup '{code}' -> "
            f"{promo.id if promo else 'not found'} ({latency_ms:.0f}ms)"
        )
        return promo

    async def health_check(self) -> bool:
        logger.debug("Mock: Catalog health check passed")
        return True
