"""
Catalog Service Abstract Base Class

Defines the lookup contract for restaurants, menus and promo codes. The
cart and the order book only ever talk to this interface, so a real
backend can replace the mock without touching them.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from munchly.schemas import MenuItem, PromoCode, Restaurant


class BaseCatalogService(ABC):
    """
    Abstract base class for catalog services.

    Example:
        >>> catalog = get_catalog_service(settings)
        >>> promo = await catalog.find_promo("welcome50")
        >>> if promo and promo.is_valid():
        ...     print(promo.description)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., "mock")."""
        pass

    @abstractmethod
    async def list_restaurants(self) -> List[Restaurant]:
        """Return every restaurant in the catalog."""
        pass

    @abstractmethod
    async def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        """
        Look up a restaurant.

        Returns:
            Restaurant or None if the catalog does not know it
        """
        pass

    @abstractmethod
    async def search_restaurants(self, query: str) -> List[Restaurant]:
        """
        Case-insensitive search over restaurant names and cuisines.

        An empty query returns no results.
        """
        pass

    @abstractmethod
    async def get_menu(self, restaurant_id: str) -> List[MenuItem]:
        """Return the menu of a restaurant (empty if unknown)."""
        pass

    @abstractmethod
    async def get_menu_item(self, menu_item_id: str) -> Optional[MenuItem]:
        """Look up a single menu item by id."""
        pass

    @abstractmethod
    async def find_promo(self, code: str) -> Optional[PromoCode]:
        """
        Look up a promo code, ignoring case.

        Validity is not checked here; callers decide what an expired code means.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the catalog is reachable."""
        pass
