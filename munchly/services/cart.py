"""
Cart Store

Holds the line items of the active cart and the applied promo code.

Rules:
    - Every line belongs to the same restaurant. Adding from another
      restaurant raises DifferentRestaurant and leaves the cart unchanged.
    - Adding an item that matches an existing line on menu item,
      customization set and instructions bumps that line's quantity.
    - At most one promo is applied. It is dropped whenever the cart becomes
      empty, whichever operation emptied it.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from munchly.errors import (
    DifferentRestaurant,
    ExpiredPromoCode,
    InvalidCustomization,
    InvalidPromoCode,
    ItemNotFound,
    MinimumOrderNotMet,
)
from munchly.schemas import (
    CartLine,
    CartSummary,
    MenuItem,
    PromoCode,
    Restaurant,
    SelectedCustomization,
    utcnow,
)
from munchly.services import pricing
from munchly.services.catalog.base import BaseCatalogService
from munchly.services.pricing import DEFAULT_PRICING, PricingConfig

logger = logging.getLogger(__name__)


def select_customizations(item: MenuItem, option_ids: Sequence[str]) -> List[SelectedCustomization]:
    """
    Resolve option ids against a menu item's customization groups.

    Raises:
        InvalidCustomization: Unknown option id, or too many picks in a group
    """
    selected: List[SelectedCustomization] = []
    picks_per_group: dict = {}

    for option_id in option_ids:
        match = None
        for group in item.customization_groups:
            for option in group.options:
                if option.id == option_id:
                    match = (group, option)
                    break
            if match:
                break
        if match is None:
            raise InvalidCustomization(f"Option '{option_id}' is not available for {item.name}")

        group, option = match
        picks_per_group[group.id] = picks_per_group.get(group.id, 0) + 1
        if picks_per_group[group.id] > group.max_selections:
            raise InvalidCustomization(
                f"Choose at most {group.max_selections} option(s) for {group.name}"
            )
        selected.append(
            SelectedCustomization(
                id=option.id,
                group_name=group.name,
                option_name=option.name,
                price=option.price,
            )
        )
    return selected


def _normalize_instructions(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


class CartStore:
    """
    The single active cart.

    Args:
        catalog: Promo code lookup
        pricing_config: Fee and tax constants for summaries
    """

    def __init__(
        self,
        catalog: BaseCatalogService,
        pricing_config: PricingConfig = DEFAULT_PRICING,
    ):
        self._catalog = catalog
        self._pricing = pricing_config
        self._lines: List[CartLine] = []
        self._promo: Optional[PromoCode] = None

    # ==========================================================================
    # READ
    # ==========================================================================

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def applied_promo(self) -> Optional[PromoCode]:
        return self._promo

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def current_restaurant_id(self) -> Optional[str]:
        return self._lines[0].restaurant_id if self._lines else None

    @property
    def current_restaurant_name(self) -> Optional[str]:
        return self._lines[0].restaurant_name if self._lines else None

    @property
    def subtotal(self) -> float:
        return pricing.subtotal(self._lines)

    def get_line(self, line_id: str) -> CartLine:
        for line in self._lines:
            if line.id == line_id:
                return line
        raise ItemNotFound()

    def summary(self) -> CartSummary:
        return pricing.summarize(self._lines, self._promo, self._pricing)

    # ==========================================================================
    # LINES
    # ==========================================================================

    def add_item(
        self,
        item: MenuItem,
        restaurant: Restaurant,
        quantity: int = 1,
        special_instructions: Optional[str] = None,
        customizations: Iterable[SelectedCustomization] = (),
    ) -> CartLine:
        """
        Add a menu item, merging with an identical existing line.

        Raises:
            DifferentRestaurant: The cart already holds another restaurant's items
            ValueError: Quantity below 1 or item not on this restaurant's menu
        """
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        if item.restaurant_id != restaurant.id:
            raise ValueError(f"{item.name} is not on the menu of {restaurant.name}")

        current_id = self.current_restaurant_id
        if current_id is not None and current_id != restaurant.id:
            logger.warning(
                f"Rejected {item.id} from {restaurant.id}: cart holds items from {current_id}"
            )
            raise DifferentRestaurant(self.current_restaurant_name or "another restaurant")

        customizations = list(customizations)
        instructions = _normalize_instructions(special_instructions)
        wanted = frozenset(customizations)

        for index, line in enumerate(self._lines):
            if (
                line.menu_item_id == item.id
                and frozenset(line.customizations) == wanted
                and line.special_instructions == instructions
            ):
                merged = line.model_copy(update={"quantity": line.quantity + quantity})
                self._lines[index] = merged
                logger.debug(f"Cart: {item.id} quantity -> {merged.quantity}")
                return merged

        line = CartLine(
            menu_item_id=item.id,
            name=item.name,
            image_url=item.image_url,
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            unit_price=item.price,
            quantity=quantity,
            special_instructions=instructions,
            customizations=customizations,
            added_at=utcnow(),
        )
        self._lines.append(line)
        logger.debug(f"Cart: added {item.id} x{quantity} from {restaurant.id}")
        return line

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """
        Set a line's quantity; zero or less removes the line.

        Returns:
            The updated line, or None when it was removed
        """
        line = self.get_line(line_id)
        if quantity <= 0:
            self.remove_item(line_id)
            return None

        updated = line.model_copy(update={"quantity": quantity})
        self._lines[self._lines.index(line)] = updated
        return updated

    def remove_item(self, line_id: str) -> None:
        line = self.get_line(line_id)
        self._lines.remove(line)
        if not self._lines and self._promo is not None:
            logger.debug(f"Cart emptied, dropping promo {self._promo.code}")
            self._promo = None

    def clear(self) -> None:
        self._lines.clear()
        self._promo = None

    def replace_cart(
        self,
        item: MenuItem,
        restaurant: Restaurant,
        quantity: int = 1,
        special_instructions: Optional[str] = None,
        customizations: Iterable[SelectedCustomization] = (),
    ) -> CartLine:
        """Empty the cart, then add the item. Used after a DifferentRestaurant prompt."""
        self.clear()
        return self.add_item(item, restaurant, quantity, special_instructions, customizations)

    # ==========================================================================
    # PROMO CODES
    # ==========================================================================

    async def apply_promo_code(self, code: str) -> PromoCode:
        """
        Validate a promo code against the catalog and apply it.

        The cart is only touched after the lookup returns, so a cancelled
        call changes nothing.

        Raises:
            InvalidPromoCode: Unknown code
            ExpiredPromoCode: Past its expiry or usage limit
            MinimumOrderNotMet: Subtotal below the promo's minimum
        """
        promo = await self._catalog.find_promo(code)

        if promo is None:
            raise InvalidPromoCode()
        if not promo.is_valid():
            raise ExpiredPromoCode()
        if self.subtotal < promo.minimum_order:
            raise MinimumOrderNotMet(promo.minimum_order)

        self._promo = promo
        logger.info(f"Promo {promo.code} applied ({promo.discount_type.value})")
        return promo

    def remove_promo_code(self) -> None:
        self._promo = None
