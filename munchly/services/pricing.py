"""
Cart Pricing Engine

Pure functions that turn cart lines and an optional promo code into a
CartSummary. No rounding happens here; callers that display money use
``CartSummary.rounded()``. Tips are added by checkout, never here.

A promo only counts while it is applicable: still valid and with the
subtotal at or above its minimum. An attached promo that stops qualifying
(the customer removed items) waives nothing until the cart qualifies again.

Formulas:
    subtotal     = sum of line totals
    delivery fee = 0 for an empty cart or a free-delivery promo, else flat fee
    service fee  = subtotal * service rate (0 for an empty cart)
    tax          = subtotal * tax rate
    discount     = percentage (capped by max_discount) | fixed value | 0
    total        = subtotal + delivery fee + service fee + tax - discount
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from munchly.core.config import Settings
from munchly.schemas import CartLine, CartSummary, DiscountType, PromoCode


@dataclass(frozen=True)
class PricingConfig:
    """
    Fee and tax constants.

    Attributes:
        delivery_fee: Flat fee charged on any non-empty cart
        service_fee_rate: Fraction of the subtotal charged as service fee
        tax_rate: Fraction of the subtotal charged as tax
    """
    delivery_fee: float = 2.99
    service_fee_rate: float = 0.05
    tax_rate: float = 0.0875

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingConfig":
        return cls(
            delivery_fee=settings.delivery_fee,
            service_fee_rate=settings.service_fee_rate,
            tax_rate=settings.tax_rate,
        )


DEFAULT_PRICING = PricingConfig()


def subtotal(lines: Sequence[CartLine]) -> float:
    return sum(line.total_price for line in lines)


def delivery_fee(
    lines: Sequence[CartLine],
    promo: Optional[PromoCode] = None,
    config: PricingConfig = DEFAULT_PRICING,
) -> float:
    if not lines:
        return 0.0
    if promo is not None and promo.discount_type == DiscountType.FREE_DELIVERY:
        return 0.0
    return config.delivery_fee


def service_fee(lines: Sequence[CartLine], config: PricingConfig = DEFAULT_PRICING) -> float:
    if not lines:
        return 0.0
    return subtotal(lines) * config.service_fee_rate


def tax(lines: Sequence[CartLine], config: PricingConfig = DEFAULT_PRICING) -> float:
    return subtotal(lines) * config.tax_rate


def discount(lines: Sequence[CartLine], promo: Optional[PromoCode] = None) -> float:
    """
    Discount granted by the promo.

    A free-delivery promo is worth 0 here because the waived fee already
    shows up as a zero delivery fee.
    """
    if promo is None:
        return 0.0

    if promo.discount_type == DiscountType.PERCENTAGE:
        amount = subtotal(lines) * (promo.discount_value / 100)
        if promo.max_discount is not None:
            return min(amount, promo.max_discount)
        return amount
    if promo.discount_type == DiscountType.FIXED:
        return promo.discount_value
    return 0.0


def summarize(
    lines: Sequence[CartLine],
    promo: Optional[PromoCode] = None,
    config: PricingConfig = DEFAULT_PRICING,
) -> CartSummary:
    """
    Compute the full price breakdown of a cart.

    Args:
        lines: Cart lines, all from the same restaurant
        promo: Applied promo code, if any
        config: Fee and tax constants

    Returns:
        CartSummary: Unrounded breakdown whose total always equals
        subtotal + delivery_fee + service_fee + tax - discount
    """
    sub = subtotal(lines)
    if promo is not None and not promo.is_applicable(sub):
        promo = None

    fee = delivery_fee(lines, promo, config)
    service = service_fee(lines, config)
    tax_amount = tax(lines, config)
    off = discount(lines, promo)

    return CartSummary(
        lines=list(lines),
        subtotal=sub,
        delivery_fee=fee,
        service_fee=service,
        tax=tax_amount,
        discount=off,
        total=sub + fee + service + tax_amount - off,
        promo_code=promo.code if promo is not None else None,
    )
