"""
Error Taxonomy

Every failure the core can report is a ``MunchlyError`` subclass carrying
the short message shown to the user, a machine-readable code and the HTTP
status the API layer answers with. Errors are raised straight to the caller;
nothing here is retried.
"""

from typing import Optional


class MunchlyError(Exception):
    """Base class for all user-facing errors."""

    code: str = "error"
    status_code: int = 400
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# CART ERRORS
# =============================================================================

class CartError(MunchlyError):
    code = "cart_error"


class DifferentRestaurant(CartError):
    code = "different_restaurant"
    status_code = 409

    def __init__(self, current_name: str):
        self.current_name = current_name
        super().__init__(
            f"You have items from {current_name} in your cart. Would you like "
            f"to clear your cart and add items from this restaurant?"
        )


class InvalidPromoCode(CartError):
    code = "invalid_promo_code"
    default_message = "This promo code is invalid"


class ExpiredPromoCode(CartError):
    code = "expired_promo_code"
    default_message = "This promo code has expired"


class MinimumOrderNotMet(CartError):
    code = "minimum_order_not_met"

    def __init__(self, minimum: float):
        self.minimum = minimum
        super().__init__(f"Minimum order of ${minimum:.2f} required for this promo code")


class ItemNotFound(CartError):
    code = "item_not_found"
    status_code = 404
    default_message = "Item not found in cart"


class InvalidCustomization(CartError):
    code = "invalid_customization"
    status_code = 422
    default_message = "This option is not available for the selected item"


# =============================================================================
# ORDER ERRORS
# =============================================================================

class OrderError(MunchlyError):
    code = "order_error"


class EmptyCart(OrderError):
    code = "empty_cart"
    default_message = "Your cart is empty"


class OrderNotFound(OrderError):
    code = "order_not_found"
    status_code = 404
    default_message = "Order not found"


class CannotCancel(OrderError):
    code = "cannot_cancel"
    status_code = 409
    default_message = "This order cannot be cancelled as it's already being prepared"


class CartChanged(OrderError):
    code = "cart_changed"
    status_code = 409
    default_message = "Your cart changed during checkout. Please review it and try again"


class RestaurantNotAvailable(OrderError):
    code = "restaurant_not_available"
    status_code = 409
    default_message = "This restaurant is currently unavailable"


class PaymentFailed(OrderError):
    code = "payment_failed"
    status_code = 402
    default_message = "Payment failed. Please try again"


class CannotRate(OrderError):
    code = "cannot_rate"
    status_code = 409
    default_message = "Only completed orders can be rated"


class InvalidRating(OrderError):
    code = "invalid_rating"
    status_code = 422
    default_message = "Rating must be between 1 and 5"


# =============================================================================
# PREFERENCES ERRORS
# =============================================================================

class PreferencesUnavailable(MunchlyError):
    code = "preferences_unavailable"
    status_code = 503
    default_message = "Your saved preferences are busy. Please try again"
