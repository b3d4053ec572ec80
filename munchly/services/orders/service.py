"""
Order Service

Owns the active and past order collections and applies the state machine
with its side effects:

    - checkout charges the payment service and opens the order in ``confirmed``
    - the first entry into ``driver_assigned`` asks the driver service for a driver
    - ``delivered`` stamps the delivery time and files the order under past
    - every status change is pushed through the notification service

Mutations happen after the last await of each operation, so a cancelled
call never leaves an order half-updated.
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from munchly.core.config import Settings, get_settings
from munchly.errors import (
    CannotCancel,
    CannotRate,
    CartChanged,
    EmptyCart,
    InvalidRating,
    OrderNotFound,
    PaymentFailed,
    RestaurantNotAvailable,
)
from munchly.schemas import (
    Coordinate,
    DeliveryAddress,
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    utcnow,
)
from munchly.services.cart import CartStore
from munchly.services.catalog.base import BaseCatalogService
from munchly.services.drivers.base import BaseDriverService
from munchly.services.notifications.base import BaseNotificationService
from munchly.services.orders import state_machine
from munchly.services.payment.base import BasePaymentService

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class OrderService:
    """
    The order book.

    Args:
        catalog: Restaurant lookups for checkout and reorder
        drivers: Driver dispatch
        payment: Charges at checkout, refunds on cancel
        notifications: Status-change pushes
        settings: Delivery estimate and default user id
    """

    def __init__(
        self,
        catalog: BaseCatalogService,
        drivers: BaseDriverService,
        payment: BasePaymentService,
        notifications: BaseNotificationService,
        settings: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.drivers = drivers
        self.payment = payment
        self.notifications = notifications
        self.settings = settings or get_settings()

        # Most recent first
        self._active: List[Order] = []
        self._past: List[Order] = []

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    def active_orders(self) -> List[Order]:
        return list(self._active)

    def past_orders(self) -> List[Order]:
        return list(self._past)

    def find_order(self, order_id: str) -> Optional[Order]:
        for order in self._active:
            if order.id == order_id:
                return order
        for order in self._past:
            if order.id == order_id:
                return order
        return None

    def get_order(self, order_id: str) -> Order:
        """
        Look an order up in either collection.

        Raises:
            OrderNotFound: Unknown order id
        """
        order = self.find_order(order_id)
        if order is None:
            raise OrderNotFound()
        return order

    def _get_active(self, order_id: str) -> Order:
        for order in self._active:
            if order.id == order_id:
                return order
        raise OrderNotFound()

    def seed_past_orders(self, orders: Iterable[Order]) -> None:
        """Load historical orders, e.g. the mock history fixtures."""
        for order in orders:
            if self.find_order(order.id) is None:
                self._past.append(order)
        self._past.sort(key=lambda o: o.created_at, reverse=True)
        logger.info(f"Seeded order history ({len(self._past)} past orders)")

    # ==========================================================================
    # CHECKOUT
    # ==========================================================================

    async def place_order(
        self,
        cart: CartStore,
        address: DeliveryAddress,
        payment_method_id: str,
        tip_amount: float = 0.0,
        instructions: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Order:
        """
        Charge the cart total plus tip and open a new order.

        Raises:
            EmptyCart: Nothing in the cart
            RestaurantNotAvailable: The cart's restaurant is gone or closed
            PaymentFailed: The payment service declined the charge
            CartChanged: The cart was edited while the charge was pending;
                the charge is refunded and the cart left as it is
        """
        if cart.is_empty:
            raise EmptyCart()
        if tip_amount < 0:
            raise ValueError("Tip cannot be negative")

        summary = cart.summary()
        restaurant_id = cart.current_restaurant_id
        restaurant = await self.catalog.get_restaurant(restaurant_id)
        if restaurant is None or not restaurant.is_open:
            raise RestaurantNotAvailable()

        total = round(summary.total + tip_amount, 2)
        result = await self.payment.charge(
            total, payment_method_id, description=f"Munchly Eats order from {restaurant.name}"
        )
        if not result.approved:
            logger.warning(
                f"Checkout declined for {restaurant.name}: "
                f"{result.decline_code} - {result.decline_message}"
            )
            raise PaymentFailed()

        if cart.summary() != summary:
            # The cart was edited while the charge was pending
            logger.warning(f"Cart changed during checkout at {restaurant.name}, refunding {result.reference}")
            refund = await self.payment.refund(result.reference)
            if not refund.approved:
                logger.error(f"Refund of {result.reference} failed: {refund.error}")
            raise CartChanged()

        now = utcnow()
        order = Order(
            user_id=user_id or self.settings.default_user_id,
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            items=[
                OrderItem(
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    image_url=line.image_url,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    customizations=list(line.customizations),
                    special_instructions=line.special_instructions,
                )
                for line in summary.lines
            ],
            status=OrderStatus.CONFIRMED,
            subtotal=summary.subtotal,
            delivery_fee=summary.delivery_fee,
            service_fee=summary.service_fee,
            tax=summary.tax,
            discount=summary.discount,
            total=total,
            tip_amount=tip_amount,
            promo_code=summary.promo_code,
            delivery_address=address.full_address,
            delivery_latitude=address.latitude,
            delivery_longitude=address.longitude,
            delivery_instructions=instructions or address.instructions,
            payment_method_id=payment_method_id,
            payment_reference=result.reference,
            estimated_delivery_time=now + timedelta(minutes=self.settings.estimated_delivery_minutes),
            created_at=now,
            updated_at=now,
        )

        self._active.insert(0, order)
        cart.clear()
        logger.info(
            f"Order {order.order_number} placed at {order.restaurant_name} "
            f"(${order.total:.2f}, {len(order.items)} lines)"
        )

        await self._notify(order)
        return order

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    async def advance_order(self, order_id: str) -> Order:
        """
        Move an order one step along the happy path.

        Terminal orders are returned unchanged.

        Raises:
            OrderNotFound: Unknown order id
        """
        order = self.get_order(order_id)
        previous = order.status
        target = state_machine.advance(order)
        if target == previous:
            return order

        driver = None
        if target == OrderStatus.DRIVER_ASSIGNED and order.driver_id is None:
            driver = await self.drivers.assign_driver(order)
            if order.status != previous:
                # Another caller moved the order while we waited for dispatch
                return order
            if driver is None:
                logger.warning(f"No driver for order {order.order_number}, staying {previous.value}")
                return order

        now = utcnow()
        order.status = target
        order.updated_at = now

        if driver is not None:
            order.driver_id = driver.id
            order.driver_name = driver.name
            order.driver_phone = driver.phone
            order.driver_image_url = driver.image_url
            order.driver_vehicle_info = driver.vehicle_info

        if target == OrderStatus.DELIVERED:
            order.actual_delivery_time = now
            self._file_as_past(order)

        logger.info(f"Order {order.order_number}: {previous.value} -> {target.value}")
        await self._notify(order)
        return order

    def update_driver_position(self, order_id: str, progress: float, coordinate: Coordinate) -> Order:
        """Record the driver's route progress and coordinate."""
        order = self.get_order(order_id)
        order.driver_progress = max(0.0, min(1.0, progress))
        order.driver_latitude = coordinate.latitude
        order.driver_longitude = coordinate.longitude
        return order

    async def cancel_order(self, order_id: str) -> Order:
        """
        Cancel an order that the restaurant has not started handing off.

        Raises:
            OrderNotFound: No active order with this id
            CannotCancel: Past the preparing stage
        """
        order = self._get_active(order_id)
        if not state_machine.can_cancel(order.status):
            logger.warning(f"Refused to cancel {order.order_number} in {order.status.value}")
            raise CannotCancel()

        order.status = OrderStatus.CANCELLED
        order.updated_at = utcnow()
        self._file_as_past(order)
        logger.info(f"Order {order.order_number} cancelled")

        if order.payment_reference:
            refund = await self.payment.refund(order.payment_reference)
            if not refund.approved:
                logger.error(f"Refund failed for {order.order_number}: {refund.error}")

        await self._notify(order)
        return order

    def rate_order(self, order_id: str, rating: int, review: Optional[str] = None) -> Order:
        """
        Rate a finished order. Rating again overwrites the previous rating.

        Raises:
            OrderNotFound: Unknown order id
            CannotRate: The order is still active
            InvalidRating: Rating outside 1..5
        """
        order = self.get_order(order_id)
        if order.is_active:
            raise CannotRate()
        if not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRating()

        order.rating = rating
        order.review = (review or "").strip() or None
        logger.info(f"Order {order.order_number} rated {rating}/5")
        return order

    async def reorder(self, order_id: str, cart: CartStore) -> Order:
        """
        Refill the cart with a previous order's items.

        The cart is cleared first. Items keep the prices they had when
        ordered. The order itself is not touched.

        Raises:
            OrderNotFound: Unknown order id
            RestaurantNotAvailable: The restaurant left the catalog
        """
        order = self.get_order(order_id)
        restaurant = await self.catalog.get_restaurant(order.restaurant_id)
        if restaurant is None:
            raise RestaurantNotAvailable()

        cart.clear()
        for item in order.items:
            menu_item = MenuItem(
                id=item.menu_item_id,
                restaurant_id=restaurant.id,
                name=item.name,
                price=item.unit_price,
                image_url=item.image_url,
            )
            cart.add_item(
                menu_item,
                restaurant,
                quantity=item.quantity,
                special_instructions=item.special_instructions,
                customizations=item.customizations,
            )

        logger.info(f"Reordered {order.order_number}: {cart.item_count} items in cart")
        return order

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _file_as_past(self, order: Order) -> None:
        if order in self._active:
            self._active.remove(order)
        self._past.insert(0, order)

    async def _notify(self, order: Order) -> None:
        result = await self.notifications.send_order_update(order)
        if not result.success:
            logger.warning(
                f"Notification for {order.order_number} failed: {result.error_message}"
            )

    def stats(self) -> Dict[str, int]:
        return {"active": len(self._active), "past": len(self._past)}
