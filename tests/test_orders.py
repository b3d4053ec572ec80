"""Order book: checkout, lifecycle side effects, cancel, rating and reorder."""

import asyncio
from datetime import timedelta

import pytest

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
from munchly.schemas import Coordinate, OrderStatus
from munchly.services.catalog.fixtures import build_past_orders
from munchly.services.drivers import MockDriverService
from munchly.services.drivers.mock import DEFAULT_ROSTER
from munchly.services.orders import OrderService
from munchly.services.payment import MockPaymentService


async def advance_to(orders, order_id, status):
    order = orders.get_order(order_id)
    while order.status != status:
        order = await orders.advance_order(order_id)
    return order


async def test_checkout_opens_confirmed_order(orders, cart, tonys, margherita, address, notifications):
    cart.add_item(margherita, tonys, quantity=2)
    expected_total = round(cart.summary().total + 3.0, 2)

    order = await orders.place_order(cart, address, "pm_card_visa", tip_amount=3.0, instructions="Ring twice")

    assert order.status == OrderStatus.CONFIRMED
    assert order.total == expected_total
    assert order.tip_amount == 3.0
    assert order.restaurant_name == "Tony's Pizzeria"
    assert order.items[0].quantity == 2
    assert order.delivery_address == "123 Main St, Apt 4B, San Francisco, CA 94102"
    assert order.delivery_instructions == "Ring twice"
    assert order.payment_reference.startswith("pay_mock_")
    assert order.estimated_delivery_time - order.created_at == timedelta(minutes=35)
    assert len(order.order_number) == 8
    assert order.order_number[:2].isalpha() and order.order_number[2:].isdigit()

    assert orders.active_orders() == [order]
    assert cart.is_empty
    assert notifications.sent[-1].status == OrderStatus.CONFIRMED


async def test_newest_order_first(placed_order, orders, cart, tonys, garlic_knots, address):
    cart.add_item(garlic_knots, tonys)
    second = await orders.place_order(cart, address, "pm_card_visa")

    assert [o.id for o in orders.active_orders()] == [second.id, placed_order.id]


async def test_empty_cart_cannot_check_out(orders, cart, address):
    with pytest.raises(EmptyCart):
        await orders.place_order(cart, address, "pm_card_visa")


async def test_declined_payment_keeps_cart(
    catalog, drivers, notifications, settings, cart, tonys, margherita, address
):
    declining = MockPaymentService(failure_rate=1.0, min_latency=0, max_latency=0)
    orders = OrderService(catalog, drivers, declining, notifications, settings)
    cart.add_item(margherita, tonys)

    with pytest.raises(PaymentFailed):
        await orders.place_order(cart, address, "pm_card_visa")

    assert not cart.is_empty
    assert orders.active_orders() == []


async def test_declined_test_card(orders, cart, tonys, margherita, address):
    cart.add_item(margherita, tonys)

    with pytest.raises(PaymentFailed):
        await orders.place_order(cart, address, "pm_card_declined")


async def test_cart_edited_during_checkout_is_refunded(
    catalog, drivers, notifications, settings, cart, tonys, margherita, garlic_knots, address
):
    slow_payment = MockPaymentService(min_latency=0.2, max_latency=0.2)
    orders = OrderService(catalog, drivers, slow_payment, notifications, settings)
    cart.add_item(margherita, tonys)

    checkout = asyncio.create_task(orders.place_order(cart, address, "pm_card_visa"))
    await asyncio.sleep(0.05)
    cart.add_item(garlic_knots, tonys)

    with pytest.raises(CartChanged):
        await checkout

    assert [line.menu_item_id for line in cart.lines] == ["item_1_1", "item_1_4"]
    assert orders.active_orders() == []
    assert list(slow_payment._refundable.values()) == [0.0]
    assert notifications.sent == []


async def test_closed_restaurant_cannot_take_orders(orders, catalog, cart, tonys, margherita, address):
    cart.add_item(margherita, tonys)
    catalog.remove_restaurant("rest_1")

    with pytest.raises(RestaurantNotAvailable):
        await orders.place_order(cart, address, "pm_card_visa")


async def test_driver_assigned_once(placed_order, orders):
    order = await advance_to(orders, placed_order.id, OrderStatus.DRIVER_ASSIGNED)

    assert order.driver_name in {d["name"] for d in DEFAULT_ROSTER}
    assert order.driver_phone
    first_driver = order.driver_id

    order = await orders.advance_order(order.id)
    assert order.status == OrderStatus.PICKED_UP
    assert order.driver_id == first_driver


async def test_no_driver_keeps_order_waiting(
    catalog, payment, notifications, settings, cart, tonys, margherita, address
):
    nobody = MockDriverService(availability=0.0, min_latency=0, max_latency=0)
    orders = OrderService(catalog, nobody, payment, notifications, settings)
    cart.add_item(margherita, tonys)
    order = await orders.place_order(cart, address, "pm_card_visa")

    await advance_to(orders, order.id, OrderStatus.READY_FOR_PICKUP)
    order = await orders.advance_order(order.id)

    assert order.status == OrderStatus.READY_FOR_PICKUP
    assert order.driver_id is None


async def test_delivery_moves_order_to_past(placed_order, orders, notifications):
    order = await advance_to(orders, placed_order.id, OrderStatus.DELIVERED)

    assert order.actual_delivery_time is not None
    assert orders.active_orders() == []
    assert orders.past_orders()[0].id == order.id
    # confirmation plus seven transitions
    assert len(notifications.sent) == 8
    assert notifications.sent[-1].title == "Order Delivered! 🎉"

    again = await orders.advance_order(order.id)
    assert again.status == OrderStatus.DELIVERED
    assert len(notifications.sent) == 8


async def test_unknown_order(orders):
    with pytest.raises(OrderNotFound):
        orders.get_order("order_missing")
    with pytest.raises(OrderNotFound):
        await orders.advance_order("order_missing")


async def test_cancel_confirmed_order(placed_order, orders, notifications, payment):
    assert payment.refundable(placed_order.payment_reference) == placed_order.total

    order = await orders.cancel_order(placed_order.id)

    assert order.status == OrderStatus.CANCELLED
    assert orders.active_orders() == []
    assert orders.past_orders()[0].id == order.id
    assert notifications.sent[-1].status == OrderStatus.CANCELLED

    assert payment.refundable(order.payment_reference) == 0.0

    with pytest.raises(OrderNotFound):
        await orders.cancel_order(order.id)


async def test_cannot_cancel_once_ready(placed_order, orders):
    await advance_to(orders, placed_order.id, OrderStatus.READY_FOR_PICKUP)

    with pytest.raises(CannotCancel):
        await orders.cancel_order(placed_order.id)
    assert orders.get_order(placed_order.id).status == OrderStatus.READY_FOR_PICKUP


async def test_rating_rules(placed_order, orders):
    with pytest.raises(CannotRate):
        orders.rate_order(placed_order.id, 5)

    await advance_to(orders, placed_order.id, OrderStatus.DELIVERED)

    with pytest.raises(InvalidRating):
        orders.rate_order(placed_order.id, 6)
    with pytest.raises(InvalidRating):
        orders.rate_order(placed_order.id, 0)

    orders.rate_order(placed_order.id, 3, "Cold fries")
    order = orders.rate_order(placed_order.id, 5, "  ")

    assert order.rating == 5
    assert order.review is None


async def test_reorder_refills_cart(orders, cart, tonys, margherita):
    orders.seed_past_orders(build_past_orders("guest"))
    cart.add_item(margherita, tonys)
    past = orders.get_order("past_order_1")
    before = past.model_dump()

    await orders.reorder("past_order_1", cart)

    assert cart.current_restaurant_id == "rest_2"
    assert [(l.menu_item_id, l.quantity) for l in cart.lines] == [("item_2_1", 2), ("item_2_5", 1)]
    assert cart.subtotal == pytest.approx(34.97)
    assert orders.get_order("past_order_1").model_dump() == before


async def test_reorder_from_departed_restaurant(orders, catalog, cart):
    orders.seed_past_orders(build_past_orders("guest"))
    catalog.remove_restaurant("rest_3")

    with pytest.raises(RestaurantNotAvailable):
        await orders.reorder("past_order_2", cart)
    assert cart.is_empty


def test_seeded_history_is_newest_first(orders):
    orders.seed_past_orders(build_past_orders("guest"))
    orders.seed_past_orders(build_past_orders("guest"))

    assert [o.id for o in orders.past_orders()] == ["past_order_1", "past_order_2"]


async def test_driver_position_is_clamped(placed_order, orders):
    point = Coordinate(latitude=37.78, longitude=-122.41)

    order = orders.update_driver_position(placed_order.id, 1.4, point)

    assert order.driver_progress == 1.0
    assert order.driver_coordinate == point
