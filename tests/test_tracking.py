"""Tracking sessions driven manually and by their timers."""

import asyncio
import random

import pytest

from munchly.core.config import Settings
from munchly.errors import OrderNotFound
from munchly.schemas import OrderStatus
from munchly.services.tracking import TrackingScheduler


async def test_start_builds_route_from_restaurant(tracking, placed_order, tonys):
    session = await tracking.start(placed_order.id, run_timers=False)

    assert session.route.start == tonys.coordinate
    assert session.route.end == placed_order.delivery_coordinate
    assert session.progress == 0.0
    assert placed_order.driver_coordinate == tonys.coordinate
    assert tracking.tracked_order_ids == [placed_order.id]


async def test_unknown_restaurant_starts_near_drop_off(tracking, catalog, placed_order):
    catalog.remove_restaurant(placed_order.restaurant_id)

    session = await tracking.start(placed_order.id, run_timers=False)

    expected = placed_order.delivery_coordinate.offset(0.015, 0.01)
    assert session.route.start.latitude == pytest.approx(expected.latitude)
    assert session.route.start.longitude == pytest.approx(expected.longitude)


async def test_manual_drive_to_delivery(tracking, orders, placed_order):
    session = await tracking.start(placed_order.id, run_timers=False)
    seen = [session.progress]

    while orders.get_order(placed_order.id).is_active:
        await tracking.advance(placed_order.id)
        tracking.tick(placed_order.id)
        seen.append(orders.get_order(placed_order.id).driver_progress)

    order = orders.get_order(placed_order.id)
    assert order.status == OrderStatus.DELIVERED
    assert seen == sorted(seen)
    assert order.driver_progress == 1.0
    assert order.driver_coordinate == session.route.end
    assert tracking.session(placed_order.id) is None


async def test_on_the_way_creeps_forward(tracking, orders, placed_order):
    await tracking.start(placed_order.id, run_timers=False)
    while orders.get_order(placed_order.id).status != OrderStatus.ON_THE_WAY:
        await tracking.advance(placed_order.id)
    start = tracking.session(placed_order.id).progress

    for _ in range(3):
        tracking.tick(placed_order.id)

    assert tracking.session(placed_order.id).progress == pytest.approx(start + 0.09)


async def test_single_tracking_target(tracking, orders, placed_order, cart, tonys, garlic_knots, address):
    cart.add_item(garlic_knots, tonys)
    other = await orders.place_order(cart, address, "pm_card_visa")

    await tracking.start(placed_order.id, run_timers=False)
    await tracking.start(other.id, run_timers=False)

    assert tracking.tracked_order_ids == [other.id]


async def test_restart_returns_existing_session(tracking, placed_order):
    first = await tracking.start(placed_order.id, run_timers=False)
    second = await tracking.start(placed_order.id, run_timers=False)

    assert first is second


async def test_inactive_order_is_not_tracked(tracking, orders, placed_order):
    await orders.cancel_order(placed_order.id)

    assert await tracking.start(placed_order.id) is None
    with pytest.raises(OrderNotFound):
        await tracking.start("order_missing")


async def test_cancelled_order_stops_session(tracking, orders, placed_order):
    await tracking.start(placed_order.id, run_timers=False)
    await orders.cancel_order(placed_order.id)

    tracking.tick(placed_order.id)

    assert tracking.session(placed_order.id) is None


async def test_listeners_see_every_tick(tracking, placed_order):
    received = []
    tracking.add_listener(lambda order, session: received.append((order.id, session.progress)))

    await tracking.start(placed_order.id, run_timers=False)
    tracking.tick(placed_order.id)

    assert received == [(placed_order.id, 0.0), (placed_order.id, 0.0)]


async def test_failing_listener_does_not_stop_tracking(tracking, placed_order):
    def broken(order, session):
        raise RuntimeError("boom")

    tracking.add_listener(broken)
    await tracking.start(placed_order.id, run_timers=False)

    assert tracking.tick(placed_order.id) is not None
    assert tracking.session(placed_order.id) is not None


async def test_snapshot(tracking, orders, placed_order):
    await tracking.start(placed_order.id, run_timers=False)
    while orders.get_order(placed_order.id).status != OrderStatus.PICKED_UP:
        await tracking.advance(placed_order.id)

    snapshot = tracking.snapshot(placed_order.id)

    assert snapshot.is_tracking
    assert snapshot.status_title == "Order Picked Up"
    assert snapshot.driver_progress == pytest.approx(0.15)
    assert len(snapshot.traveled_path) >= 2
    assert len(snapshot.steps) == 6
    assert snapshot.restaurant_position == tracking.session(placed_order.id).route.start


async def test_timers_deliver_the_order(orders, catalog, placed_order, tmp_path):
    fast = Settings(
        _env_file=None,
        tracking_tick_seconds=0.01,
        status_advance_seconds=0.02,
        data_directory=str(tmp_path),
    )
    scheduler = TrackingScheduler(orders, catalog, fast, rng=random.Random(1))

    session = await scheduler.start(placed_order.id)
    assert session.is_running

    async def delivered():
        while orders.get_order(placed_order.id).is_active:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(delivered(), timeout=10)
    await asyncio.sleep(0.05)

    order = orders.get_order(placed_order.id)
    assert order.status == OrderStatus.DELIVERED
    assert order.driver_progress == 1.0
    assert scheduler.session(placed_order.id) is None
    assert not session.is_running


async def test_shutdown_cancels_timers(tracking, placed_order):
    session = await tracking.start(placed_order.id)

    await tracking.shutdown()

    assert session.task.done()
    assert tracking.tracked_order_ids == []
