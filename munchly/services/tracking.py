"""
Tracking Scheduler

Background asyncio tasks that drive a tracked order:

    - every ``tracking_tick_seconds`` the driver's route progress is
      ratcheted toward the target for the current status and the driver
      coordinate is read off the route
    - every ``status_advance_seconds`` the order moves one status forward

A session stops itself as soon as its order is no longer active. Only one
order is tracked at a time; starting a new session stops the others.

``tick`` and ``advance`` are public so a real telemetry feed or a test can
drive the same contracts without timers.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from munchly.core.config import Settings, get_settings
from munchly.schemas import Coordinate, Order, OrderStatus, TrackingResponse, utcnow
from munchly.services.catalog.base import BaseCatalogService
from munchly.services.orders import state_machine
from munchly.services.orders.service import OrderService
from munchly.services.routing import RoutePath, generate_route, target_progress

logger = logging.getLogger(__name__)

Listener = Callable[[Order, "TrackingSession"], None]


@dataclass
class TrackingSession:
    """
    Live tracking state for one order.

    Attributes:
        order_id: The tracked order
        route: Waypoints from restaurant to drop-off, fixed for the session
        progress: Driver progress along ``route``, never decreases
        task: The timer task, None when driven manually
    """
    order_id: str
    route: RoutePath
    progress: float = 0.0
    started_at: datetime = field(default_factory=utcnow)
    ticks: int = 0
    task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    @property
    def restaurant_position(self) -> Coordinate:
        return self.route.start

    @property
    def driver_position(self) -> Coordinate:
        return self.route.position_at(self.progress)

    def traveled_path(self) -> List[Coordinate]:
        return self.route.prefix_at(self.progress)


class TrackingScheduler:
    """
    Owns the tracking sessions.

    Args:
        orders: The order book the sessions read from and write to
        catalog: Restaurant coordinates for route starts
        settings: Timer intervals and route constants
        rng: Random source for route jitter
    """

    def __init__(
        self,
        orders: OrderService,
        catalog: BaseCatalogService,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.orders = orders
        self.catalog = catalog
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._sessions: Dict[str, TrackingSession] = {}
        self._listeners: List[Listener] = []

    @property
    def tracked_order_ids(self) -> List[str]:
        return list(self._sessions)

    def session(self, order_id: str) -> Optional[TrackingSession]:
        return self._sessions.get(order_id)

    def add_listener(self, callback: Listener) -> None:
        """Call ``callback(order, session)`` after every tick."""
        self._listeners.append(callback)

    # ==========================================================================
    # START / STOP
    # ==========================================================================

    async def _route_start(self, order: Order) -> Coordinate:
        restaurant = await self.catalog.get_restaurant(order.restaurant_id)
        if restaurant is not None:
            return restaurant.coordinate
        logger.warning(
            f"Restaurant {order.restaurant_id} unknown, placing it near the drop-off"
        )
        return order.delivery_coordinate.offset(
            self.settings.fallback_restaurant_offset_lat,
            self.settings.fallback_restaurant_offset_lon,
        )

    async def start(self, order_id: str, run_timers: bool = True) -> Optional[TrackingSession]:
        """
        Begin tracking an order, replacing any other tracked order.

        Starting an order that is already tracked returns its session.

        Returns:
            The session, or None when the order is no longer active

        Raises:
            OrderNotFound: Unknown order id
        """
        order = self.orders.get_order(order_id)
        if not order.is_active:
            logger.info(f"Order {order.order_number} is {order.status.value}, not tracking")
            return None

        existing = self._sessions.get(order_id)
        if existing is not None:
            return existing

        start = await self._route_start(order)
        route = generate_route(
            start,
            order.delivery_coordinate,
            points=self.settings.route_points,
            curve_amplitude=self.settings.route_curve_amplitude,
            curve_block=self.settings.route_curve_block,
            jitter=self.settings.route_jitter,
            rng=self._rng,
        )

        # A concurrent start may have won while the catalog lookup was pending
        existing = self._sessions.get(order_id)
        if existing is not None:
            return existing

        self.stop_all()
        session = TrackingSession(order_id=order_id, route=route, progress=order.driver_progress)
        self._sessions[order_id] = session
        logger.info(f"Tracking started for order {order.order_number} ({len(route)} waypoints)")

        self.tick(order_id)
        if run_timers and order_id in self._sessions:
            session.task = asyncio.create_task(
                self._run(session), name=f"tracking-{order_id}"
            )
        return session

    def stop(self, order_id: str) -> bool:
        """
        Stop tracking an order.

        Returns:
            True if a session was stopped
        """
        session = self._sessions.pop(order_id, None)
        if session is None:
            return False

        task = session.task
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()

        logger.info(f"Tracking stopped for order {order_id} after {session.ticks} ticks")
        return True

    def stop_all(self) -> int:
        stopped = 0
        for order_id in list(self._sessions):
            if self.stop(order_id):
                stopped += 1
        return stopped

    async def shutdown(self) -> None:
        """Stop every session and wait for the timer tasks to finish."""
        tasks = [s.task for s in self._sessions.values() if s.task is not None]
        self.stop_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ==========================================================================
    # STEPS
    # ==========================================================================

    def tick(self, order_id: str) -> Optional[Order]:
        """
        Ratchet driver progress for the order's current status and publish
        the new position. Stops the session once the order is inactive.

        Returns:
            The order, or None when the order is not tracked
        """
        session = self._sessions.get(order_id)
        if session is None:
            return None
        order = self.orders.find_order(order_id)
        if order is None:
            self.stop(order_id)
            return None

        if order.is_active or order.status == OrderStatus.DELIVERED:
            session.progress = target_progress(order.status, session.progress)
            self.orders.update_driver_position(order_id, session.progress, session.driver_position)
        session.ticks += 1
        logger.debug(
            f"Tick {session.ticks} for {order.order_number}: "
            f"{order.status.value} at {session.progress:.2f}"
        )

        for listener in list(self._listeners):
            try:
                listener(order, session)
            except Exception:
                logger.exception(f"Tracking listener failed for order {order.order_number}")

        if not order.is_active:
            self.stop(order_id)
        return order

    async def advance(self, order_id: str) -> Order:
        """Move the order one status forward, then tick."""
        order = await self.orders.advance_order(order_id)
        self.tick(order_id)
        return order

    async def _run(self, session: TrackingSession) -> None:
        loop = asyncio.get_running_loop()
        tick_seconds = self.settings.tracking_tick_seconds
        advance_seconds = self.settings.status_advance_seconds
        next_advance = loop.time() + advance_seconds

        try:
            while self._sessions.get(session.order_id) is session:
                await asyncio.sleep(tick_seconds)
                if self._sessions.get(session.order_id) is not session:
                    break
                if loop.time() >= next_advance:
                    next_advance += advance_seconds
                    await self.advance(session.order_id)
                else:
                    self.tick(session.order_id)
        except asyncio.CancelledError:
            logger.debug(f"Tracking task for {session.order_id} cancelled")
            raise
        except Exception:
            logger.exception(f"Tracking task for {session.order_id} crashed")
            if self._sessions.get(session.order_id) is session:
                self.stop(session.order_id)

    # ==========================================================================
    # SNAPSHOTS
    # ==========================================================================

    def snapshot(self, order_id: str) -> TrackingResponse:
        """
        Live-map view of an order, tracked or not.

        Raises:
            OrderNotFound: Unknown order id
        """
        order = self.orders.get_order(order_id)
        session = self._sessions.get(order_id)

        return TrackingResponse(
            order_id=order.id,
            status=order.status,
            status_title=order.status.title,
            status_subtitle=order.status.subtitle,
            is_tracking=session is not None,
            driver_progress=order.driver_progress,
            driver_position=order.driver_coordinate,
            restaurant_position=session.restaurant_position if session else None,
            delivery_position=order.delivery_coordinate,
            traveled_path=session.traveled_path() if session else [],
            steps=state_machine.progress_steps(order.status),
            estimated_delivery_time=order.estimated_delivery_time,
        )
