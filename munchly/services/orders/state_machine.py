"""
Order State Machine

Pure transition rules for the order lifecycle:

    pending -> confirmed -> preparing -> ready_for_pickup -> driver_assigned
            -> picked_up -> on_the_way -> arriving -> delivered

``cancelled`` and ``refunded`` are side branches. ``delivered``,
``cancelled`` and ``refunded`` are terminal: nothing advances out of them.
Side effects (driver assignment, delivery stamps, moving orders between
collections) belong to the order service, not here.
"""

from typing import List, Optional

from munchly.schemas import Order, OrderStatus, StatusStep

HAPPY_PATH: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.DRIVER_ASSIGNED,
    OrderStatus.PICKED_UP,
    OrderStatus.ON_THE_WAY,
    OrderStatus.ARRIVING,
    OrderStatus.DELIVERED,
]

TERMINAL_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

CANCELLABLE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
})

# Steps shown on the tracking screen
TRACKING_STEPS = [
    (OrderStatus.CONFIRMED, "Order Confirmed"),
    (OrderStatus.PREPARING, "Preparing"),
    (OrderStatus.DRIVER_ASSIGNED, "Driver Assigned"),
    (OrderStatus.PICKED_UP, "Picked Up"),
    (OrderStatus.ON_THE_WAY, "On the Way"),
    (OrderStatus.DELIVERED, "Delivered"),
]


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_cancel(status: OrderStatus) -> bool:
    return status in CANCELLABLE_STATUSES


def status_index(status: OrderStatus) -> Optional[int]:
    """Position on the happy path, or None for the side branches."""
    try:
        return HAPPY_PATH.index(status)
    except ValueError:
        return None


def next_status(status: OrderStatus) -> OrderStatus:
    """
    Successor on the happy path.

    Terminal statuses map to themselves, so repeated calls never move an
    order backwards or out of a terminal state.
    """
    if is_terminal(status):
        return status
    index = status_index(status)
    if index is None:
        return status
    return HAPPY_PATH[index + 1]


def advance(order: Order) -> OrderStatus:
    return next_status(order.status)


def progress_steps(status: OrderStatus) -> List[StatusStep]:
    """
    Tracking-screen checklist for ``status``.

    Orders on a side branch show no completed steps.
    """
    current = status_index(status)
    steps = []
    for step_status, title in TRACKING_STEPS:
        step_index = status_index(step_status)
        steps.append(
            StatusStep(
                status=step_status,
                title=title,
                is_completed=current is not None and step_index <= current,
                is_current=step_status == status,
            )
        )
    return steps
