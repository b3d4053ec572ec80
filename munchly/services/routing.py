"""
Route Generation and Position Interpolation

Builds a synthetic street-like path from the restaurant to the drop-off
and maps a progress value in [0, 1] onto it.

The path is a straight line bent sideways by a half sine wave whose
direction flips every ``curve_block`` points, with small random jitter on
interior points. The first and last points are exactly the restaurant and
the drop-off. A path never changes once generated.
"""

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from munchly.schemas import Coordinate, OrderStatus

# Progress the driver reaches as the order moves through its statuses
PICKUP_APPROACH_PROGRESS = 0.05
PICKED_UP_PROGRESS = 0.15
ON_THE_WAY_STEP = 0.03
ON_THE_WAY_CAP = 0.85
ARRIVING_STEP = 0.02
ARRIVING_CAP = 0.98


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class RoutePath:
    """
    Immutable ordered waypoints from restaurant to drop-off.

    Attributes:
        points: At least two coordinates; first is the start, last the end
    """
    points: Tuple[Coordinate, ...]

    def __post_init__(self):
        if len(self.points) < 2:
            raise ValueError("A route needs at least two points")

    def __len__(self) -> int:
        return len(self.points)

    @property
    def start(self) -> Coordinate:
        return self.points[0]

    @property
    def end(self) -> Coordinate:
        return self.points[-1]

    def index_at(self, progress: float) -> int:
        n = len(self.points)
        index = int(math.floor((n - 1) * _clamp(progress)))
        return max(0, min(n - 1, index))

    def position_at(self, progress: float) -> Coordinate:
        """Waypoint at ``floor((N-1) * progress)``."""
        return self.points[self.index_at(progress)]

    def prefix_at(self, progress: float) -> List[Coordinate]:
        """
        The part of the route already travelled.

        Always holds at least two points so it can be drawn as a line.
        """
        n = len(self.points)
        count = max(2, int(math.floor(n * _clamp(progress))))
        return list(self.points[:count])


def generate_route(
    start: Coordinate,
    end: Coordinate,
    points: int = 31,
    curve_amplitude: float = 0.003,
    curve_block: int = 5,
    jitter: float = 0.0001,
    rng: Optional[random.Random] = None,
) -> RoutePath:
    """
    Generate a curved route between two coordinates.

    Args:
        start: Restaurant coordinate
        end: Drop-off coordinate
        points: Number of waypoints, endpoints included
        curve_amplitude: Peak sideways offset in degrees
        curve_block: Waypoints per bend before the direction flips
        jitter: Max random offset in degrees for interior waypoints
        rng: Random source, pass a seeded one for reproducible routes

    Returns:
        RoutePath: Waypoints with exact endpoints
    """
    if points < 2:
        raise ValueError("points must be at least 2")
    if curve_block < 1:
        raise ValueError("curve_block must be at least 1")
    rng = rng or random.Random()

    d_lat = end.latitude - start.latitude
    d_lon = end.longitude - start.longitude

    # Unit vector perpendicular to the travel direction
    perp_lat, perp_lon = -d_lon, d_lat
    perp_len = math.hypot(perp_lat, perp_lon)
    if perp_len > 0:
        perp_lat, perp_lon = perp_lat / perp_len, perp_lon / perp_len

    waypoints: List[Coordinate] = []
    last = points - 1

    for i in range(points):
        if i == 0:
            waypoints.append(start)
            continue
        if i == last:
            waypoints.append(end)
            continue

        t = i / last
        bend = math.sin(t * math.pi) * curve_amplitude
        direction = 1.0 if (i // curve_block) % 2 == 0 else -1.0

        lat = start.latitude + d_lat * t + perp_lat * bend * direction
        lon = start.longitude + d_lon * t + perp_lon * bend * direction

        if jitter > 0:
            lat += rng.uniform(-jitter, jitter)
            lon += rng.uniform(-jitter, jitter)

        waypoints.append(Coordinate(latitude=lat, longitude=lon))

    return RoutePath(points=tuple(waypoints))


def target_progress(status: OrderStatus, current: float) -> float:
    """
    Next driver progress for an order in ``status``.

    Progress only ratchets forward: the result is never below ``current``.
    ``on_the_way`` and ``arriving`` creep forward a step per call up to
    their caps; delivery snaps to the end of the route.
    """
    current = _clamp(current)

    if status in (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING):
        target = 0.0
    elif status in (OrderStatus.READY_FOR_PICKUP, OrderStatus.DRIVER_ASSIGNED):
        target = PICKUP_APPROACH_PROGRESS
    elif status == OrderStatus.PICKED_UP:
        target = PICKED_UP_PROGRESS
    elif status == OrderStatus.ON_THE_WAY:
        target = min(current + ON_THE_WAY_STEP, ON_THE_WAY_CAP)
    elif status == OrderStatus.ARRIVING:
        target = min(current + ARRIVING_STEP, ARRIVING_CAP)
    elif status == OrderStatus.DELIVERED:
        target = 1.0
    else:
        target = current

    return max(current, target)
