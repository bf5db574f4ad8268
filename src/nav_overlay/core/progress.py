from __future__ import annotations

import logging
from typing import List, Optional

from nav_overlay.contracts.route_contract import GeoPoint, MatchResult, RouteGeometry
from nav_overlay.core.models import RouteProgress

log = logging.getLogger(__name__)


def split_route(route: RouteGeometry, match: MatchResult) -> tuple[List[GeoPoint], List[GeoPoint]]:
    """Cut *route* at the snapped point; both halves share that point."""
    i = match.segment_index
    coords = list(route.points)
    traveled = coords[: i + 1] + [match.snapped]
    remaining = [match.snapped] + coords[i + 1:]
    return traveled, remaining


class RouteProgressTracker:
    """
    Traveled/remaining split of the active route, recomputed at most once per
    ``interval_ms``. The timer is independent of the recalculation throttle.
    """

    def __init__(self, interval_ms: int = 5000, deviation_threshold_m: float = 50.0):
        self.interval_ms = interval_ms
        self.deviation_threshold_m = deviation_threshold_m
        self.last_progress_at_ms: Optional[int] = None
        self.latest: Optional[RouteProgress] = None

    @property
    def traveled(self) -> List[GeoPoint]:
        return list(self.latest.traveled) if self.latest else []

    def is_due(self, now_ms: int) -> bool:
        if self.last_progress_at_ms is None:
            return True
        return now_ms - self.last_progress_at_ms >= self.interval_ms

    def update(
        self,
        match: Optional[MatchResult],
        route: Optional[RouteGeometry],
        now_ms: int,
    ) -> Optional[RouteProgress]:
        """Return fresh progress when due and a route is active, else None."""
        if route is None or match is None or not self.is_due(now_ms):
            return None

        traveled, remaining = split_route(route, match)
        self.last_progress_at_ms = now_ms
        self.latest = RouteProgress(
            traveled=traveled,
            remaining=remaining,
            segment_index=match.segment_index,
            deviation_m=match.distance_m,
            computed_at_ms=now_ms,
        )
        return self.latest

    def is_deviation(self, progress: RouteProgress) -> bool:
        return progress.deviation_m > self.deviation_threshold_m

    def reset(self) -> None:
        self.last_progress_at_ms = None
        self.latest = None
