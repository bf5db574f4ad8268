from __future__ import annotations

from typing import List, Optional, Sequence

from nav_overlay.contracts.route_contract import GeoPoint, RouteGeometry
from nav_overlay.errors import DirectionsError, NoRouteError
from nav_overlay.providers.base import DirectionsProvider


class StraightLineProvider(DirectionsProvider):
    """
    Deterministic fake directions so the pipeline runs end-to-end without APIs.
    Connects the waypoints with straight legs, each split into ``points_per_leg``
    pieces so progress and bearing have real vertices to work with.

    ``fail_with`` makes every call raise that error instead (outage drills).
    """

    def __init__(self, points_per_leg: int = 4, fail_with: Optional[DirectionsError] = None):
        self.points_per_leg = max(1, points_per_leg)
        self.fail_with = fail_with
        self.calls: List[tuple[tuple[GeoPoint, ...], str]] = []

    def get_route(self, waypoints: Sequence[GeoPoint], profile: str) -> RouteGeometry:
        self.calls.append((tuple(waypoints), profile))
        if self.fail_with is not None:
            raise self.fail_with

        pts = [wp for wp in waypoints if wp.is_finite()]
        if len(pts) < 2:
            raise NoRouteError("Fewer than two valid waypoints")

        out: List[GeoPoint] = [pts[0]]
        n = self.points_per_leg
        for a, b in zip(pts, pts[1:]):
            for k in range(1, n + 1):
                u = k / n
                out.append(GeoPoint(lng=a.lng + u * (b.lng - a.lng), lat=a.lat + u * (b.lat - a.lat)))
        return RouteGeometry(points=tuple(out))
