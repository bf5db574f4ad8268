from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from nav_overlay.contracts.route_contract import GeoPoint, MatchResult, RouteGeometry
from nav_overlay.core.geometry import nearest_point_on_line
from nav_overlay.errors import GeometryError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    target: GeoPoint                 # where the marker should head
    match: Optional[MatchResult]     # None when there is no usable route
    snapped: bool


class MapMatcher:
    """
    Snap raw fixes onto the active route.

    Only fixes closer than ``snap_threshold_m`` are snapped; anything farther
    keeps its raw position so a parallel road is never mistaken for the route.
    """

    def __init__(self, snap_threshold_m: float = 30.0):
        self.snap_threshold_m = snap_threshold_m

    def match(self, point: GeoPoint, route: Optional[RouteGeometry]) -> MatchOutcome:
        if route is None:
            return MatchOutcome(target=point, match=None, snapped=False)

        try:
            result = nearest_point_on_line(route.points, point)
        except (GeometryError, ValueError) as exc:
            log.warning("Snap-to-route failed, using raw position: %s", exc)
            return MatchOutcome(target=point, match=None, snapped=False)

        if result.distance_m < self.snap_threshold_m:
            return MatchOutcome(target=result.snapped, match=result, snapped=True)
        return MatchOutcome(target=point, match=result, snapped=False)
