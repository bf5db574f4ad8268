"""Heading selection for the follow camera."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from math import isfinite
from typing import Optional

from nav_overlay.contracts.route_contract import MatchResult, RouteGeometry
from nav_overlay.core.geometry import bearing, distance, normalize_bearing
from nav_overlay.core.models import CameraState

log = logging.getLogger(__name__)

# Lookahead closer than this to the matched point has no usable direction
_MIN_LOOKAHEAD_M = 0.01


@dataclass(frozen=True)
class BearingEstimate:
    camera_bearing_deg: float   # what the camera should use for this fix
    stable_bearing_deg: float   # carried to the next fix
    recenter_pending: bool


def route_bearing(match: Optional[MatchResult], route: Optional[RouteGeometry]) -> Optional[float]:
    """Bearing from the matched point toward the next route vertex, or None."""
    if match is None or route is None:
        return None

    coords = route.points
    i = match.segment_index
    if i + 1 < len(coords):
        lookahead = coords[i + 1]
    elif i > 0:
        lookahead = coords[i - 1]
    else:
        return None

    if distance(match.snapped, lookahead) < _MIN_LOOKAHEAD_M:
        return None
    return bearing(match.snapped, lookahead)


class BearingEstimator:
    """
    Route-relative heading when moving, frozen heading when stationary.

    Route geometry beats the raw sensor heading, which jitters at low speed
    and lags through turns.
    """

    def __init__(self, speed_threshold_mps: float = 0.5):
        self.speed_threshold_mps = speed_threshold_mps

    def estimate(
        self,
        state: CameraState,
        speed_mps: Optional[float],
        heading_deg: Optional[float],
        match: Optional[MatchResult],
        route: Optional[RouteGeometry],
    ) -> BearingEstimate:
        speed = speed_mps if speed_mps is not None else 0.0
        stable = state.stable_bearing_deg

        if speed <= self.speed_threshold_mps:
            if state.recenter_pending:
                return BearingEstimate(0.0, stable, True)
            return BearingEstimate(stable, stable, False)

        candidate = route_bearing(match, route)
        if candidate is None and heading_deg is not None and isfinite(heading_deg):
            candidate = heading_deg

        if candidate is not None and isfinite(candidate):
            stable = normalize_bearing(candidate)
        else:
            log.debug("No usable bearing at %.2f m/s, keeping %.1f", speed, stable)
        return BearingEstimate(stable, stable, False)
