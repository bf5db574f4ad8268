from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import isfinite
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from nav_overlay.contracts.route_contract import GeoPoint


class PositionFix(BaseModel):
    """One raw sample from the position source. Never mutated once built."""

    model_config = {"frozen": True}

    point: GeoPoint
    speed_mps: Optional[float] = None
    heading_deg: Optional[float] = None
    timestamp_ms: int = Field(default=0, ge=0)

    @field_validator("point")
    @classmethod
    def _finite_point(cls, v: GeoPoint) -> GeoPoint:
        if not v.is_finite():
            raise ValueError(f"non-finite coordinates: lng={v.lng} lat={v.lat}")
        return v

    # Sensors report NaN for "unknown"; treat it the same as missing
    @field_validator("speed_mps", "heading_deg")
    @classmethod
    def _finite_or_none(cls, v: Optional[float]) -> Optional[float]:
        if v is None or not isfinite(v):
            return None
        return v


class CameraMode(str, Enum):
    FOLLOWING = "following"
    FREE_LOOK = "free_look"


@dataclass
class CameraState:
    mode: CameraMode = CameraMode.FOLLOWING
    stable_bearing_deg: float = 0.0
    recenter_pending: bool = False


@dataclass
class SmoothedPosition:
    current: Optional[GeoPoint] = None  # render state, written by the animation tick only
    target: Optional[GeoPoint] = None   # written by the matching pipeline only


class RouteProgress(BaseModel):
    traveled: List[GeoPoint]
    remaining: List[GeoPoint]
    segment_index: int
    deviation_m: float
    computed_at_ms: int


# ---------------------------------------------------------------------------
# Camera intents: fire-and-forget, a higher seq supersedes a lower one
# ---------------------------------------------------------------------------

class CameraMove(BaseModel):
    seq: int
    center: GeoPoint
    bearing: Optional[float] = None  # None keeps the renderer's current bearing
    zoom: float
    pitch: Optional[float] = None
    duration_ms: int
    offset: Tuple[float, float] = (0.0, 0.0)


class FitBounds(BaseModel):
    seq: int
    points: List[GeoPoint]
    padding: float
    max_zoom: float
    duration_ms: int
