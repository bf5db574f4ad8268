# path: nav-overlay/src/nav_overlay/contracts/route_contract.py

from __future__ import annotations
from dataclasses import dataclass
from math import isfinite
from typing import Iterable, List, Optional, Sequence, Tuple

from nav_overlay.errors import DegenerateLineError


@dataclass(frozen=True)
class GeoPoint:
    lng: float
    lat: float

    def is_finite(self) -> bool:
        return isfinite(self.lng) and isfinite(self.lat)

    def as_lnglat(self) -> List[float]:
        return [self.lng, self.lat]

    @classmethod
    def from_lnglat(cls, coord: Sequence[float]) -> GeoPoint:
        lng, lat = coord
        return cls(lng=float(lng), lat=float(lat))


@dataclass(frozen=True)
class RouteGeometry:
    points: Tuple[GeoPoint, ...]

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise DegenerateLineError(len(self.points))

    def __len__(self) -> int:
        return len(self.points)

    @classmethod
    def from_coordinates(cls, coords: Iterable[Sequence[float]]) -> Optional[RouteGeometry]:
        """Build from ``[[lng, lat], ...]``; fewer than 2 points means no route."""
        pts = tuple(GeoPoint.from_lnglat(c) for c in coords)
        if len(pts) < 2:
            return None
        return cls(points=pts)

    def coordinates(self) -> List[List[float]]:
        return [p.as_lnglat() for p in self.points]


@dataclass(frozen=True)
class MatchResult:
    snapped: GeoPoint
    segment_index: int  # segment route[i] -> route[i + 1] holding the snapped point
    distance_m: float   # raw point to snapped point
