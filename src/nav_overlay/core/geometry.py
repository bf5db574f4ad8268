"""Geometry helpers: snap-to-polyline, great-circle distance and bearing."""
from __future__ import annotations

from bisect import bisect_right
from math import atan2, cos, degrees, isfinite, radians, sin, sqrt
from typing import Iterable, Sequence, Tuple

from shapely.geometry import LineString, Point

from nav_overlay.contracts.route_contract import GeoPoint, MatchResult
from nav_overlay.errors import DegenerateLineError, GeometryError


EARTH_RADIUS_M = 6_371_000.0


# ---------------------------------------------------------------------------
# Geo helpers
# ---------------------------------------------------------------------------

def _wrap_lng(d_lng: float) -> float:
    """Fold a longitude delta into [-180, 180)."""
    return (d_lng + 180.0) % 360.0 - 180.0


def _to_local(p: GeoPoint, ref: GeoPoint) -> Tuple[float, float]:
    """Equirectangular projection around *ref*, in metres (x east, y north)."""
    x = EARTH_RADIUS_M * radians(_wrap_lng(p.lng - ref.lng)) * cos(radians(ref.lat))
    y = EARTH_RADIUS_M * radians(p.lat - ref.lat)
    return x, y


def _from_local(x: float, y: float, ref: GeoPoint) -> GeoPoint:
    lat = ref.lat + degrees(y / EARTH_RADIUS_M)
    k = cos(radians(ref.lat))
    d_lng = degrees(x / (EARTH_RADIUS_M * k)) if k > 1e-12 else 0.0
    lng = ref.lng + d_lng
    if not -180.0 <= lng <= 180.0:
        lng = _wrap_lng(lng)
    return GeoPoint(lng=lng, lat=lat)


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in metres between two WGS-84 points."""
    lat1r, lon1r, lat2r, lon2r = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlat = lat2r - lat1r
    dlon = lon2r - lon1r
    h = sin(dlat / 2) ** 2 + cos(lat1r) * cos(lat2r) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(max(0.0, 1 - h)))


def bearing(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing from *a* to *b*, degrees clockwise from true north in [0, 360)."""
    lat1r, lon1r, lat2r, lon2r = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlon = lon2r - lon1r
    x = sin(dlon) * cos(lat2r)
    y = cos(lat1r) * sin(lat2r) - sin(lat1r) * cos(lat2r) * cos(dlon)
    brg = (degrees(atan2(x, y)) + 360.0) % 360.0
    # (-tiny + 360) can round up to exactly 360
    return 0.0 if brg >= 360.0 else brg


def normalize_bearing(deg: float) -> float:
    brg = deg % 360.0
    return 0.0 if brg >= 360.0 else brg


def bounding_box(points: Iterable[GeoPoint]) -> Tuple[float, float, float, float]:
    """Return ``(min_lng, min_lat, max_lng, max_lat)``; raises ValueError when empty."""
    pts = list(points)
    if not pts:
        raise ValueError("bounding_box() of an empty point set")
    lngs = [p.lng for p in pts]
    lats = [p.lat for p in pts]
    return min(lngs), min(lats), max(lngs), max(lats)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def nearest_point_on_line(line: Sequence[GeoPoint], point: GeoPoint) -> MatchResult:
    """
    Project *point* onto the polyline *line*.

    The polyline is flattened into a local metric frame centred on the query
    point, which keeps the projection accurate at the scale of a road segment
    and makes antimeridian-crossing lines continuous.

    Parameters
    ----------
    line : sequence of GeoPoint
        Route polyline, at least two points.
    point : GeoPoint
        Raw position to snap.

    Returns
    -------
    MatchResult
        Snapped point, index of the segment holding it and the geodesic
        distance from *point* to the snapped point.
    """
    if len(line) < 2:
        raise DegenerateLineError(len(line))

    local = [_to_local(p, point) for p in line]
    geom = LineString(local)
    along = geom.project(Point(0.0, 0.0))
    snapped_xy = geom.interpolate(along)
    sx, sy = snapped_xy.x, snapped_xy.y
    if not (isfinite(along) and isfinite(sx) and isfinite(sy)):
        raise GeometryError(f"Non-finite projection onto {len(line)}-point line")

    # Cumulative vertex distances along the local line
    cum = [0.0]
    for (x0, y0), (x1, y1) in zip(local, local[1:]):
        cum.append(cum[-1] + sqrt((x1 - x0) ** 2 + (y1 - y0) ** 2))

    seg_idx = bisect_right(cum, along) - 1
    seg_idx = max(0, min(seg_idx, len(line) - 2))

    snapped = _from_local(sx, sy, point)
    return MatchResult(
        snapped=snapped,
        segment_index=seg_idx,
        distance_m=distance(point, snapped),
    )
