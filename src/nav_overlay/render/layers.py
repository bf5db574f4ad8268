"""GeoJSON for the single ``route`` source and the line layers that style it."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from nav_overlay.contracts.route_contract import GeoPoint

ROUTE_SOURCE_ID = "route"

# Drawn bottom to top; each layer filters the shared source on the "color" property
ROUTE_LAYERS: List[Dict[str, Any]] = [
    {"id": "route-blue-outline", "color": "blue", "line_color": "#ffffff", "line_width": 12, "line_opacity": 0.8},
    {"id": "route-blue", "color": "blue", "line_color": "#0074D9", "line_width": 8, "line_opacity": 1.0},
    {"id": "route-gray", "color": "gray", "line_color": "#AAAAAA", "line_width": 10, "line_opacity": 1.0},
]


def _line_feature(points: Sequence[GeoPoint], color: str) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": [p.as_lnglat() for p in points]},
        "properties": {"color": color},
    }


def route_feature_collection(
    traveled: Optional[Sequence[GeoPoint]],
    remaining: Optional[Sequence[GeoPoint]],
) -> Dict[str, Any]:
    """Gray traveled line plus blue remaining line; lines under 2 points are left out."""
    features = []
    if traveled and len(traveled) > 1:
        features.append(_line_feature(traveled, "gray"))
    if remaining and len(remaining) > 1:
        features.append(_line_feature(remaining, "blue"))
    return {"type": "FeatureCollection", "features": features}
