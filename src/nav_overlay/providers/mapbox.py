from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from nav_overlay.config import Settings, settings as default_settings
from nav_overlay.contracts.route_contract import GeoPoint, RouteGeometry
from nav_overlay.errors import NoRouteError, ProviderError
from nav_overlay.providers.base import DirectionsProvider
from nav_overlay.providers.http import HTTPClient

log = logging.getLogger(__name__)


def _coords_path(waypoints: Sequence[GeoPoint]) -> str:
    """``lng,lat;lng,lat;...`` with invalid waypoints dropped."""
    parts = []
    for wp in waypoints:
        if not wp.is_finite():
            log.warning("Ignoring invalid waypoint %s", wp)
            continue
        parts.append(f"{wp.lng},{wp.lat}")
    return ";".join(parts)


class MapboxDirectionsProvider(DirectionsProvider):
    """
    Mapbox Directions v5.

    GET {base}/{profile}/{lng,lat;lng,lat;...}?geometries=geojson&overview=full
    -> routes[0].geometry.coordinates
    """

    def __init__(self, cfg: Optional[Settings] = None, http: Optional[HTTPClient] = None):
        self.cfg = cfg or default_settings
        if not self.cfg.mapbox_token:
            raise ValueError("Mapbox provider needs NAV_OVERLAY_MAPBOX_TOKEN")
        self.http = http or HTTPClient(
            user_agent=self.cfg.user_agent,
            timeout_s=self.cfg.http_timeout_s,
            tries=self.cfg.http_tries,
            backoff_s=self.cfg.http_backoff_s,
        )

    def build_url(self, waypoints: Sequence[GeoPoint], profile: str) -> str:
        path = _coords_path(waypoints)
        if path.count(";") < 1:
            raise NoRouteError("Fewer than two valid waypoints")
        return f"{self.cfg.mapbox_base_url}/{profile}/{path}"

    def get_route(self, waypoints: Sequence[GeoPoint], profile: str) -> RouteGeometry:
        url = self.build_url(waypoints, profile)
        params = {
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
            "access_token": self.cfg.mapbox_token,
        }
        data = self.http.get_json(url, params=params)
        return self._parse(data)

    @staticmethod
    def _parse(data: Dict[str, Any]) -> RouteGeometry:
        routes = data.get("routes") or []
        if not routes:
            raise NoRouteError(f"No route found (code={data.get('code')})")
        try:
            coords = routes[0]["geometry"]["coordinates"]
        except (KeyError, TypeError) as e:
            raise ProviderError(200, f"Malformed route payload: {e}") from e
        geom = RouteGeometry.from_coordinates(coords)
        if geom is None:
            raise NoRouteError("Route geometry has fewer than two coordinates")
        return geom
