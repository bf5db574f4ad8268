from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from nav_overlay.contracts.route_contract import GeoPoint, RouteGeometry


class DirectionsProvider(ABC):
    """Compute a route through ordered waypoints (agent position first)."""

    @abstractmethod
    def get_route(self, waypoints: Sequence[GeoPoint], profile: str) -> RouteGeometry:
        """Raise NoRouteError or ProviderError when no route can be produced."""
        raise NotImplementedError
