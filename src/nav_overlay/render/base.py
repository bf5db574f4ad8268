from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.models import CameraMove, FitBounds


class MapRenderer(ABC):
    """Intents consumed by the map view. All calls are fire-and-forget."""

    @abstractmethod
    def set_route_layers(
        self,
        traveled: Optional[Sequence[GeoPoint]],
        remaining: Optional[Sequence[GeoPoint]],
    ) -> None:
        """Replace the route source. Both None clears it."""
        raise NotImplementedError

    @abstractmethod
    def move_marker(self, point: GeoPoint) -> None:
        raise NotImplementedError

    @abstractmethod
    def animate_camera(self, move: CameraMove) -> None:
        raise NotImplementedError

    @abstractmethod
    def fit_bounds(self, fit: FitBounds) -> None:
        raise NotImplementedError
