from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence, Union

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.models import CameraMove, FitBounds
from nav_overlay.render.base import MapRenderer
from nav_overlay.render.layers import route_feature_collection


class RecordingRenderer(MapRenderer):
    """
    Headless renderer that keeps what a real map would show.
    Used by the replay CLI and the tests.
    """

    def __init__(self, keep_marker_track: bool = True):
        self.route_source: Dict[str, Any] = {"type": "FeatureCollection", "features": []}
        self.route_updates = 0
        self.marker: Optional[GeoPoint] = None
        self.marker_track: List[GeoPoint] = []
        self.camera_intents: List[Union[CameraMove, FitBounds]] = []
        self.keep_marker_track = keep_marker_track
        self._lock = threading.Lock()

    def set_route_layers(
        self,
        traveled: Optional[Sequence[GeoPoint]],
        remaining: Optional[Sequence[GeoPoint]],
    ) -> None:
        with self._lock:
            self.route_source = route_feature_collection(traveled, remaining)
            self.route_updates += 1

    def move_marker(self, point: GeoPoint) -> None:
        with self._lock:
            self.marker = point
            if self.keep_marker_track:
                self.marker_track.append(point)

    def animate_camera(self, move: CameraMove) -> None:
        with self._lock:
            self.camera_intents.append(move)

    def fit_bounds(self, fit: FitBounds) -> None:
        with self._lock:
            self.camera_intents.append(fit)

    @property
    def latest_camera(self) -> Optional[Union[CameraMove, FitBounds]]:
        """The intent in effect: the one with the highest seq."""
        with self._lock:
            if not self.camera_intents:
                return None
            return max(self.camera_intents, key=lambda i: i.seq)

    def route_line(self, color: str) -> List[List[float]]:
        for feat in self.route_source["features"]:
            if feat["properties"]["color"] == color:
                return feat["geometry"]["coordinates"]
        return []
