from __future__ import annotations

from typing import Optional

from nav_overlay.config import Settings
from nav_overlay.providers.base import DirectionsProvider


def build_provider(name: str, cfg: Optional[Settings] = None) -> DirectionsProvider:
    """
    Build a directions provider from a CLI token:
      "mock"    straight-line legs, no network
      "mapbox"  Mapbox Directions v5 (needs NAV_OVERLAY_MAPBOX_TOKEN)
    """
    token = (name or "mock").strip().lower()

    # Local imports keep requests out of mock-only runs
    if token in ("mock", "straight"):
        from nav_overlay.providers.mock import StraightLineProvider

        return StraightLineProvider()
    if token == "mapbox":
        from nav_overlay.providers.mapbox import MapboxDirectionsProvider

        return MapboxDirectionsProvider(cfg)
    raise ValueError(f"Unknown provider token: '{name}' (supported: mock, mapbox)")
