"""Centralized settings for the navigation overlay."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "NAV_OVERLAY_"}

    # Marker animation: smaller alpha is smoother but converges slower
    smoothing_alpha: float = Field(default=0.2, gt=0.0, le=1.0)
    tick_interval_s: float = Field(default=1.0 / 60.0, gt=0.0)

    # Map matching
    snap_threshold_m: float = 30.0       # closer than this -> snap onto route
    deviation_threshold_m: float = 50.0  # farther than this -> off route

    # Bearing
    speed_threshold_mps: float = 0.5     # at or below -> treated as stationary

    # Throttles (wall-clock milliseconds)
    progress_interval_ms: int = 5000     # traveled/remaining redraw + deviation check
    recalc_interval_ms: int = 5000       # minimum gap between deviation recalcs

    # Follow camera
    follow_zoom: float = 17.0
    follow_pitch: float = 60.0
    follow_duration_ms: int = 1000
    recenter_duration_ms: int = 500
    recenter_settle_ms: int = 50         # extra wait after the recenter ease
    offset_x_px: float = 50.0
    viewport_height_px: float = 800.0    # agent drawn viewport_height / 5 below center

    # Overview camera
    overview_padding_px: float = 80.0
    overview_max_zoom: float = 16.0
    overview_duration_ms: int = 1000
    default_zoom: float = 10.0

    # Directions provider; an empty token means the mapbox provider is unusable
    mapbox_token: str = ""
    mapbox_base_url: str = "https://api.mapbox.com/directions/v5/mapbox"
    directions_profile: str = "driving-traffic"
    http_timeout_s: int = 20
    http_tries: int = 1                  # deviation recalcs are the retry path
    http_backoff_s: float = 0.8
    user_agent: str = "NavOverlay/0.1.0"

    log_level: str = "INFO"


settings = Settings()
