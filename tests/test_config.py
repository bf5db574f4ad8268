from __future__ import annotations

import pytest
from pydantic import ValidationError

from nav_overlay.config import Settings


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("NAV_OVERLAY_SNAP_THRESHOLD_M", "25")
    monkeypatch.setenv("NAV_OVERLAY_MAPBOX_TOKEN", "pk.abc")
    s = Settings()
    assert s.snap_threshold_m == 25.0
    assert s.mapbox_token == "pk.abc"


def test_smoothing_alpha_bounds():
    with pytest.raises(ValidationError):
        Settings(smoothing_alpha=0.0)
    assert Settings(smoothing_alpha=1.0).smoothing_alpha == 1.0
