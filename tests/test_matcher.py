from __future__ import annotations

import pytest

from conftest import north_of
from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.matcher import MapMatcher

MIDPOINT = GeoPoint(-46.625, -23.55)


class TestMapMatcher:
    def test_no_route_keeps_raw_point(self):
        out = MapMatcher(30.0).match(MIDPOINT, None)
        assert out.target == MIDPOINT
        assert out.match is None
        assert not out.snapped

    def test_just_inside_threshold_snaps(self, east_route):
        raw = north_of(MIDPOINT, 29.9)
        out = MapMatcher(30.0).match(raw, east_route)
        assert out.snapped
        assert out.target.lat == pytest.approx(-23.55, abs=1e-9)
        assert out.target.lng == pytest.approx(MIDPOINT.lng, abs=1e-9)
        assert out.match.distance_m == pytest.approx(29.9, abs=0.01)

    def test_just_outside_threshold_keeps_raw(self, east_route):
        raw = north_of(MIDPOINT, 30.1)
        out = MapMatcher(30.0).match(raw, east_route)
        assert not out.snapped
        assert out.target == raw
        # the match is still reported so progress can measure the deviation
        assert out.match is not None
        assert out.match.distance_m == pytest.approx(30.1, abs=0.01)

    def test_fix_on_route(self, east_route):
        out = MapMatcher(30.0).match(MIDPOINT, east_route)
        assert out.snapped
        assert out.match.distance_m == pytest.approx(0.0, abs=1e-6)
        assert out.match.segment_index == 0
