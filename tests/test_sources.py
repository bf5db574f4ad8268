from __future__ import annotations

import json
import threading

import pytest

from nav_overlay.core.models import PositionFix
from nav_overlay.errors import InvalidFix
from nav_overlay.sources.base import parse_fix
from nav_overlay.sources.queue_source import QueuePositionSource
from nav_overlay.sources.replay import ReplayPositionSource


class TestParseFix:
    def test_aliases(self):
        fix = parse_fix({"longitude": -46.63, "latitude": -23.55, "speed_mps": 3, "heading_deg": 10, "t_ms": 5})
        assert fix.point.lng == -46.63
        assert fix.speed_mps == 3.0
        assert fix.heading_deg == 10.0
        assert fix.timestamp_ms == 5

    @pytest.mark.parametrize(
        "raw",
        [
            {"lat": -23.55},
            {"lng": "east", "lat": -23.55},
            {"lng": float("nan"), "lat": -23.55},
            {"lng": -46.63, "lat": float("inf")},
            {"lng": -46.63, "lat": -23.55, "timestamp_ms": -1},
        ],
    )
    def test_invalid(self, raw):
        with pytest.raises(InvalidFix):
            parse_fix(raw)

    def test_unknown_speed_and_heading_become_none(self):
        fix = parse_fix({"lng": 0, "lat": 0, "speed": float("nan"), "heading": float("nan")})
        assert fix.speed_mps is None
        assert fix.heading_deg is None


class TestReplayPositionSource:
    RECORDS = [
        {"lng": 0.0, "lat": 0.0, "timestamp_ms": 0},
        {"lng": None, "lat": 0.0},
        {"lng": 0.001, "lat": 0.0, "timestamp_ms": 1000},
    ]

    def test_drops_invalid_records(self):
        src = ReplayPositionSource(self.RECORDS)
        assert [f.point.lng for f in src.fixes()] == [0.0, 0.001]
        assert [f.timestamp_ms for f in src.subscribe()] == [0, 1000]

    def test_from_trip_file(self, tmp_path):
        path = tmp_path / "trip.json"
        path.write_text(json.dumps({"fixes": self.RECORDS}), encoding="utf-8")
        assert len(ReplayPositionSource.from_file(path).fixes()) == 2

    def test_unsubscribe_ends_iteration(self):
        sub = ReplayPositionSource(self.RECORDS).subscribe()
        assert isinstance(next(sub), PositionFix)
        sub.unsubscribe()
        assert sub.closed
        assert list(sub) == []


class TestQueuePositionSource:
    def test_push_from_another_thread(self):
        src = QueuePositionSource()
        sub = src.subscribe()

        def feed():
            src.push({"lng": 1.0, "lat": 2.0})
            src.push_error(OSError("permission denied"))
            src.push({"lng": "bad", "lat": 2.0})
            src.push({"lng": 3.0, "lat": 4.0})
            src.close()

        t = threading.Thread(target=feed)
        t.start()
        got = [f.point.as_lnglat() for f in sub]
        t.join()
        assert got == [[1.0, 2.0], [3.0, 4.0]]
        assert sub.closed
