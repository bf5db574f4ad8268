from __future__ import annotations

import threading

import pytest

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.smoother import AnimationLoop, PositionSmoother


class TestPositionSmoother:
    @pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
    def test_rejects_alpha_outside_unit_interval(self, alpha):
        with pytest.raises(ValueError):
            PositionSmoother(alpha)

    def test_nothing_to_draw_before_first_target(self):
        assert PositionSmoother().tick() is None

    def test_first_target_starts_on_the_target(self):
        s = PositionSmoother(0.2)
        p = GeoPoint(-46.63, -23.55)
        s.set_target(p)
        assert s.current == p
        assert s.tick() == p

    def test_geometric_convergence(self):
        """Residual after k ticks is (1 - alpha)^k of the initial gap."""
        s = PositionSmoother(0.2)
        a, b = GeoPoint(0.0, 0.0), GeoPoint(1.0, 2.0)
        s.set_target(a)
        s.set_target(b)
        for _ in range(10):
            cur = s.tick()
        residual = 0.8 ** 10
        assert b.lng - cur.lng == pytest.approx(1.0 * residual)
        assert b.lat - cur.lat == pytest.approx(2.0 * residual)

    def test_alpha_one_jumps(self):
        s = PositionSmoother(1.0)
        s.set_target(GeoPoint(0.0, 0.0))
        s.set_target(GeoPoint(3.0, 4.0))
        assert s.tick() == GeoPoint(3.0, 4.0)

    def test_reset_forgets_position(self):
        s = PositionSmoother()
        s.set_target(GeoPoint(1.0, 1.0))
        s.reset()
        assert s.current is None and s.target is None


class TestAnimationLoop:
    def test_frames_until_stopped(self):
        s = PositionSmoother(0.5)
        s.set_target(GeoPoint(0.0, 0.0))
        s.set_target(GeoPoint(1.0, 1.0))
        got_frames = threading.Event()
        frames = []

        def on_frame(p):
            frames.append(p)
            if len(frames) >= 3:
                got_frames.set()

        loop = AnimationLoop(s, on_frame, interval_s=0.001)
        loop.start()
        loop.start()  # idempotent
        assert got_frames.wait(2.0)
        loop.stop()
        assert not loop.running
        assert len(frames) >= 3

        loop.start()
        assert loop.running
        loop.stop()

    def test_frame_handler_errors_do_not_kill_the_loop(self):
        s = PositionSmoother(0.5)
        s.set_target(GeoPoint(0.0, 0.0))
        calls = []
        second = threading.Event()

        def on_frame(p):
            calls.append(p)
            if len(calls) >= 2:
                second.set()
            raise RuntimeError("renderer gone")

        loop = AnimationLoop(s, on_frame, interval_s=0.001)
        loop.start()
        assert second.wait(2.0)
        loop.stop()
