from __future__ import annotations

import pytest

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.bearing import BearingEstimate
from nav_overlay.core.camera import CameraController
from nav_overlay.core.models import CameraMode, CameraMove, FitBounds

P = GeoPoint(-46.63, -23.55)


class TestCameraController:
    def test_follow_move(self, cfg):
        cam = CameraController(cfg)
        move = cam.follow(P, 90.0)
        assert move.center == P
        assert move.bearing == 90.0
        assert move.zoom == cfg.follow_zoom
        assert move.pitch == cfg.follow_pitch
        assert move.duration_ms == cfg.follow_duration_ms
        assert move.offset == (cfg.offset_x_px, cfg.viewport_height_px / 5)

    def test_seq_increases(self, cfg):
        cam = CameraController(cfg)
        a = cam.follow(P, 0.0)
        b = cam.follow(P, 0.0)
        assert b.seq > a.seq

    @pytest.mark.parametrize("gesture", ["on_user_drag", "on_user_zoom"])
    def test_gesture_enters_free_look(self, cfg, gesture):
        cam = CameraController(cfg)
        getattr(cam, gesture)()
        assert cam.mode is CameraMode.FREE_LOOK
        assert cam.follow(P, 90.0) is None

    def test_recenter_round_trip(self, cfg):
        cam = CameraController(cfg)
        cam.apply_bearing(BearingEstimate(135.0, 135.0, False))
        cam.on_user_drag()

        move = cam.begin_recenter(P)
        assert move.duration_ms == cfg.recenter_duration_ms
        assert move.bearing == 135.0
        # still free look until the ease completes
        assert cam.mode is CameraMode.FREE_LOOK

        cam.complete_recenter()
        assert cam.mode is CameraMode.FOLLOWING
        assert cam.state.recenter_pending

    def test_reset_returns_to_following_and_keeps_seq(self, cfg):
        cam = CameraController(cfg)
        first = cam.follow(P, 0.0)
        cam.apply_bearing(BearingEstimate(0.0, 200.0, True))
        cam.on_user_drag()
        cam.reset()
        assert cam.mode is CameraMode.FOLLOWING
        assert cam.state.stable_bearing_deg == 0.0
        assert not cam.state.recenter_pending
        assert cam.follow(P, 0.0).seq > first.seq

    def test_recenter_without_position(self, cfg):
        assert CameraController(cfg).begin_recenter(None) is None

    def test_overview_fits_valid_points(self, cfg):
        cam = CameraController(cfg)
        dests = [GeoPoint(-46.62, -23.55), GeoPoint(float("nan"), 0.0)]
        fit = cam.overview(P, dests)
        assert isinstance(fit, FitBounds)
        assert fit.points == [P, dests[0]]
        assert fit.padding == cfg.overview_padding_px
        assert fit.max_zoom == cfg.overview_max_zoom
        assert cam.mode is CameraMode.FREE_LOOK

    def test_overview_without_points_frames_default_center(self, cfg):
        intent = CameraController(cfg).overview(None, [])
        assert isinstance(intent, CameraMove)
        assert intent.center == GeoPoint(0.0, 0.0)
        assert intent.zoom == cfg.default_zoom
