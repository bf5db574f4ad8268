from __future__ import annotations

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.models import CameraMove, FitBounds
from nav_overlay.render.layers import ROUTE_LAYERS, route_feature_collection
from nav_overlay.render.recording import RecordingRenderer
from nav_overlay.tools.make_map import build_html

A, B, C = GeoPoint(0.0, 0.0), GeoPoint(0.001, 0.0), GeoPoint(0.002, 0.0)


def test_feature_collection_leaves_out_short_lines():
    fc = route_feature_collection([A], [A, B, C])
    assert [f["properties"]["color"] for f in fc["features"]] == ["blue"]
    assert route_feature_collection(None, None)["features"] == []


def test_layers_share_one_source():
    assert {layer["color"] for layer in ROUTE_LAYERS} == {"blue", "gray"}


class TestRecordingRenderer:
    def test_route_source_is_replaced(self):
        r = RecordingRenderer()
        r.set_route_layers([A, B], [B, C])
        r.set_route_layers(None, [B, C])
        assert r.route_updates == 2
        assert r.route_line("gray") == []
        assert r.route_line("blue") == [[0.001, 0.0], [0.002, 0.0]]

    def test_latest_camera_is_highest_seq(self):
        r = RecordingRenderer()
        late = CameraMove(seq=5, center=A, zoom=17, duration_ms=1000)
        early = FitBounds(seq=2, points=[A, B], padding=80, max_zoom=16, duration_ms=1000)
        r.animate_camera(late)
        r.fit_bounds(early)
        assert r.latest_camera is late

    def test_marker_track(self):
        r = RecordingRenderer()
        r.move_marker(A)
        r.move_marker(B)
        assert r.marker == B
        assert r.marker_track == [A, B]


def test_make_map_html_embeds_run():
    r = RecordingRenderer()
    r.set_route_layers([A, B], [B, C])
    html = build_html(
        {
            "origin": A.as_lnglat(),
            "destinations": [C.as_lnglat()],
            "route_source": r.route_source,
            "marker_track": [A.as_lnglat()],
            "fixes": [A.as_lnglat(), B.as_lnglat()],
        }
    )
    assert "L.map('map')" in html
    assert '"FeatureCollection"' in html
    assert "#0074D9" in html
