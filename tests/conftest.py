from __future__ import annotations

from concurrent.futures import Executor, Future
from math import degrees
from typing import Callable, List, Tuple

import pytest

from nav_overlay.config import Settings
from nav_overlay.contracts.route_contract import GeoPoint, RouteGeometry
from nav_overlay.core.geometry import EARTH_RADIUS_M
from nav_overlay.core.models import PositionFix
from nav_overlay.core.session import InlineExecutor, NavigationSession, immediate_scheduler
from nav_overlay.providers.mock import StraightLineProvider
from nav_overlay.render.recording import RecordingRenderer

SAO_PAULO = GeoPoint(lng=-46.63, lat=-23.55)


def north_of(p: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(lng=p.lng, lat=p.lat + degrees(meters / EARTH_RADIUS_M))


def fix_at(p: GeoPoint, t_ms: int = 0, speed: float = 5.0, heading: float = 90.0) -> PositionFix:
    return PositionFix(point=p, speed_mps=speed, heading_deg=heading, timestamp_ms=t_ms)


class FakeClock:
    def __init__(self, now_ms: int = 0):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


class ManualExecutor(Executor):
    """Holds submitted work until ``run_pending()``: a slow provider on demand."""

    def __init__(self):
        self.pending: List[Tuple[Future, Callable, tuple]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        fut: Future = Future()
        self.pending.append((fut, fn, args))
        return fut

    def run_pending(self) -> None:
        work, self.pending = self.pending, []
        for fut, fn, args in work:
            try:
                fut.set_result(fn(*args))
            except Exception as e:
                fut.set_exception(e)


class FixedRouteProvider(StraightLineProvider):
    """Always returns the same geometry, whatever the waypoints."""

    def __init__(self, route: RouteGeometry):
        super().__init__()
        self.route = route

    def get_route(self, waypoints, profile):
        self.calls.append((tuple(waypoints), profile))
        if self.fail_with is not None:
            raise self.fail_with
        return self.route


@pytest.fixture
def cfg() -> Settings:
    return Settings(mapbox_token="test-token")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000_000)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def east_route() -> RouteGeometry:
    """Two-point route heading due east from central Sao Paulo."""
    return RouteGeometry(points=(SAO_PAULO, GeoPoint(lng=-46.62, lat=-23.55)))


@pytest.fixture
def make_session(cfg, clock, renderer):
    def _make(provider, origin=SAO_PAULO, destinations=(GeoPoint(-46.62, -23.55),), executor=None, events=None):
        return NavigationSession(
            provider=provider,
            renderer=renderer,
            origin=origin,
            destinations=destinations,
            cfg=cfg,
            events=events,
            executor=executor or InlineExecutor(),
            scheduler=immediate_scheduler,
            clock=clock,
            animate=False,
        )

    return _make
