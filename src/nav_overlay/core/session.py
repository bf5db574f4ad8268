"""Navigation session: the single owner of all navigation state.

Every mutation (fixes, route completions, user commands, stop) runs under one
re-entrant lock, so the fields below each keep exactly one writer even when
directions calls complete on a worker thread. The animation loop only touches
the smoother, which has its own lock.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Union

from nav_overlay.config import Settings, settings as default_settings
from nav_overlay.contracts.route_contract import GeoPoint, RouteGeometry
from nav_overlay.core.bearing import BearingEstimator
from nav_overlay.core.camera import CameraController
from nav_overlay.core.matcher import MapMatcher
from nav_overlay.core.models import CameraMode, CameraMove, FitBounds, PositionFix, RouteProgress
from nav_overlay.core.progress import RouteProgressTracker
from nav_overlay.core.recalc import RecalcDecision, RecalculationThrottle, waypoint_key
from nav_overlay.core.smoother import AnimationLoop, PositionSmoother
from nav_overlay.errors import DirectionsError
from nav_overlay.providers.base import DirectionsProvider
from nav_overlay.render.base import MapRenderer
from nav_overlay.sources.base import PositionSource, Subscription

log = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], None]


# ---------------------------------------------------------------------------
# Scheduling primitives
# ---------------------------------------------------------------------------

class InlineExecutor(Executor):
    """Runs submitted work immediately on the caller's thread (replay, tests)."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        fut: Future = Future()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:
            fut.set_exception(e)
        return fut


def timer_scheduler(delay_s: float, fn: Callable[[], None]) -> None:
    t = threading.Timer(delay_s, fn)
    t.daemon = True
    t.start()


def immediate_scheduler(delay_s: float, fn: Callable[[], None]) -> None:
    fn()


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Outward events and per-fix report
# ---------------------------------------------------------------------------

@dataclass
class SessionEvents:
    on_route_updated: Optional[Callable[[RouteGeometry], None]] = None
    on_deviation_recalculating: Optional[Callable[[float], None]] = None
    on_marker_selected: Optional[Callable[[int, GeoPoint], None]] = None


@dataclass(frozen=True)
class FixReport:
    fix: PositionFix
    target: GeoPoint
    snapped: bool
    match_distance_m: Optional[float]
    camera_bearing_deg: float
    camera_mode: CameraMode
    camera_move: Optional[CameraMove]
    progress: Optional[RouteProgress]
    decision: Optional[RecalcDecision]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class NavigationSession:
    """
    Wires position fixes through matching, smoothing, bearing, camera and
    progress, and keeps the route fresh through the recalculation throttle.

    Typical lifecycle:
        session = NavigationSession(provider, renderer, origin, destinations)
        session.start()            # animation loop + first route request
        session.run(source)        # blocks until stop() or the feed ends
        session.stop()
    """

    def __init__(
        self,
        provider: DirectionsProvider,
        renderer: MapRenderer,
        origin: Optional[GeoPoint] = None,
        destinations: Sequence[GeoPoint] = (),
        cfg: Optional[Settings] = None,
        events: Optional[SessionEvents] = None,
        executor: Optional[Executor] = None,
        scheduler: Scheduler = timer_scheduler,
        clock: Callable[[], int] = wall_clock_ms,
        animate: bool = True,
    ):
        self.cfg = cfg or default_settings
        self.provider = provider
        self.renderer = renderer
        self.events = events or SessionEvents()
        self.origin = origin
        self.destinations: List[GeoPoint] = list(destinations)

        self.route: Optional[RouteGeometry] = None
        self.last_known_position: Optional[GeoPoint] = None

        self.smoother = PositionSmoother(self.cfg.smoothing_alpha)
        self.animation = AnimationLoop(self.smoother, renderer.move_marker, self.cfg.tick_interval_s)
        self.matcher = MapMatcher(self.cfg.snap_threshold_m)
        self.bearing_estimator = BearingEstimator(self.cfg.speed_threshold_mps)
        self.progress = RouteProgressTracker(self.cfg.progress_interval_ms, self.cfg.deviation_threshold_m)
        self.throttle = RecalculationThrottle(self.cfg.recalc_interval_ms)
        self.camera = CameraController(self.cfg)

        self._executor = executor
        self._owns_executor = executor is None
        self._scheduler = scheduler
        self._clock = clock
        self._animate = animate
        self._lock = threading.RLock()
        self._epoch = 0  # bumped on stop; older completions belong to a previous run
        self._active = False
        self._subscription: Optional[Subscription] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        with self._lock:
            if self._active:
                return
            self._active = True
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="nav-overlay-directions")
            log.info("Navigation session started (%d destination(s))", len(self.destinations))
            if self._animate:
                self.animation.start()
            self.request_route()

    def stop(self) -> None:
        """Detach from the source, stop animating; in-flight routes are discarded on arrival."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._epoch += 1
            sub, self._subscription = self._subscription, None
            executor = self._executor if self._owns_executor else None
            if self._owns_executor:
                self._executor = None
            self.route = None
            self.last_known_position = None
            self.progress.reset()
            self.throttle.reset()
            self.smoother.reset()
            self.camera.reset()
            log.info("Navigation session stopped")

        self.animation.stop()
        if sub is not None:
            sub.unsubscribe()
        if executor is not None:
            executor.shutdown(wait=False)

    def run(self, source: PositionSource) -> None:
        """Consume fixes one at a time until stop() or the source ends."""
        self.start()
        sub = source.subscribe()
        with self._lock:
            self._subscription = sub
        try:
            for fix in sub:
                if not self._active:
                    break
                try:
                    self.handle_fix(fix)
                except Exception:
                    log.exception("Failed to process fix at %d ms", fix.timestamp_ms)
        finally:
            sub.unsubscribe()

    def set_waypoints(self, origin: Optional[GeoPoint], destinations: Sequence[GeoPoint]) -> Optional[RecalcDecision]:
        """Replace origin/destinations; a new waypoint set resets progress and refetches."""
        with self._lock:
            changed = origin != self.origin or list(destinations) != self.destinations
            self.origin = origin
            self.destinations = list(destinations)
            if changed:
                self.progress.reset()
            if not self._active:
                return None
            return self.request_route()

    # ------------------------------------------------------------------
    # Position pipeline
    # ------------------------------------------------------------------

    def handle_fix(self, fix: PositionFix) -> Optional[FixReport]:
        with self._lock:
            if not self._active:
                log.debug("Fix ignored, session not active")
                return None
            now = self._clock()
            self.last_known_position = fix.point

            outcome = self.matcher.match(fix.point, self.route)
            self.smoother.set_target(outcome.target)

            estimate = self.bearing_estimator.estimate(
                self.camera.state, fix.speed_mps, fix.heading_deg, outcome.match, self.route
            )
            self.camera.apply_bearing(estimate)

            # The camera tracks the raw fix; only the marker is snapped
            move = self.camera.follow(fix.point, estimate.camera_bearing_deg)
            if move is not None:
                self.renderer.animate_camera(move)

            decision: Optional[RecalcDecision] = None
            progress = self.progress.update(outcome.match, self.route, now)
            if progress is not None:
                self.renderer.set_route_layers(progress.traveled, progress.remaining)
                if self.progress.is_deviation(progress):
                    log.info("Off route (%.0f m), requesting a new route", progress.deviation_m)
                    decision = self.throttle.request_recalculation(
                        fix.point, self.destinations, now, deviation=True
                    )
                    if decision.dispatched:
                        self._emit("on_deviation_recalculating", progress.deviation_m)
                        self._dispatch(decision)

            return FixReport(
                fix=fix,
                target=outcome.target,
                snapped=outcome.snapped,
                match_distance_m=outcome.match.distance_m if outcome.match else None,
                camera_bearing_deg=estimate.camera_bearing_deg,
                camera_mode=self.camera.mode,
                camera_move=move,
                progress=progress,
                decision=decision,
            )

    def tick(self) -> Optional[GeoPoint]:
        """One animation frame, for hosts that drive frames themselves."""
        pos = self.smoother.tick()
        if pos is not None:
            self.renderer.move_marker(pos)
        return pos

    # ------------------------------------------------------------------
    # Route recalculation
    # ------------------------------------------------------------------

    def request_route(self) -> RecalcDecision:
        """Waypoint-driven request; a no-op while the waypoints are unchanged."""
        with self._lock:
            decision = self.throttle.request_recalculation(self.origin, self.destinations, self._clock())
            if decision.dispatched:
                self._dispatch(decision)
            return decision

    def _current_key(self) -> Optional[str]:
        if self.origin is None or not self.destinations:
            return None
        return waypoint_key(self.origin, self.destinations)

    def _dispatch(self, decision: RecalcDecision) -> None:
        # Deviation requests start at the live fix but still serve the session waypoints
        key = self._current_key()
        try:
            fut = self._executor.submit(
                self.provider.get_route, list(decision.waypoints), self.cfg.directions_profile
            )
        except RuntimeError as e:
            log.error("Could not dispatch route request: %s", e)
            self.throttle.complete()
            return
        fut.add_done_callback(partial(self._on_route_result, epoch=self._epoch, key=key))

    def _on_route_result(self, fut: Future, epoch: int, key: Optional[str]) -> None:
        with self._lock:
            if not self._active or epoch != self._epoch:
                # stop() already reset the throttle; a restarted session owns in_flight now
                log.info("Discarding route result, session stopped")
                return
            self.throttle.complete()
            if key != self._current_key():
                log.info("Discarding route result for outdated waypoints")
                self.request_route()
                return

            try:
                route = fut.result()
            except DirectionsError as e:
                log.warning("Route fetch failed, keeping previous route: %s", e)
                self._route_failed()
                return
            except Exception:
                log.exception("Route fetch crashed, keeping previous route")
                self._route_failed()
                return

            self.route = route
            traveled = self.progress.traveled
            self.renderer.set_route_layers(traveled if len(traveled) > 1 else None, route.points)
            log.info("Route updated (%d points)", len(route))
            self._emit("on_route_updated", route)

            # Waypoints may have changed while this request was in flight
            self.request_route()

    def _route_failed(self) -> None:
        if self.route is None:
            self.renderer.set_route_layers(None, None)

    # ------------------------------------------------------------------
    # User commands and renderer gestures
    # ------------------------------------------------------------------

    def on_user_drag(self) -> None:
        with self._lock:
            self.camera.on_user_drag()

    def on_user_zoom(self) -> None:
        with self._lock:
            self.camera.on_user_zoom()

    def recenter(self) -> Optional[CameraMove]:
        with self._lock:
            move = self.camera.begin_recenter(self.last_known_position)
            if move is None:
                log.debug("Recenter ignored, no position yet")
                return None
            self.renderer.animate_camera(move)
        delay_s = (self.cfg.recenter_duration_ms + self.cfg.recenter_settle_ms) / 1000.0
        self._scheduler(delay_s, self._finish_recenter)
        return move

    def _finish_recenter(self) -> None:
        with self._lock:
            if self._active:
                self.camera.complete_recenter()

    def overview(self) -> Union[CameraMove, FitBounds]:
        with self._lock:
            intent = self.camera.overview(self.origin, self.destinations)
            if isinstance(intent, FitBounds):
                self.renderer.fit_bounds(intent)
            else:
                self.renderer.animate_camera(intent)
            return intent

    def select_destination(self, index: int) -> GeoPoint:
        with self._lock:
            point = self.destinations[index]
        self._emit("on_marker_selected", index, point)
        return point

    def _emit(self, name: str, *args) -> None:
        cb = getattr(self.events, name)
        if cb is None:
            return
        try:
            cb(*args)
        except Exception:
            log.exception("Session event handler %s failed", name)
