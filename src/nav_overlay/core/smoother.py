"""Marker smoothing: exponential approach of the rendered position to its target.

The animation loop runs on its own thread at the render cadence and is the
only writer of ``current``; the session is the only writer of ``target``.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.models import SmoothedPosition

log = logging.getLogger(__name__)


class PositionSmoother:
    def __init__(self, alpha: float = 0.2):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self._state = SmoothedPosition()
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[GeoPoint]:
        return self._state.current

    @property
    def target(self) -> Optional[GeoPoint]:
        return self._state.target

    def set_target(self, point: GeoPoint) -> None:
        with self._lock:
            # First fix: start on the target so the marker does not slide in from nowhere
            if self._state.current is None:
                self._state.current = point
            self._state.target = point

    def tick(self) -> Optional[GeoPoint]:
        """Advance one frame. Returns the new rendered position, or None if nothing to draw."""
        with self._lock:
            cur = self._state.current
            tgt = self._state.target
            if cur is None or tgt is None:
                return None
            a = self.alpha
            cur = GeoPoint(
                lng=cur.lng + (tgt.lng - cur.lng) * a,
                lat=cur.lat + (tgt.lat - cur.lat) * a,
            )
            self._state.current = cur
            return cur

    def reset(self) -> None:
        with self._lock:
            self._state = SmoothedPosition()


class AnimationLoop:
    """
    Periodic ticker driving a PositionSmoother on a daemon thread.

    ``stop()`` sets a cancel token checked at each tick boundary.
    ``start()`` is idempotent and may be called again after ``stop()``.
    """

    def __init__(
        self,
        smoother: PositionSmoother,
        on_frame: Callable[[GeoPoint], None],
        interval_s: float = 1.0 / 60.0,
    ):
        self.smoother = smoother
        self.on_frame = on_frame
        self.interval_s = interval_s
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._guard:
            if self.running:
                return
            cancel = threading.Event()
            self._cancel = cancel
            self._thread = threading.Thread(
                target=self._run, args=(cancel,), name="nav-overlay-animation", daemon=True
            )
            self._thread.start()

    def stop(self, timeout_s: float = 1.0) -> None:
        with self._guard:
            self._cancel.set()
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout_s)

    def _run(self, cancel: threading.Event) -> None:
        while not cancel.is_set():
            pos = self.smoother.tick()
            if pos is not None:
                try:
                    self.on_frame(pos)
                except Exception:
                    log.exception("Marker update failed")
            cancel.wait(self.interval_s)
