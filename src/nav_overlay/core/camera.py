"""Follow / free-look camera state machine."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from nav_overlay.config import Settings, settings as default_settings
from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.bearing import BearingEstimate
from nav_overlay.core.models import CameraMode, CameraMove, CameraState, FitBounds

log = logging.getLogger(__name__)

CameraIntent = Union[CameraMove, FitBounds]


class CameraController:
    """
    Owns CameraState and turns position/bearing updates and user commands into
    camera intents.

    Transitions:
      Following --drag/zoom--> FreeLook
      any       --recenter--> Following (after the recenter ease completes)
      any       --overview--> FreeLook
    """

    def __init__(self, cfg: Optional[Settings] = None):
        self.cfg = cfg or default_settings
        self.state = CameraState()
        self._seq = 0

    @property
    def mode(self) -> CameraMode:
        return self.state.mode

    def reset(self) -> None:
        """Back to Following with a north bearing. ``seq`` keeps counting up."""
        self.state = CameraState()

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _offset(self) -> tuple[float, float]:
        # Push the agent into the lower third of the viewport
        return (self.cfg.offset_x_px, self.cfg.viewport_height_px / 5)

    # ------------------------------------------------------------------
    # Renderer gestures
    # ------------------------------------------------------------------

    def on_user_drag(self) -> None:
        self._enter_free_look("drag")

    def on_user_zoom(self) -> None:
        self._enter_free_look("zoom")

    def _enter_free_look(self, why: str) -> None:
        if self.state.mode is not CameraMode.FREE_LOOK:
            log.info("Camera -> free look (%s)", why)
        self.state.mode = CameraMode.FREE_LOOK

    # ------------------------------------------------------------------
    # Per-fix updates
    # ------------------------------------------------------------------

    def apply_bearing(self, estimate: BearingEstimate) -> None:
        self.state.stable_bearing_deg = estimate.stable_bearing_deg
        self.state.recenter_pending = estimate.recenter_pending

    def follow(self, position: GeoPoint, bearing_deg: float) -> Optional[CameraMove]:
        """Camera move toward the raw position, or None while in free look."""
        if self.state.mode is not CameraMode.FOLLOWING:
            return None
        return CameraMove(
            seq=self._next_seq(),
            center=position,
            bearing=bearing_deg,
            zoom=self.cfg.follow_zoom,
            pitch=self.cfg.follow_pitch,
            duration_ms=self.cfg.follow_duration_ms,
            offset=self._offset(),
        )

    # ------------------------------------------------------------------
    # User commands
    # ------------------------------------------------------------------

    def begin_recenter(self, position: Optional[GeoPoint]) -> Optional[CameraMove]:
        """First half of a recenter: ease back to the agent. None if no fix yet."""
        if position is None:
            return None
        return CameraMove(
            seq=self._next_seq(),
            center=position,
            bearing=self.state.stable_bearing_deg,
            zoom=self.cfg.follow_zoom,
            pitch=self.cfg.follow_pitch,
            duration_ms=self.cfg.recenter_duration_ms,
            offset=self._offset(),
        )

    def complete_recenter(self) -> None:
        """Second half: resume following, north-up until the agent moves again."""
        self.state.mode = CameraMode.FOLLOWING
        self.state.recenter_pending = True
        log.info("Camera -> following")

    def overview(
        self,
        origin: Optional[GeoPoint],
        destinations: Sequence[GeoPoint],
    ) -> CameraIntent:
        self._enter_free_look("overview")

        pts: List[GeoPoint] = []
        if origin is not None and origin.is_finite():
            pts.append(origin)
        else:
            log.warning("Overview: invalid origin left out of bounds")
        for dest in destinations:
            if dest.is_finite():
                pts.append(dest)
            else:
                log.warning("Overview: ignoring invalid destination %s", dest)

        if pts:
            return FitBounds(
                seq=self._next_seq(),
                points=pts,
                padding=self.cfg.overview_padding_px,
                max_zoom=self.cfg.overview_max_zoom,
                duration_ms=self.cfg.overview_duration_ms,
            )

        log.warning("Overview: no valid points, framing default center")
        return CameraMove(
            seq=self._next_seq(),
            center=GeoPoint(0.0, 0.0),
            zoom=self.cfg.default_zoom,
            duration_ms=self.cfg.overview_duration_ms,
        )
