"""Route recalculation gate: dedup by waypoint key, time gate for deviations."""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from nav_overlay.contracts.route_contract import GeoPoint

log = logging.getLogger(__name__)


class SkipReason(str, Enum):
    MISSING_INPUTS = "missing_inputs"
    NO_CHANGE = "no_change"
    THROTTLED = "throttled"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True)
class RecalcDecision:
    dispatched: bool
    reason: Optional[SkipReason] = None
    waypoints: Tuple[GeoPoint, ...] = ()
    deviation: bool = False

    @classmethod
    def skipped(cls, reason: SkipReason, deviation: bool = False) -> RecalcDecision:
        return cls(dispatched=False, reason=reason, deviation=deviation)

    def __str__(self) -> str:
        if self.dispatched:
            return "dispatched (deviation)" if self.deviation else "dispatched"
        return f"skipped: {self.reason.value}" if self.reason else "skipped"


def waypoint_key(origin: GeoPoint, destinations: Sequence[GeoPoint]) -> str:
    """Order-preserving digest of ``(origin, destinations)``."""
    payload = [[round(p.lng, 6), round(p.lat, 6)] for p in (origin, *destinations)]
    h = hashlib.sha256(json.dumps(payload).encode()).hexdigest()[:16]
    return f"route:{h}"


class RecalculationThrottle:
    """
    Decide whether a route fetch is warranted.

    Waypoint-driven requests are deduplicated on the waypoint key only, so a
    stable destination set never refetches no matter how long it has been.
    Deviation requests reuse the same key with a different agent position and
    are gated on time instead; only they advance ``last_recalc_at_ms``.
    """

    def __init__(self, interval_ms: int = 5000):
        self.interval_ms = interval_ms
        self.last_key: Optional[str] = None
        self.last_recalc_at_ms: Optional[int] = None
        self.in_flight = False

    def request_recalculation(
        self,
        origin: Optional[GeoPoint],
        destinations: Sequence[GeoPoint],
        now_ms: int,
        deviation: bool = False,
    ) -> RecalcDecision:
        if origin is None or not destinations:
            log.debug("Recalculation skipped: missing origin or destinations")
            return RecalcDecision.skipped(SkipReason.MISSING_INPUTS, deviation)

        key = waypoint_key(origin, destinations)
        if not deviation and key == self.last_key:
            log.debug("Recalculation skipped: waypoints unchanged (%s)", key)
            return RecalcDecision.skipped(SkipReason.NO_CHANGE, deviation)

        if (
            deviation
            and self.last_recalc_at_ms is not None
            and now_ms - self.last_recalc_at_ms < self.interval_ms
        ):
            log.debug(
                "Deviation recalculation throttled (%d ms since last)",
                now_ms - self.last_recalc_at_ms,
            )
            return RecalcDecision.skipped(SkipReason.THROTTLED, deviation)

        if self.in_flight:
            log.debug("Recalculation skipped: a request is already in flight")
            return RecalcDecision.skipped(SkipReason.IN_FLIGHT, deviation)

        # Record before the provider resolves so a slow provider cannot overlap
        self.in_flight = True
        if deviation:
            self.last_recalc_at_ms = now_ms
        else:
            self.last_key = key
        log.info(
            "Recalculation dispatched (%s, %d waypoints)",
            "deviation" if deviation else "waypoints changed",
            len(destinations) + 1,
        )
        return RecalcDecision(
            dispatched=True,
            waypoints=(origin, *destinations),
            deviation=deviation,
        )

    def complete(self) -> None:
        self.in_flight = False

    def reset(self) -> None:
        self.last_key = None
        self.last_recalc_at_ms = None
        self.in_flight = False
