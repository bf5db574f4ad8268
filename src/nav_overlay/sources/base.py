"""Position source interface: a push feed exposed as a lazy iterator."""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional

from pydantic import ValidationError

from nav_overlay.contracts.route_contract import GeoPoint
from nav_overlay.core.models import PositionFix
from nav_overlay.errors import InvalidFix

log = logging.getLogger(__name__)


def parse_fix(raw: Dict[str, Any]) -> PositionFix:
    """
    Build a PositionFix from a loose record:
      {"lng": .., "lat": .., "speed": .., "heading": .., "timestamp_ms": ..}
    ``longitude``/``latitude`` and ``speed_mps``/``heading_deg`` are accepted too.
    """
    lng = raw.get("lng", raw.get("longitude"))
    lat = raw.get("lat", raw.get("latitude"))
    if lng is None or lat is None:
        raise InvalidFix(f"Fix without coordinates: {raw!r}")
    try:
        return PositionFix(
            point=GeoPoint(lng=float(lng), lat=float(lat)),
            speed_mps=raw.get("speed_mps", raw.get("speed")),
            heading_deg=raw.get("heading_deg", raw.get("heading")),
            timestamp_ms=int(raw.get("timestamp_ms", raw.get("t_ms", 0))),
        )
    except (TypeError, ValueError, ValidationError) as e:
        raise InvalidFix(str(e)) from e


class Subscription:
    """
    Lazy, non-restartable sequence of fixes.
    Iteration ends once ``unsubscribe()`` is called or the feed runs dry.
    """

    def __init__(self, fixes: Iterator[PositionFix], on_close=None):
        self._fixes = fixes
        self._closed = threading.Event()
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __iter__(self) -> Subscription:
        return self

    def __next__(self) -> PositionFix:
        if self._closed.is_set():
            raise StopIteration
        try:
            fix = next(self._fixes)
        except StopIteration:
            self.unsubscribe()
            raise
        if self._closed.is_set():
            raise StopIteration
        return fix

    def unsubscribe(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        if self._on_close is not None:
            self._on_close()


class PositionSource(ABC):
    @abstractmethod
    def subscribe(self) -> Subscription:
        raise NotImplementedError

    @staticmethod
    def _accept(raw: Any) -> Optional[PositionFix]:
        """Parse a record, dropping (and logging) anything invalid."""
        if isinstance(raw, PositionFix):
            return raw
        try:
            return parse_fix(raw)
        except InvalidFix as e:
            log.warning("Invalid GPS fix ignored: %s", e)
            return None
