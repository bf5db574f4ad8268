from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Iterator, List, Sequence

from nav_overlay.core.models import PositionFix
from nav_overlay.sources.base import PositionSource, Subscription


class ReplayPositionSource(PositionSource):
    """
    Replays recorded fixes. With ``realtime=True`` the gaps between
    ``timestamp_ms`` values are slept through, otherwise fixes come back to back.
    """

    def __init__(self, records: Sequence[Any], realtime: bool = False):
        self.records = list(records)
        self.realtime = realtime

    @classmethod
    def from_file(cls, path: Path, realtime: bool = False) -> ReplayPositionSource:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("fixes", [])
        return cls(data, realtime=realtime)

    def fixes(self) -> List[PositionFix]:
        """All valid fixes, invalid records dropped."""
        return [f for f in (self._accept(r) for r in self.records) if f is not None]

    def subscribe(self) -> Subscription:
        return Subscription(self._iter())

    def _iter(self) -> Iterator[PositionFix]:
        prev_ts = None
        for raw in self.records:
            fix = self._accept(raw)
            if fix is None:
                continue
            if self.realtime and prev_ts is not None and fix.timestamp_ms > prev_ts:
                time.sleep((fix.timestamp_ms - prev_ts) / 1000.0)
            prev_ts = fix.timestamp_ms
            yield fix
