from __future__ import annotations

import logging
import queue
from typing import Any, Iterator, Optional

from nav_overlay.core.models import PositionFix
from nav_overlay.sources.base import PositionSource, Subscription

log = logging.getLogger(__name__)

_CLOSE = object()


class QueuePositionSource(PositionSource):
    """
    Push-style source: the host calls ``push()`` from its location callback
    (and ``push_error()`` from its error callback); the session iterates.
    """

    def __init__(self, maxsize: int = 0):
        self._q: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)

    def push(self, fix: Any) -> None:
        self._q.put(fix)

    def push_error(self, err: BaseException) -> None:
        self._q.put(err)

    def close(self) -> None:
        self._q.put(_CLOSE)

    def subscribe(self) -> Subscription:
        return Subscription(self._iter(), on_close=self.close)

    def _iter(self) -> Iterator[PositionFix]:
        while True:
            item = self._q.get()
            if item is _CLOSE:
                return
            if isinstance(item, BaseException):
                log.error("Position source error: %s", item)
                continue
            fix: Optional[PositionFix] = self._accept(item)
            if fix is not None:
                yield fix
