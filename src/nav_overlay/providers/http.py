from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ConnectionError, ReadTimeout

from nav_overlay.errors import ProviderError


@dataclass
class HTTPClient:
    user_agent: str
    timeout_s: int = 20
    tries: int = 1
    backoff_s: float = 0.8

    def __post_init__(self) -> None:
        self.s = requests.Session()
        self.s.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "application/json, text/plain;q=0.9, */*;q=0.8",
            }
        )

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout_s: Optional[int] = None,
    ) -> Dict[str, Any]:
        """GET and decode JSON; any failure surfaces as ProviderError."""
        timeout = timeout_s if timeout_s is not None else self.timeout_s
        last_err: Optional[Exception] = None
        for attempt in range(max(1, self.tries)):
            try:
                r = self.s.get(url, params=params, timeout=timeout)
            except (ReadTimeout, ConnectionError) as e:
                last_err = e
                if attempt + 1 < self.tries:
                    time.sleep(self.backoff_s * (2**attempt))
                continue
            if not r.ok:
                raise ProviderError(r.status_code, r.text)
            try:
                return r.json()
            except ValueError as e:
                raise ProviderError(r.status_code, f"invalid JSON: {e}") from e
        raise ProviderError(None, f"{type(last_err).__name__}: {last_err}")
