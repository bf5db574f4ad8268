"""Error taxonomy for the navigation overlay.

None of these are fatal to a session: the engine catches them at the seam
where they occur and falls back to the raw position and the previous route.
"""
from __future__ import annotations

from typing import Optional


class NavOverlayError(Exception):
    """Base class for every error raised by nav_overlay."""


class InvalidFix(NavOverlayError, ValueError):
    """A position sample with non-finite or missing coordinates."""


class GeometryError(NavOverlayError):
    """Route geometry could not be used for matching."""


class DegenerateLineError(GeometryError):
    """A polyline with fewer than two points."""

    def __init__(self, n_points: int):
        super().__init__(f"Polyline needs at least 2 points, got {n_points}")
        self.n_points = n_points


class DirectionsError(NavOverlayError):
    """Base class for directions provider failures."""


class NoRouteError(DirectionsError):
    """The provider answered but returned no usable route."""


class ProviderError(DirectionsError):
    """Non-success response (or transport failure) from the provider."""

    def __init__(self, status: Optional[int], body: str = ""):
        super().__init__(f"Directions provider error (status={status}): {body[:200]}")
        self.status = status
        self.body = body
