"""Error taxonomy for the matching engine."""

from __future__ import annotations


class MatchingError(Exception):
    """Base class for matching engine errors."""


class InvalidCoordinate(MatchingError):
    """Raised when a latitude/longitude pair is outside the valid range."""

    def __init__(self, latitude: float, longitude: float, message: str | None = None):
        super().__init__(
            message or f"Invalid coordinate ({latitude!r}, {longitude!r})"
        )
        self.latitude = latitude
        self.longitude = longitude


class InvalidCriteria(MatchingError):
    """Raised when matching criteria cannot be used to run a request."""


class InvalidCoverageArea(MatchingError):
    """Raised when a coverage area would violate its invariants."""


class EnhancementUnavailable(MatchingError):
    """Raised by the text-completion transport; never surfaced to callers."""


class RepositoryUnavailable(MatchingError):
    """Raised when a repository collaborator fails during a request."""


__all__ = [
    "MatchingError",
    "InvalidCoordinate",
    "InvalidCriteria",
    "InvalidCoverageArea",
    "EnhancementUnavailable",
    "RepositoryUnavailable",
]
