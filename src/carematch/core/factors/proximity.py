"""Location proximity factor."""

from __future__ import annotations

from dataclasses import dataclass

from ..scoring import LOCATION_PROXIMITY, Candidate, MatchFactor, normalize
from ...geo import distance
from ...schemas import GeoPoint, MatchCriteria


@dataclass
class ProximityConfig:
    """Configuration for proximity scoring."""

    default_preferred_distance_miles: float = 25.0


def provider_distance(candidate: Candidate, point: GeoPoint) -> float | None:
    """Miles from ``point`` to the nearest coverage-area center, else the provider location."""
    if candidate.coverage_areas:
        return min(area.distance_to(point) for area in candidate.coverage_areas)
    if candidate.provider.location is not None:
        return distance(candidate.provider.location, point)
    return None


def proximity_factor(distance_miles: float, preferred_distance_miles: float) -> MatchFactor:
    score = 1.0 - normalize(distance_miles, 0.0, preferred_distance_miles)
    return MatchFactor(
        name=LOCATION_PROXIMITY,
        score=score,
        description=(
            f"Provider is {distance_miles:.2f} miles away from client "
            f"(preferred distance: {preferred_distance_miles:g} miles)"
        ),
    )


class ProximityCalculator:
    """Closer providers score higher; beyond the preferred distance scores 0."""

    name = LOCATION_PROXIMITY

    def __init__(self, *, config: ProximityConfig | None = None) -> None:
        self._config = config or ProximityConfig()

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        if criteria.location is None:
            return None
        miles = provider_distance(candidate, criteria.location)
        if miles is None:
            return None
        preferred = criteria.radius_miles or self._config.default_preferred_distance_miles
        return proximity_factor(miles, preferred)
