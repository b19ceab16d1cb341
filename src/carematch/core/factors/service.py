"""Service type overlap factor."""

from __future__ import annotations

from typing import Sequence

from ..scoring import SERVICE_MATCH, Candidate, MatchFactor
from ...schemas import MatchCriteria


def service_match_factor(required: Sequence[str], offered: Sequence[str]) -> MatchFactor:
    required_set = list(dict.fromkeys(required))
    offered_set = set(offered)
    matched = [service for service in required_set if service in offered_set]
    score = len(matched) / len(required_set) if required_set else 0.0
    return MatchFactor(
        name=SERVICE_MATCH,
        score=score,
        description=f"Provider offers {len(matched)} of {len(required_set)} required services",
    )


class ServiceMatchCalculator:
    """Score the share of required service types the provider offers."""

    name = SERVICE_MATCH

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        if not criteria.service_types:
            return None
        return service_match_factor(criteria.service_types, candidate.provider.service_types)
