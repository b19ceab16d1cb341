"""Insurance compatibility factor."""

from __future__ import annotations

from typing import Iterable

from ..scoring import INSURANCE_COMPATIBILITY, Candidate, MatchFactor
from ...schemas import MatchCriteria


def insurance_factor(client_insurance: str, accepted: Iterable[str]) -> MatchFactor:
    accepts = client_insurance in set(accepted)
    return MatchFactor(
        name=INSURANCE_COMPATIBILITY,
        score=1.0 if accepts else 0.0,
        description=(
            "Provider accepts client's insurance"
            if accepts
            else "Provider does not accept client's insurance"
        ),
    )


class InsuranceCalculator:
    name = INSURANCE_COMPATIBILITY

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        if not criteria.insurance:
            return None
        return insurance_factor(criteria.insurance, candidate.provider.insurance_accepted)
