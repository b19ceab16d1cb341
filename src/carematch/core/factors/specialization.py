"""Specialization overlap factor."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from ..scoring import SPECIALIZATION_MATCH, Candidate, MatchFactor
from ...schemas import MatchCriteria

ConditionMapper = Callable[[str], Iterable[str]]


def _identity(condition: str) -> Iterable[str]:
    return (condition,)


def _key(value: str) -> str:
    return value.strip().casefold()


def specialization_factor(
    conditions: Sequence[str],
    specializations: Sequence[str],
    *,
    mapper: ConditionMapper = _identity,
) -> MatchFactor:
    offered = {_key(item) for item in specializations}
    # Deduplicate on the folded key but hand the caller's spelling to the mapper.
    relevant: dict[str, str] = {}
    for condition in conditions:
        if condition.strip():
            relevant.setdefault(_key(condition), condition.strip())
    matched = [
        key
        for key, condition in relevant.items()
        if any(_key(mapped) in offered for mapped in mapper(condition))
    ]
    score = len(matched) / len(relevant) if relevant else 0.0
    return MatchFactor(
        name=SPECIALIZATION_MATCH,
        score=score,
        description=f"Provider specializes in {len(matched)} of {len(relevant)} relevant areas",
    )


class SpecializationCalculator:
    """Compare client conditions against provider specializations.

    Conditions are compared to specializations as plain strings. ``mapper``
    is the hook for a condition-to-specialization taxonomy; none ships with
    the engine.
    """

    name = SPECIALIZATION_MATCH

    def __init__(self, *, mapper: ConditionMapper | None = None) -> None:
        self._mapper = mapper or _identity

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        conditions = [item for item in candidate.client.conditions if item and item.strip()]
        if not conditions:
            return None
        return specialization_factor(
            conditions,
            candidate.provider.specializations,
            mapper=self._mapper,
        )
