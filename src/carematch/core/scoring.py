"""Weighted compatibility scoring."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

import structlog

from ..coverage import CoverageArea
from ..schemas import ClientProfile, MatchCriteria, Provider

SERVICE_MATCH = "serviceMatch"
LOCATION_PROXIMITY = "locationProximity"
SPECIALIZATION_MATCH = "specializationMatch"
EXPERIENCE = "experience"
INSURANCE_COMPATIBILITY = "insuranceCompatibility"
PREFERENCE_MATCH = "preferenceMatch"

FACTOR_DESCRIPTIONS: dict[str, str] = {
    SERVICE_MATCH: "How well the provider offers the services the client needs",
    LOCATION_PROXIMITY: "How close the provider is to the client",
    SPECIALIZATION_MATCH: "How well the provider specializes in the client's conditions",
    EXPERIENCE: "The provider's experience and reputation",
    INSURANCE_COMPATIBILITY: "Whether the provider accepts the client's insurance",
    PREFERENCE_MATCH: "How well the provider matches the client's preferences",
}


def normalize(value: float, minimum: float, maximum: float) -> float:
    """Scale ``value`` into ``[0, 1]`` relative to ``[minimum, maximum]``."""
    if maximum <= minimum:
        return 1.0 if value >= maximum else 0.0
    ratio = (value - minimum) / (maximum - minimum)
    return min(max(ratio, 0.0), 1.0)


@dataclass(slots=True, frozen=True)
class MatchFactor:
    """One named, weighted dimension of compatibility.

    Calculators leave ``weight`` at its default; the scorer rebinds it from
    its weight table before the factor leaves the engine.
    """

    name: str
    score: float
    description: str = ""
    weight: float = 0.5


@dataclass(slots=True)
class Candidate:
    """Provider under consideration together with its request-scoped context."""

    provider: Provider
    client: ClientProfile
    coverage_areas: list[CoverageArea] = field(default_factory=list)

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id


class FactorWeights:
    """Name to weight table used by the scorer."""

    DEFAULT_WEIGHTS: dict[str, float] = {
        SERVICE_MATCH: 0.8,
        LOCATION_PROXIMITY: 0.7,
        SPECIALIZATION_MATCH: 0.6,
        EXPERIENCE: 0.5,
        INSURANCE_COMPATIBILITY: 0.4,
        PREFERENCE_MATCH: 0.3,
    }

    DEFAULT_WEIGHT = 0.5

    def __init__(
        self,
        weights: Mapping[str, float] | None = None,
        *,
        default_weight: float | None = None,
    ) -> None:
        merged = self.DEFAULT_WEIGHTS.copy()
        if weights:
            merged.update({name: float(value) for name, value in weights.items()})
        fallback = self.DEFAULT_WEIGHT if default_weight is None else float(default_weight)
        for name, value in [*merged.items(), ("<default>", fallback)]:
            if not 0.0 < value <= 1.0:
                raise ValueError(f"Weight for {name!r} must be in (0, 1], got {value}")
        self._weights = merged
        self._default = fallback

    def weight_for(self, name: str) -> float:
        return self._weights.get(name, self._default)

    def as_dict(self) -> dict[str, float]:
        return dict(self._weights)

    def catalog(self) -> list[dict[str, Any]]:
        return [
            {
                "name": name,
                "description": FACTOR_DESCRIPTIONS.get(name, ""),
                "weight": self.weight_for(name),
            }
            for name in FACTOR_DESCRIPTIONS
        ]


class CompatibilityScorer:
    """Runs factor calculators and folds their output into a weighted mean."""

    def __init__(
        self,
        calculators: Iterable[Any],
        *,
        weights: FactorWeights | None = None,
    ) -> None:
        self._calculators = list(calculators)
        self._weights = weights or FactorWeights()
        self._logger = structlog.get_logger(__name__)

    @property
    def weights(self) -> FactorWeights:
        return self._weights

    def score(
        self,
        candidate: Candidate,
        criteria: MatchCriteria,
    ) -> tuple[float, list[MatchFactor]]:
        factors: list[MatchFactor] = []
        for calculator in self._calculators:
            factor = calculator.calculate(candidate, criteria)
            if factor is None:
                continue
            factors.extend(self.apply_weights([factor]))

        overall = self.combine(factors)
        self._logger.debug(
            "scoring.candidate",
            provider_id=candidate.provider_id,
            overall_score=overall,
            factors={factor.name: factor.score for factor in factors},
        )
        return overall, factors

    def apply_weights(self, factors: Iterable[MatchFactor]) -> list[MatchFactor]:
        return [
            replace(factor, weight=self._weights.weight_for(factor.name))
            for factor in factors
        ]

    @staticmethod
    def combine(factors: Sequence[MatchFactor]) -> float:
        total_weight = sum(factor.weight for factor in factors)
        if total_weight <= 0:
            return 0.0
        weighted = sum(factor.score * factor.weight for factor in factors)
        return min(max(weighted / total_weight, 0.0), 1.0)

    def catalog(self) -> list[dict[str, Any]]:
        return self._weights.catalog()
