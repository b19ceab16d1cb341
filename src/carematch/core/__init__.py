"""Core matching engine components."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# NOTE: scoring must load before factors and matching, which import from it.
from .scoring import (
    Candidate,
    CompatibilityScorer,
    FactorWeights,
    MatchFactor,
    normalize,
)
from .factors import (
    ExperienceCalculator,
    ExperienceLevelCalculator,
    GenderPreferenceCalculator,
    InsuranceCalculator,
    LanguagePreferenceCalculator,
    ProximityCalculator,
    ServiceMatchCalculator,
    SpecializationCalculator,
)
from .enhancement import (
    ConfidenceLevel,
    ConfidenceScore,
    EnhancementFailure,
    EnhancementResult,
    MatchEnhancer,
)
from .matching import ProviderMatch, ProviderMatchingService
from ..schemas import MatchCriteria


@runtime_checkable
class FactorCalculator(Protocol):
    """Contract for one match dimension."""

    name: str

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        """Return the factor for this candidate, or None when it does not apply."""


__all__ = [
    "Candidate",
    "CompatibilityScorer",
    "ConfidenceLevel",
    "ConfidenceScore",
    "EnhancementFailure",
    "EnhancementResult",
    "ExperienceCalculator",
    "ExperienceLevelCalculator",
    "FactorCalculator",
    "FactorWeights",
    "GenderPreferenceCalculator",
    "InsuranceCalculator",
    "LanguagePreferenceCalculator",
    "MatchEnhancer",
    "MatchFactor",
    "ProviderMatch",
    "ProviderMatchingService",
    "ProximityCalculator",
    "ServiceMatchCalculator",
    "SpecializationCalculator",
    "normalize",
]
