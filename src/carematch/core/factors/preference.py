"""Client preference factors (gender, language, experience level).

Each specified preference yields its own ``preferenceMatch`` factor scored 1
when met and 0 when unmet. Unspecified preferences produce no factor at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..scoring import PREFERENCE_MATCH, Candidate, MatchFactor
from ...schemas import MatchCriteria


DEFAULT_LEVEL_MIN_YEARS: dict[str, float] = {"entry": 0.0, "intermediate": 3.0, "expert": 8.0}


@dataclass
class PreferenceConfig:
    """Minimum years of experience for each requested experience level.

    Overrides are merged onto the defaults, so a partial table only changes
    the levels it names.
    """

    level_min_years: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        merged = dict(DEFAULT_LEVEL_MIN_YEARS)
        merged.update({level: float(years) for level, years in self.level_min_years.items()})
        self.level_min_years = merged


def _key(value: str) -> str:
    return value.strip().casefold()


def gender_preference_factor(preferred: str, provider_gender: str | None) -> MatchFactor:
    met = provider_gender is not None and _key(provider_gender) == _key(preferred)
    return MatchFactor(
        name=PREFERENCE_MATCH,
        score=1.0 if met else 0.0,
        description=(
            f"Gender preference '{preferred}' "
            + ("met" if met else "not met")
        ),
    )


def language_preference_factor(preferred: Sequence[str], spoken: Sequence[str]) -> MatchFactor:
    spoken_keys = {_key(language) for language in spoken}
    shared = [language for language in preferred if _key(language) in spoken_keys]
    met = bool(shared)
    return MatchFactor(
        name=PREFERENCE_MATCH,
        score=1.0 if met else 0.0,
        description=(
            f"Provider speaks {', '.join(shared)}"
            if met
            else f"Provider speaks none of: {', '.join(preferred)}"
        ),
    )


def experience_level_factor(
    level: str,
    years_of_experience: float | None,
    *,
    config: PreferenceConfig | None = None,
) -> MatchFactor:
    cfg = config or PreferenceConfig()
    required_years = cfg.level_min_years.get(level)
    if required_years is None:
        raise KeyError(f"Unknown experience level: {level!r}")
    met = years_of_experience is not None and years_of_experience >= required_years
    return MatchFactor(
        name=PREFERENCE_MATCH,
        score=1.0 if met else 0.0,
        description=(
            f"Experience level '{level}' requires {required_years:g}+ years; "
            f"provider has {'unknown' if years_of_experience is None else f'{years_of_experience:g}'}"
        ),
    )


class GenderPreferenceCalculator:
    name = PREFERENCE_MATCH

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        if not criteria.gender_preference:
            return None
        return gender_preference_factor(criteria.gender_preference, candidate.provider.gender)


class LanguagePreferenceCalculator:
    name = PREFERENCE_MATCH

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        preferred = [item for item in criteria.language_preference or [] if item.strip()]
        if not preferred:
            return None
        return language_preference_factor(preferred, candidate.provider.languages)


class ExperienceLevelCalculator:
    name = PREFERENCE_MATCH

    def __init__(self, *, config: PreferenceConfig | None = None) -> None:
        self._config = config or PreferenceConfig()

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor | None:
        if not criteria.experience_level:
            return None
        return experience_level_factor(
            criteria.experience_level,
            candidate.provider.years_of_experience,
            config=self._config,
        )
