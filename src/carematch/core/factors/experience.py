"""Provider experience and reputation factor."""

from __future__ import annotations

from dataclasses import dataclass

from ..scoring import EXPERIENCE, Candidate, MatchFactor, normalize
from ...schemas import MatchCriteria


@dataclass
class ExperienceConfig:
    """Blend and ranges for the experience factor."""

    rating_weight: float = 0.6
    review_weight: float = 0.4
    min_rating: float = 1.0
    max_rating: float = 5.0
    review_saturation: int = 100

    def __post_init__(self) -> None:
        if abs(self.rating_weight + self.review_weight - 1.0) > 1e-9:
            raise ValueError("rating_weight and review_weight must sum to 1")


def experience_factor(
    average_rating: float,
    review_count: int,
    *,
    config: ExperienceConfig | None = None,
) -> MatchFactor:
    cfg = config or ExperienceConfig()
    rating_score = normalize(average_rating, cfg.min_rating, cfg.max_rating)
    review_score = normalize(review_count, 0, cfg.review_saturation)
    score = cfg.rating_weight * rating_score + cfg.review_weight * review_score
    return MatchFactor(
        name=EXPERIENCE,
        score=score,
        description=(
            f"Provider has {review_count} reviews with an average rating of {average_rating:g}"
        ),
    )


class ExperienceCalculator:
    """Rating dominates raw review volume."""

    name = EXPERIENCE

    def __init__(self, *, config: ExperienceConfig | None = None) -> None:
        self._config = config or ExperienceConfig()

    def calculate(self, candidate: Candidate, criteria: MatchCriteria) -> MatchFactor:
        provider = candidate.provider
        return experience_factor(
            provider.average_rating,
            provider.review_count,
            config=self._config,
        )
