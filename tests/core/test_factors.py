from __future__ import annotations

import pytest

from carematch.core import Candidate, normalize
from carematch.core.factors import (
    ExperienceCalculator,
    ExperienceLevelCalculator,
    GenderPreferenceCalculator,
    InsuranceCalculator,
    LanguagePreferenceCalculator,
    ProximityCalculator,
    ServiceMatchCalculator,
    SpecializationCalculator,
)
from carematch.core.factors.experience import ExperienceConfig, experience_factor
from carematch.core.factors.insurance import insurance_factor
from carematch.core.factors.preference import PreferenceConfig, experience_level_factor
from carematch.core.factors.proximity import ProximityConfig, proximity_factor
from carematch.core.factors.service import service_match_factor
from carematch.core.factors.specialization import specialization_factor
from carematch.coverage import CoverageArea
from carematch.schemas import ClientProfile, MatchCriteria, Provider


def build_candidate(
    *,
    provider: dict | None = None,
    client: dict | None = None,
    areas: list[dict] | None = None,
) -> Candidate:
    provider_data = {"provider_id": "P-1", "service_types": ["physical_therapy"]}
    provider_data.update(provider or {})
    client_data = {"client_id": "C-1"}
    client_data.update(client or {})
    return Candidate(
        provider=Provider.model_validate(provider_data),
        client=ClientProfile.model_validate(client_data),
        coverage_areas=[CoverageArea.model_validate(area) for area in areas or []],
    )


def criteria(**overrides) -> MatchCriteria:
    data = {"client_id": "C-1", "service_types": ["physical_therapy"]}
    data.update(overrides)
    return MatchCriteria.model_validate(data)


@pytest.mark.parametrize(
    ("value", "minimum", "maximum", "expected"),
    [
        (5, 0, 10, 0.5),
        (-1, 0, 10, 0.0),
        (11, 0, 10, 1.0),
        (3, 3, 3, 1.0),
        (2, 3, 3, 0.0),
    ],
)
def test_normalize_is_clamped(value, minimum, maximum, expected) -> None:
    assert normalize(value, minimum, maximum) == pytest.approx(expected)


def test_normalize_is_monotonic() -> None:
    values = [normalize(x, 0, 50) for x in range(-10, 70, 5)]
    assert values == sorted(values)


def test_service_match_counts_required_overlap() -> None:
    factor = service_match_factor(
        ["physical_therapy", "home_care"], ["physical_therapy", "nursing"]
    )
    assert factor.name == "serviceMatch"
    assert factor.score == pytest.approx(0.5)
    assert factor.description == "Provider offers 1 of 2 required services"


def test_service_match_zero_when_nothing_required_is_offered() -> None:
    assert service_match_factor(["home_care"], ["nursing", "respite"]).score == 0.0


def test_service_match_ignores_duplicate_requirements() -> None:
    factor = service_match_factor(["home_care", "home_care"], ["home_care"])
    assert factor.score == 1.0


def test_proximity_factor_decreases_and_clamps() -> None:
    assert proximity_factor(0, 10).score == 1.0
    assert proximity_factor(5, 10).score == pytest.approx(0.5)
    assert proximity_factor(25, 10).score == 0.0


def test_proximity_calculator_skipped_without_location() -> None:
    candidate = build_candidate(provider={"location": {"latitude": 40.0, "longitude": -74.0}})
    assert ProximityCalculator().calculate(candidate, criteria()) is None


def test_proximity_uses_nearest_coverage_center_and_radius() -> None:
    candidate = build_candidate(
        provider={"location": {"latitude": 45.0, "longitude": -74.0}},
        areas=[
            {
                "id": "far",
                "provider_id": "P-1",
                "center": {"latitude": 41.0, "longitude": -74.0},
                "radius_miles": 100,
            },
            {
                "id": "near",
                "provider_id": "P-1",
                "center": {"latitude": 40.0, "longitude": -74.0},
                "radius_miles": 5,
            },
        ],
    )
    factor = ProximityCalculator().calculate(
        candidate,
        criteria(location={"latitude": 40.0, "longitude": -74.0}, radius_miles=10),
    )
    assert factor is not None
    assert factor.score == 1.0


def test_proximity_falls_back_to_default_preferred_distance() -> None:
    candidate = build_candidate(provider={"location": {"latitude": 40.1, "longitude": -74.0}})
    calculator = ProximityCalculator(config=ProximityConfig(default_preferred_distance_miles=50))
    factor = calculator.calculate(
        candidate, criteria(location={"latitude": 40.0, "longitude": -74.0})
    )
    assert factor is not None
    assert factor.score == pytest.approx(1 - 6.909 / 50, abs=0.01)
    assert "preferred distance: 50 miles" in factor.description


def test_specialization_compares_case_insensitively() -> None:
    factor = specialization_factor(["Stroke", "Diabetes"], ["stroke", "orthopedics"])
    assert factor.score == pytest.approx(0.5)
    assert factor.description == "Provider specializes in 1 of 2 relevant areas"


def test_specialization_mapper_hook() -> None:
    taxonomy = {"stroke": ["neurology"]}
    factor = specialization_factor(
        ["stroke"],
        ["Neurology"],
        mapper=lambda condition: taxonomy.get(condition, [condition]),
    )
    assert factor.score == 1.0


def test_specialization_calculator_skipped_without_conditions() -> None:
    candidate = build_candidate(provider={"specializations": ["stroke"]})
    assert SpecializationCalculator().calculate(candidate, criteria()) is None


def test_specialization_calculator_uses_client_conditions() -> None:
    candidate = build_candidate(
        provider={"specializations": ["stroke"]},
        client={"conditions": ["stroke"]},
    )
    factor = SpecializationCalculator().calculate(candidate, criteria())
    assert factor is not None
    assert factor.score == 1.0


def test_experience_blends_rating_and_reviews() -> None:
    factor = experience_factor(5.0, 100)
    assert factor.score == pytest.approx(1.0)

    factor = experience_factor(3.0, 50)
    assert factor.score == pytest.approx(0.6 * 0.5 + 0.4 * 0.5)

    # Review count saturates.
    assert experience_factor(5.0, 1000).score == pytest.approx(1.0)


def test_experience_config_requires_weights_to_sum_to_one() -> None:
    with pytest.raises(ValueError):
        ExperienceConfig(rating_weight=0.7, review_weight=0.7)


def test_experience_calculator_always_applies() -> None:
    candidate = build_candidate(provider={"average_rating": 4.0, "review_count": 20})
    factor = ExperienceCalculator().calculate(candidate, criteria())
    assert factor.name == "experience"
    assert factor.score == pytest.approx(0.6 * 0.75 + 0.4 * 0.2)


@pytest.mark.parametrize(
    ("client_insurance", "expected"),
    [("Cigna", 1.0), ("UnitedHealth", 0.0)],
)
def test_insurance_factor_is_binary(client_insurance: str, expected: float) -> None:
    factor = insurance_factor(client_insurance, ["Aetna", "Cigna"])
    assert factor.name == "insuranceCompatibility"
    assert factor.score == expected


def test_insurance_calculator_skipped_without_insurance() -> None:
    candidate = build_candidate(provider={"insurance_accepted": ["Aetna"]})
    assert InsuranceCalculator().calculate(candidate, criteria()) is None
    factor = InsuranceCalculator().calculate(candidate, criteria(insurance="Aetna"))
    assert factor is not None and factor.score == 1.0


def test_gender_preference() -> None:
    candidate = build_candidate(provider={"gender": "Female"})
    calculator = GenderPreferenceCalculator()
    assert calculator.calculate(candidate, criteria()) is None
    assert calculator.calculate(candidate, criteria(gender_preference="female")).score == 1.0
    assert calculator.calculate(candidate, criteria(gender_preference="male")).score == 0.0


def test_gender_preference_unknown_provider_gender_is_unmet() -> None:
    candidate = build_candidate()
    factor = GenderPreferenceCalculator().calculate(candidate, criteria(gender_preference="female"))
    assert factor is not None and factor.score == 0.0


def test_language_preference_met_by_any_shared_language() -> None:
    candidate = build_candidate(provider={"languages": ["English", "Spanish"]})
    calculator = LanguagePreferenceCalculator()

    met = calculator.calculate(candidate, criteria(language_preference=["spanish", "French"]))
    assert met is not None and met.score == 1.0
    assert met.name == "preferenceMatch"

    unmet = calculator.calculate(candidate, criteria(language_preference=["Mandarin"]))
    assert unmet is not None and unmet.score == 0.0
    assert calculator.calculate(candidate, criteria(language_preference=[])) is None


def test_experience_level_thresholds() -> None:
    assert experience_level_factor("entry", 0).score == 1.0
    assert experience_level_factor("intermediate", 2.5).score == 0.0
    assert experience_level_factor("expert", 8).score == 1.0
    assert experience_level_factor("expert", None).score == 0.0

    with pytest.raises(KeyError):
        experience_level_factor("legendary", 30)


def test_experience_level_calculator_uses_config() -> None:
    candidate = build_candidate(provider={"years_of_experience": 5})
    strict = ExperienceLevelCalculator(
        config=PreferenceConfig(level_min_years={"entry": 0, "intermediate": 6, "expert": 10})
    )
    assert strict.calculate(candidate, criteria(experience_level="intermediate")).score == 0.0
    assert (
        ExperienceLevelCalculator()
        .calculate(candidate, criteria(experience_level="intermediate"))
        .score
        == 1.0
    )
    assert strict.calculate(candidate, criteria()) is None


def test_service_calculator_uses_criteria_service_types() -> None:
    candidate = build_candidate(provider={"service_types": ["physical_therapy", "home_care"]})
    factor = ServiceMatchCalculator().calculate(
        candidate, criteria(service_types=["physical_therapy", "home_care", "nursing"])
    )
    assert factor is not None
    assert factor.score == pytest.approx(2 / 3)
    assert factor.weight == 0.5


def test_partial_level_override_keeps_other_defaults() -> None:
    config = PreferenceConfig(level_min_years={"expert": 10})
    assert config.level_min_years == {"entry": 0.0, "intermediate": 3.0, "expert": 10.0}

    candidate = build_candidate(provider={"years_of_experience": 9})
    calculator = ExperienceLevelCalculator(config=config)
    assert calculator.calculate(candidate, criteria(experience_level="entry")).score == 1.0
    assert calculator.calculate(candidate, criteria(experience_level="expert")).score == 0.0


def test_specialization_mapper_sees_original_spelling() -> None:
    seen: list[str] = []
    taxonomy = {"Parkinson's Disease": ["Neurology"]}

    def mapper(condition: str) -> list[str]:
        seen.append(condition)
        return taxonomy.get(condition, [condition])

    factor = specialization_factor(
        ["Parkinson's Disease", "parkinson's disease"],
        ["neurology"],
        mapper=mapper,
    )
    assert seen == ["Parkinson's Disease"]
    assert factor.score == 1.0
