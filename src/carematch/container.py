"""Dependency injection container for the matching engine."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import (
    CompatibilityScorer,
    ExperienceCalculator,
    ExperienceLevelCalculator,
    FactorWeights,
    GenderPreferenceCalculator,
    InsuranceCalculator,
    LanguagePreferenceCalculator,
    MatchEnhancer,
    ProviderMatchingService,
    ProximityCalculator,
    ServiceMatchCalculator,
    SpecializationCalculator,
)
from .core.enhancement import TextCompletionClient
from .core.factors.experience import ExperienceConfig
from .core.factors.preference import PreferenceConfig
from .core.factors.proximity import ProximityConfig
from .llm import HTTPTextCompletionClient
from .pipeline import MatchingPipeline
from .repositories import DatasetLoader
from .schemas.config import load_config


class MatchingContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    factor_weights = providers.Singleton(
        FactorWeights,
        weights=config.scoring.weights,
        default_weight=config.scoring.default_weight,
    )

    service_calculator = providers.Singleton(ServiceMatchCalculator)
    proximity_calculator = providers.Singleton(ProximityCalculator)
    specialization_calculator = providers.Singleton(SpecializationCalculator)
    experience_calculator = providers.Singleton(ExperienceCalculator)
    insurance_calculator = providers.Singleton(InsuranceCalculator)
    gender_calculator = providers.Singleton(GenderPreferenceCalculator)
    language_calculator = providers.Singleton(LanguagePreferenceCalculator)
    experience_level_calculator = providers.Singleton(ExperienceLevelCalculator)

    calculators = providers.List(
        service_calculator,
        proximity_calculator,
        specialization_calculator,
        experience_calculator,
        insurance_calculator,
        gender_calculator,
        language_calculator,
        experience_level_calculator,
    )

    scorer = providers.Singleton(
        CompatibilityScorer,
        calculators=calculators,
        weights=factor_weights,
    )

    completion_client = providers.Object(None)
    enhancer = providers.Object(None)

    matching_service = providers.Factory(
        ProviderMatchingService,
        scorer=scorer,
        enhancer=enhancer,
        max_concurrency=config.enhancement.max_concurrency,
    )

    dataset_loader = providers.Singleton(DatasetLoader)

    pipeline = providers.Factory(
        MatchingPipeline,
        service_factory=matching_service.provider,
        dataset_loader=dataset_loader,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    completion_client: TextCompletionClient | None = None,
) -> MatchingContainer:
    """Instantiate container with optional overrides."""

    container = MatchingContainer()
    normalized = load_config(settings or {}).to_settings()
    container.config.from_dict(normalized)

    factor_settings = normalized.get("factors", {})

    if "proximity" in factor_settings:
        proximity_config = ProximityConfig(**factor_settings["proximity"])
        container.proximity_calculator.override(
            providers.Singleton(ProximityCalculator, config=proximity_config)
        )

    if "experience" in factor_settings:
        experience_config = ExperienceConfig(**factor_settings["experience"])
        container.experience_calculator.override(
            providers.Singleton(ExperienceCalculator, config=experience_config)
        )

    if "preference" in factor_settings:
        preference_config = PreferenceConfig(**factor_settings["preference"])
        container.experience_level_calculator.override(
            providers.Singleton(ExperienceLevelCalculator, config=preference_config)
        )

    enhancement = normalized["enhancement"]
    if completion_client is not None:
        container.completion_client.override(providers.Object(completion_client))
    elif enhancement["enabled"] and enhancement.get("endpoint"):
        container.completion_client.override(
            providers.Singleton(
                HTTPTextCompletionClient,
                enhancement["endpoint"],
                enhancement.get("api_key"),
                model=enhancement["model"],
                timeout=enhancement["timeout_seconds"],
            )
        )

    if container.completion_client() is not None:
        container.enhancer.override(
            providers.Singleton(
                MatchEnhancer,
                client=container.completion_client,
                timeout_seconds=enhancement["timeout_seconds"],
            )
        )

    return container
