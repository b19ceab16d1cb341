"""Factor calculator implementations for the compatibility scorer."""

from .service import ServiceMatchCalculator
from .proximity import ProximityCalculator
from .specialization import SpecializationCalculator
from .experience import ExperienceCalculator
from .insurance import InsuranceCalculator
from .preference import (
    ExperienceLevelCalculator,
    GenderPreferenceCalculator,
    LanguagePreferenceCalculator,
)

__all__ = [
    "ServiceMatchCalculator",
    "ProximityCalculator",
    "SpecializationCalculator",
    "ExperienceCalculator",
    "InsuranceCalculator",
    "GenderPreferenceCalculator",
    "LanguagePreferenceCalculator",
    "ExperienceLevelCalculator",
]
