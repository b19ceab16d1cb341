"""Pydantic schema definitions for matching inputs."""

from __future__ import annotations

from .criteria import ExperienceLevel, MatchCriteria
from .geo import GeoPoint, validate_coordinates
from .provider import ClientProfile, DateRange, Provider, TimeSlot

__all__ = [
    "ClientProfile",
    "DateRange",
    "ExperienceLevel",
    "GeoPoint",
    "MatchCriteria",
    "Provider",
    "TimeSlot",
    "validate_coordinates",
]
