from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .geo import GeoPoint
from .provider import DateRange

ExperienceLevel = Literal["entry", "intermediate", "expert"]


class MatchCriteria(BaseModel):
    """Client-supplied matching request.

    Emptiness of ``service_types`` is checked by the matching service so that
    it surfaces as ``InvalidCriteria`` rather than a schema error.
    """

    client_id: str = ""
    service_types: list[str] = Field(default_factory=list)
    location: GeoPoint | None = None
    radius_miles: float | None = Field(default=None, gt=0)
    insurance: str | None = None
    gender_preference: str | None = None
    language_preference: list[str] | None = None
    experience_level: ExperienceLevel | None = None
    availability: DateRange | None = None
    additional_preferences: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")
