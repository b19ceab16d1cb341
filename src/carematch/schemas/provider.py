from __future__ import annotations

from datetime import datetime

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .geo import GeoPoint


class Provider(BaseModel):
    """Care provider profile as loaded from storage."""

    provider_id: str
    name: str | None = None
    service_types: list[str] = Field(default_factory=list)
    specializations: list[str] = Field(default_factory=list)
    insurance_accepted: list[str] = Field(default_factory=list)
    location: GeoPoint | None = None
    average_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    gender: str | None = None
    languages: list[str] = Field(default_factory=list)
    years_of_experience: float | None = Field(default=None, ge=0.0)

    model_config = ConfigDict(extra="allow")


class ClientProfile(BaseModel):
    """Client needing care."""

    client_id: str
    name: str | None = None
    conditions: list[str] = Field(default_factory=list)
    insurance: str | None = None
    location: GeoPoint | None = None

    model_config = ConfigDict(extra="allow")


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are read as UTC so every window and slot compares.
    return pendulum.instance(value, tz="UTC").in_timezone("UTC")


class DateRange(BaseModel):
    """Closed time window, held in UTC."""

    start: datetime
    end: datetime

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("DateRange end must not precede start")
        return self

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end and end > self.start


class TimeSlot(BaseModel):
    """Bookable slot in a provider's calendar."""

    slot_id: str
    provider_id: str
    start: datetime
    end: datetime
    service_type: str
    is_booked: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)
