"""Geographic value types."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, model_validator

from ..errors import InvalidCoordinate


def validate_coordinates(latitude: float, longitude: float) -> bool:
    """Return True when the pair is a finite, in-range latitude/longitude."""
    if latitude is None or longitude is None:
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


class GeoPoint(BaseModel):
    """Immutable latitude/longitude pair, optionally tagged with a postal code."""

    latitude: float
    longitude: float
    postal_code: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    # InvalidCoordinate is not a ValueError, so pydantic lets it propagate
    # unwrapped instead of folding it into a ValidationError.
    @model_validator(mode="after")
    def _check_range(self) -> "GeoPoint":
        if not validate_coordinates(self.latitude, self.longitude):
            raise InvalidCoordinate(self.latitude, self.longitude)
        return self
