"""Provider coverage areas."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable

import pendulum
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .errors import InvalidCoverageArea
from .geo import BoundingBox, bounding_box, distance, is_within_radius
from .schemas.geo import GeoPoint

POSTAL_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")


def _check_radius(radius_miles: Any) -> float:
    if isinstance(radius_miles, bool) or not isinstance(radius_miles, (int, float)):
        raise InvalidCoverageArea(f"Radius must be a number, got {radius_miles!r}")
    if not radius_miles > 0:
        raise InvalidCoverageArea(f"Radius must be positive, got {radius_miles!r}")
    return float(radius_miles)


def _check_postal_code(code: Any) -> str:
    if not isinstance(code, str) or not POSTAL_CODE_PATTERN.match(code):
        raise InvalidCoverageArea(f"Invalid postal code format: {code!r}")
    return code


class CoverageArea(BaseModel):
    """Geographic region a provider declares as serviceable.

    A point is covered when it lies within ``radius_miles`` of ``center``.
    When ``postal_codes`` is non-empty and the point carries a postal code,
    that code must also be listed. Points without a postal code are judged by
    the radius alone.

    Updates go through the mutator methods, which validate the new value
    before committing and refresh ``updated_at``. Plain attribute assignment
    is validated too, and the bounding box follows the current center and
    radius.
    """

    id: str
    provider_id: str
    center: GeoPoint
    radius_miles: float
    postal_codes: set[str] = Field(default_factory=set)
    created_at: datetime = Field(default_factory=pendulum.now)
    updated_at: datetime = Field(default_factory=pendulum.now)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    _bbox: tuple[GeoPoint, float, BoundingBox] | None = PrivateAttr(default=None)

    @field_validator("provider_id")
    @classmethod
    def _provider_required(cls, value: str) -> str:
        if not value:
            raise InvalidCoverageArea("Coverage area requires a provider_id")
        return value

    @field_validator("radius_miles", mode="before")
    @classmethod
    def _radius_positive(cls, value: Any) -> float:
        return _check_radius(value)

    @field_validator("postal_codes", mode="before")
    @classmethod
    def _postal_codes_valid(cls, value: Any) -> set[str]:
        if value is None:
            return set()
        if isinstance(value, str):
            raise InvalidCoverageArea("postal_codes must be a collection of strings")
        return {_check_postal_code(code) for code in value}

    def contains(self, point: GeoPoint) -> bool:
        if not is_within_radius(self.center, point, self.radius_miles):
            return False
        if self.postal_codes and point.postal_code:
            return point.postal_code in self.postal_codes
        return True

    def distance_to(self, point: GeoPoint) -> float:
        return distance(self.center, point)

    def bounding_box(self) -> BoundingBox:
        cached = self._bbox
        if cached is None or cached[0] != self.center or cached[1] != self.radius_miles:
            cached = (self.center, self.radius_miles, bounding_box(self.center, self.radius_miles))
            self._bbox = cached
        return cached[2]

    def update_center(self, center: GeoPoint | dict[str, Any]) -> None:
        new_center = center if isinstance(center, GeoPoint) else GeoPoint(**center)
        self.center = new_center
        self._touch()

    def update_radius(self, radius_miles: float) -> None:
        self.radius_miles = _check_radius(radius_miles)
        self._touch()

    def add_postal_code(self, code: str) -> bool:
        _check_postal_code(code)
        if code in self.postal_codes:
            return False
        self.postal_codes.add(code)
        self._touch()
        return True

    def remove_postal_code(self, code: str) -> bool:
        if code not in self.postal_codes:
            return False
        self.postal_codes.discard(code)
        self._touch()
        return True

    def replace_postal_codes(self, codes: Iterable[str]) -> None:
        validated = {_check_postal_code(code) for code in codes}
        self.postal_codes = validated
        self._touch()

    def to_dict(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        payload["postal_codes"] = sorted(self.postal_codes)
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoverageArea":
        return cls.model_validate(data)

    def _touch(self) -> None:
        self.updated_at = pendulum.now()


__all__ = ["CoverageArea", "POSTAL_CODE_PATTERN"]
