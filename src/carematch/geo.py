"""Distance and containment helpers over latitude/longitude pairs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidCoordinate
from .schemas.geo import GeoPoint, validate_coordinates

EARTH_RADIUS_MILES = 3958.8

_MIN_LAT = -90.0
_MAX_LAT = 90.0
_MIN_LNG = -180.0
_MAX_LNG = 180.0


@dataclass(slots=True, frozen=True)
class BoundingBox:
    """Rectangular prefilter region.

    ``min_lng > max_lng`` means the box wraps across the antimeridian.
    """

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def wraps_antimeridian(self) -> bool:
        return self.min_lng > self.max_lng

    def contains(self, point: GeoPoint) -> bool:
        if not self.min_lat <= point.latitude <= self.max_lat:
            return False
        if self.wraps_antimeridian:
            return point.longitude >= self.min_lng or point.longitude <= self.max_lng
        return self.min_lng <= point.longitude <= self.max_lng


def _ensure_valid(point: GeoPoint) -> None:
    # GeoPoint validates on construction, but model_construct() skips that.
    if not validate_coordinates(point.latitude, point.longitude):
        raise InvalidCoordinate(point.latitude, point.longitude)


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in miles using the haversine formula."""
    _ensure_valid(a)
    _ensure_valid(b)
    if a.latitude == b.latitude and a.longitude == b.longitude:
        return 0.0

    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(h)))
    return EARTH_RADIUS_MILES * c


def is_within_radius(center: GeoPoint, point: GeoPoint, radius_miles: float) -> bool:
    return distance(center, point) <= radius_miles


def bounding_box(center: GeoPoint, radius_miles: float) -> BoundingBox:
    """Return a box that fully contains the circle of ``radius_miles`` around ``center``.

    Longitude span grows with ``1 / cos(latitude)``; once the circle reaches a
    pole, or the span can no longer be expressed, the box covers every
    longitude.
    """
    _ensure_valid(center)
    if radius_miles < 0:
        raise ValueError("radius_miles must be non-negative")

    angular = radius_miles / EARTH_RADIUS_MILES
    lat = math.radians(center.latitude)
    lng = math.radians(center.longitude)

    min_lat = lat - angular
    max_lat = lat + angular

    lat_floor = math.radians(_MIN_LAT)
    lat_ceiling = math.radians(_MAX_LAT)

    if min_lat > lat_floor and max_lat < lat_ceiling:
        ratio = math.sin(angular) / math.cos(lat)
        if ratio >= 1.0:
            return BoundingBox(
                math.degrees(min_lat), math.degrees(max_lat), _MIN_LNG, _MAX_LNG
            )
        delta_lng = math.asin(ratio)
        min_lng = lng - delta_lng
        max_lng = lng + delta_lng
        if min_lng < math.radians(_MIN_LNG):
            min_lng += 2 * math.pi
        if max_lng > math.radians(_MAX_LNG):
            max_lng -= 2 * math.pi
        return BoundingBox(
            math.degrees(min_lat),
            math.degrees(max_lat),
            math.degrees(min_lng),
            math.degrees(max_lng),
        )

    return BoundingBox(
        max(math.degrees(min_lat), _MIN_LAT),
        min(math.degrees(max_lat), _MAX_LAT),
        _MIN_LNG,
        _MAX_LNG,
    )


__all__ = [
    "EARTH_RADIUS_MILES",
    "BoundingBox",
    "bounding_box",
    "distance",
    "is_within_radius",
    "validate_coordinates",
]
