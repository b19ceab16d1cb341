"""Repository contracts and in-memory implementations backed by JSON datasets."""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Iterable, Protocol, TypeVar, Union, runtime_checkable

from pydantic import ValidationError

from .coverage import CoverageArea
from .errors import MatchingError
from .schemas import ClientProfile, DateRange, Provider, TimeSlot

T = TypeVar("T")
MaybeAwaitable = Union[T, Awaitable[T]]


@runtime_checkable
class ProviderRepository(Protocol):
    def find_providers_offering_service_type(
        self, service_type: str
    ) -> MaybeAwaitable[list[Provider]]:
        """Return providers offering ``service_type``."""

    def find_coverage_areas_for_provider(
        self, provider_id: str
    ) -> MaybeAwaitable[list[CoverageArea]]:
        """Return every coverage area owned by ``provider_id``."""


@runtime_checkable
class AvailabilityRepository(Protocol):
    def find_available_slots(
        self, provider_id: str, date_range: DateRange, service_type: str
    ) -> MaybeAwaitable[list[TimeSlot]]:
        """Return open slots for a provider within ``date_range``."""


@runtime_checkable
class ClientRepository(Protocol):
    def find_client(self, client_id: str) -> MaybeAwaitable[ClientProfile | None]:
        """Return the client profile or ``None`` when unknown."""


class InMemoryProviderRepository:
    """Provider and coverage lookup over records held in memory."""

    def __init__(
        self,
        providers: Iterable[Provider] = (),
        coverage_areas: Iterable[CoverageArea] = (),
    ) -> None:
        self._providers: dict[str, Provider] = {}
        self._coverage: dict[str, list[CoverageArea]] = defaultdict(list)
        for provider in providers:
            self.add_provider(provider)
        for area in coverage_areas:
            self.add_coverage_area(area)

    def add_provider(self, provider: Provider) -> None:
        self._providers[provider.provider_id] = provider

    def add_coverage_area(self, area: CoverageArea) -> None:
        self._coverage[area.provider_id].append(area)

    def find_providers_offering_service_type(self, service_type: str) -> list[Provider]:
        return [
            provider
            for provider in self._providers.values()
            if service_type in provider.service_types
        ]

    def find_coverage_areas_for_provider(self, provider_id: str) -> list[CoverageArea]:
        return list(self._coverage.get(provider_id, []))


class InMemoryAvailabilityRepository:
    def __init__(self, slots: Iterable[TimeSlot] = ()) -> None:
        self._slots: dict[str, list[TimeSlot]] = defaultdict(list)
        for slot in slots:
            self._slots[slot.provider_id].append(slot)

    def find_available_slots(
        self, provider_id: str, date_range: DateRange, service_type: str
    ) -> list[TimeSlot]:
        return [
            slot
            for slot in self._slots.get(provider_id, [])
            if not slot.is_booked
            and slot.service_type == service_type
            and date_range.overlaps(slot.start, slot.end)
        ]


class InMemoryClientRepository:
    def __init__(self, clients: Iterable[ClientProfile] = ()) -> None:
        self._clients = {client.client_id: client for client in clients}

    def find_client(self, client_id: str) -> ClientProfile | None:
        return self._clients.get(client_id)


class DatasetLoadError(MatchingError):
    """Raised when dataset records fail validation."""

    def __init__(self, errors: list[str]):
        super().__init__("Dataset loading failed")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Dataset loading failed: {self.errors}"


@dataclass(slots=True)
class Dataset:
    """Repositories built from one dataset document."""

    providers: InMemoryProviderRepository
    availability: InMemoryAvailabilityRepository
    clients: InMemoryClientRepository


class DatasetLoader:
    """Load ``{"clients", "providers", "coverage_areas", "slots"}`` JSON documents."""

    _SECTIONS: dict[str, Any] = {
        "clients": ClientProfile,
        "providers": Provider,
        "coverage_areas": CoverageArea,
        "slots": TimeSlot,
    }

    def load(self, path: Path) -> Dataset:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid dataset JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Dataset JSON must be an object")
        return self.from_dict(data)

    def from_dict(self, data: dict[str, Any]) -> Dataset:
        parsed: dict[str, list[Any]] = {}
        errors: list[str] = []
        for section, model in self._SECTIONS.items():
            parsed[section] = []
            for idx, record in enumerate(data.get(section) or []):
                try:
                    parsed[section].append(model.model_validate(record))
                except (ValidationError, MatchingError) as exc:
                    errors.append(f"{section}[{idx}]: {exc}")
        if errors:
            raise DatasetLoadError(errors)

        return Dataset(
            providers=InMemoryProviderRepository(
                parsed["providers"], parsed["coverage_areas"]
            ),
            availability=InMemoryAvailabilityRepository(parsed["slots"]),
            clients=InMemoryClientRepository(parsed["clients"]),
        )


__all__ = [
    "AvailabilityRepository",
    "ClientRepository",
    "Dataset",
    "DatasetLoadError",
    "DatasetLoader",
    "InMemoryAvailabilityRepository",
    "InMemoryClientRepository",
    "InMemoryProviderRepository",
    "ProviderRepository",
]
