"""Provider matching orchestration."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

import structlog

from ..errors import InvalidCriteria, MatchingError, RepositoryUnavailable
from ..geo import is_within_radius
from ..repositories import AvailabilityRepository, ClientRepository, ProviderRepository
from ..schemas import ClientProfile, DateRange, GeoPoint, MatchCriteria, Provider, TimeSlot
from .enhancement import ConfidenceScore, EnhancementFailure, EnhancementOutcome, MatchEnhancer
from .factors.proximity import provider_distance
from .scoring import Candidate, CompatibilityScorer, MatchFactor


@dataclass(slots=True)
class ProviderMatch:
    """Ranked result for one provider; built fresh for every request."""

    provider: Provider
    compatibility_score: float
    match_factors: list[MatchFactor]
    distance_miles: float | None = None
    available_slots: list[TimeSlot] = field(default_factory=list)
    confidence: ConfidenceScore | None = None

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider.model_dump(mode="json"),
            "compatibility_score": self.compatibility_score,
            "match_factors": [asdict(factor) for factor in self.match_factors],
            "distance_miles": self.distance_miles,
            "available_slots": [slot.model_dump(mode="json") for slot in self.available_slots],
            "confidence": (
                {
                    "score": self.confidence.score,
                    "level": self.confidence.level.value,
                    "factors": list(self.confidence.factors),
                }
                if self.confidence
                else None
            ),
        }


class ProviderMatchingService:
    """Validate criteria, filter candidates, score, optionally enhance, rank.

    Repository methods may return values directly or awaitables. Any failure
    raised by a repository aborts the request as ``RepositoryUnavailable``.
    Enhancement failures are logged per candidate and never reach the caller.
    """

    def __init__(
        self,
        *,
        scorer: CompatibilityScorer,
        provider_repository: ProviderRepository,
        client_repository: ClientRepository,
        availability_repository: AvailabilityRepository | None = None,
        enhancer: MatchEnhancer | None = None,
        max_concurrency: int = 4,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._scorer = scorer
        self._providers = provider_repository
        self._clients = client_repository
        self._availability = availability_repository
        self._enhancer = enhancer
        self._max_concurrency = max_concurrency
        self._logger = structlog.get_logger(__name__)

    def get_match_factor_catalog(self) -> list[dict[str, Any]]:
        return self._scorer.catalog()

    async def match_providers(
        self,
        criteria: MatchCriteria,
        *,
        enhance: bool | None = None,
    ) -> list[ProviderMatch]:
        with structlog.contextvars.bound_contextvars(client_id=criteria.client_id):
            client = await self._validate(criteria)
            candidates = await self._filter(criteria, client)

            matches = [self._score(candidate, slots, criteria) for candidate, slots in candidates]

            use_enhancer = self._enhancer is not None if enhance is None else enhance
            if use_enhancer and self._enhancer is not None and matches:
                await self._enhance_all(self._enhancer, matches, criteria, client)

            ranked = sorted(
                matches,
                key=lambda match: (-match.compatibility_score, match.provider_id),
            )
            self._logger.info(
                "matching.completed",
                service_types=list(criteria.service_types),
                candidates=len(candidates),
                matches_found=len(ranked),
            )
            return ranked

    async def get_provider_availability(
        self,
        provider_id: str,
        date_range: DateRange,
        service_type: str,
    ) -> list[TimeSlot]:
        if self._availability is None:
            raise RepositoryUnavailable("No availability repository configured")
        slots = await self._call(
            self._availability.find_available_slots, provider_id, date_range, service_type
        )
        return sorted(
            (
                slot
                for slot in slots
                if not slot.is_booked
                and slot.service_type == service_type
                and date_range.overlaps(slot.start, slot.end)
            ),
            key=lambda slot: (slot.start, slot.slot_id),
        )

    async def _validate(self, criteria: MatchCriteria) -> ClientProfile:
        if not [item for item in criteria.service_types if item and item.strip()]:
            raise InvalidCriteria("At least one required service type is needed")
        if not criteria.client_id:
            raise InvalidCriteria("Client ID is required")
        if criteria.availability is not None and self._availability is None:
            raise RepositoryUnavailable("No availability repository configured")

        client = await self._call(self._clients.find_client, criteria.client_id)
        if client is None:
            raise InvalidCriteria(f"Client profile not found for ID: {criteria.client_id}")
        return client

    async def _filter(
        self,
        criteria: MatchCriteria,
        client: ClientProfile,
    ) -> list[tuple[Candidate, list[TimeSlot]]]:
        found: dict[str, Provider] = {}
        for service_type in dict.fromkeys(criteria.service_types):
            providers = await self._call(
                self._providers.find_providers_offering_service_type, service_type
            )
            for provider in providers:
                found.setdefault(provider.provider_id, provider)

        location_filter = criteria.location is not None and criteria.radius_miles is not None
        survivors: list[tuple[Candidate, list[TimeSlot]]] = []
        excluded: dict[str, int] = {"insurance": 0, "coverage": 0, "availability": 0}

        for provider in found.values():
            if criteria.insurance and criteria.insurance not in provider.insurance_accepted:
                excluded["insurance"] += 1
                continue

            areas = await self._call(
                self._providers.find_coverage_areas_for_provider, provider.provider_id
            )
            candidate = Candidate(provider=provider, client=client, coverage_areas=list(areas))

            if location_filter and not self._covers(
                candidate, criteria.location, criteria.radius_miles
            ):
                excluded["coverage"] += 1
                continue

            slots: list[TimeSlot] = []
            window = criteria.availability
            if window is not None:
                slots = await self._open_slots(provider.provider_id, window, criteria.service_types)
                if not slots:
                    excluded["availability"] += 1
                    continue

            survivors.append((candidate, slots))

        self._logger.debug(
            "matching.filtered",
            loaded=len(found),
            survivors=len(survivors),
            excluded=excluded,
        )
        return survivors

    @staticmethod
    def _covers(candidate: Candidate, point: GeoPoint, radius_miles: float) -> bool:
        if candidate.coverage_areas:
            return any(
                area.bounding_box().contains(point) and area.contains(point)
                for area in candidate.coverage_areas
            )
        if candidate.provider.location is not None:
            return is_within_radius(candidate.provider.location, point, radius_miles)
        return False

    async def _open_slots(
        self,
        provider_id: str,
        window: DateRange,
        service_types: list[str],
    ) -> list[TimeSlot]:
        collected: dict[str, TimeSlot] = {}
        for service_type in dict.fromkeys(service_types):
            for slot in await self.get_provider_availability(
                provider_id, window, service_type
            ):
                collected.setdefault(slot.slot_id, slot)
        return sorted(collected.values(), key=lambda slot: (slot.start, slot.slot_id))

    def _score(
        self,
        candidate: Candidate,
        slots: list[TimeSlot],
        criteria: MatchCriteria,
    ) -> ProviderMatch:
        overall, factors = self._scorer.score(candidate, criteria)
        miles = (
            provider_distance(candidate, criteria.location)
            if criteria.location is not None
            else None
        )
        return ProviderMatch(
            provider=candidate.provider,
            compatibility_score=overall,
            match_factors=factors,
            distance_miles=miles,
            available_slots=slots,
        )

    async def _enhance_all(
        self,
        enhancer: MatchEnhancer,
        matches: list[ProviderMatch],
        criteria: MatchCriteria,
        client: ClientProfile,
    ) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _enhance_one(match: ProviderMatch) -> EnhancementOutcome:
            async with semaphore:
                try:
                    return await enhancer.enhance(
                        client=client,
                        provider=match.provider,
                        criteria=criteria,
                        base_factors=list(match.match_factors),
                    )
                except Exception as exc:  # noqa: BLE001
                    return EnhancementFailure("enhancer_error", repr(exc))

        # Apply outcomes only once every call has settled.
        outcomes = await asyncio.gather(*(_enhance_one(match) for match in matches))

        for match, outcome in zip(matches, outcomes):
            if isinstance(outcome, EnhancementFailure):
                self._logger.warning(
                    "enhancement.failed",
                    provider_id=match.provider_id,
                    reason=outcome.reason,
                    detail=outcome.detail,
                )
                continue
            extra = self._scorer.apply_weights(outcome.factors)
            match.match_factors = [*match.match_factors, *extra]
            match.compatibility_score = self._scorer.combine(match.match_factors)
            match.confidence = outcome.confidence

    @staticmethod
    async def _call(method: Callable[..., Any], *args: Any) -> Any:
        try:
            result = method(*args)
            if inspect.isawaitable(result):
                result = await result
        except MatchingError:
            raise
        except Exception as exc:
            name = getattr(method, "__name__", repr(method))
            raise RepositoryUnavailable(f"{name} failed: {exc}") from exc
        return result


__all__ = ["ProviderMatch", "ProviderMatchingService"]
