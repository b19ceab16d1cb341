"""File-driven matching pipeline: dataset and criteria in, ranked matches out."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pendulum
import structlog

from . import __version__
from .core import ProviderMatchingService
from .repositories import DatasetLoader
from .schemas import MatchCriteria


class CriteriaLoader:
    """Load a matching request document."""

    def load(self, path: Path) -> MatchCriteria:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid criteria JSON: {exc}") from exc
        return MatchCriteria.model_validate(data)


class OutputWriter:
    """Persist matching results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class MatchingPipeline:
    """End-to-end matching run over files on disk."""

    def __init__(
        self,
        *,
        service_factory: Callable[..., ProviderMatchingService],
        dataset_loader: DatasetLoader | None = None,
        criteria_loader: CriteriaLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._service_factory = service_factory
        self._datasets = dataset_loader or DatasetLoader()
        self._criteria = criteria_loader or CriteriaLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    async def run(
        self,
        *,
        dataset_path: Path,
        criteria_path: Path,
        output_path: Path,
    ) -> list[dict[str, Any]]:
        dataset = self._datasets.load(dataset_path)
        criteria = self._criteria.load(criteria_path)

        service = self._service_factory(
            provider_repository=dataset.providers,
            client_repository=dataset.clients,
            availability_repository=dataset.availability,
        )
        matches = await service.match_providers(criteria)
        serialized = [match.to_dict() for match in matches]

        for rank, match in enumerate(matches, start=1):
            self._logger.info(
                "matching.result",
                rank=rank,
                provider_id=match.provider_id,
                compatibility_score=match.compatibility_score,
                enhanced=match.confidence is not None,
            )

        payload = {
            "metadata": {
                "client_id": criteria.client_id,
                "service_types": list(criteria.service_types),
                "match_count": len(serialized),
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "matches": serialized,
        }
        self._writer.write(output_path, payload)
        return serialized
