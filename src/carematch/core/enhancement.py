"""Optional qualitative enhancement through a text-completion collaborator."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Protocol, Sequence, Union, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import EnhancementUnavailable
from ..schemas import ClientProfile, MatchCriteria, Provider
from .scoring import MatchFactor


class ConfidenceLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(slots=True, frozen=True)
class ConfidenceScore:
    score: float
    level: ConfidenceLevel
    factors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class EnhancementResult:
    """Supplementary factors plus the collaborator's confidence."""

    factors: list[MatchFactor]
    confidence: ConfidenceScore


@dataclass(slots=True)
class EnhancementFailure:
    """Why an enhancement attempt was discarded."""

    reason: str
    detail: str | None = None


EnhancementOutcome = Union[EnhancementResult, EnhancementFailure]


@runtime_checkable
class TextCompletionClient(Protocol):
    """Completion collaborator contract."""

    async def complete(self, prompt: str) -> str:
        """Return the raw completion text for ``prompt``."""


class _FactorPayload(BaseModel):
    name: str = Field(min_length=1)
    score: float = Field(ge=0.0, le=1.0)
    description: str = ""

    model_config = ConfigDict(extra="ignore")


class EnhancementResponse(BaseModel):
    """Structured reply expected from the completion collaborator."""

    factors: list[_FactorPayload] = Field(default_factory=list)
    confidence_score: float = Field(alias="confidenceScore", ge=0.0, le=100.0)
    confidence_level: ConfidenceLevel = Field(alias="confidenceLevel")
    confidence_factors: list[str] = Field(default_factory=list, alias="confidenceFactors")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("confidence_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def build_enhancement_payload(
    *,
    client: ClientProfile,
    provider: Provider,
    criteria: MatchCriteria,
    base_factors: Sequence[MatchFactor],
) -> dict[str, Any]:
    """Serialize the request bundle sent to the completion collaborator."""

    return {
        "client_profile": client.model_dump(mode="json"),
        "provider_profile": provider.model_dump(mode="json"),
        "criteria": criteria.model_dump(mode="json", exclude_none=True),
        "base_factors": [asdict(factor) for factor in base_factors],
    }


def build_prompt(payload: dict[str, Any]) -> str:
    return (
        "Analyze the match potential between a client and a care provider.\n"
        f"Context: {json.dumps(payload, ensure_ascii=False, sort_keys=True)}\n"
        "Respond with a JSON object only, shaped as "
        '{"factors": [{"name": str, "score": 0..1, "description": str}], '
        '"confidenceScore": 0..100, "confidenceLevel": "LOW"|"MEDIUM"|"HIGH", '
        '"confidenceFactors": [str]}.'
    )


def parse_enhancement_response(raw: str) -> EnhancementResult:
    """Parse a completion reply; raises ``ValueError`` when it is unusable."""

    text = raw.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Completion is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Completion JSON must be an object")

    response = EnhancementResponse.model_validate(data)
    return EnhancementResult(
        factors=[
            MatchFactor(name=item.name, score=item.score, description=item.description)
            for item in response.factors
        ],
        confidence=ConfidenceScore(
            score=response.confidence_score,
            level=response.confidence_level,
            factors=list(response.confidence_factors),
        ),
    )


class MatchEnhancer:
    """Ask the completion collaborator for extra factors about one candidate.

    Never raises for collaborator problems: transport errors, timeouts and
    malformed replies all come back as ``EnhancementFailure``. Task
    cancellation is not intercepted.
    """

    def __init__(self, client: TextCompletionClient, *, timeout_seconds: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout_seconds
        self._logger = structlog.get_logger(__name__)

    async def enhance(
        self,
        *,
        client: ClientProfile,
        provider: Provider,
        criteria: MatchCriteria,
        base_factors: Sequence[MatchFactor],
    ) -> EnhancementOutcome:
        payload = build_enhancement_payload(
            client=client,
            provider=provider,
            criteria=criteria,
            base_factors=base_factors,
        )
        prompt = build_prompt(payload)

        try:
            raw = await asyncio.wait_for(self._client.complete(prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            return EnhancementFailure("timeout", f"no reply within {self._timeout}s")
        except EnhancementUnavailable as exc:
            return EnhancementFailure("unavailable", str(exc))
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "enhancement.client_error",
                provider_id=provider.provider_id,
                error=repr(exc),
            )
            return EnhancementFailure("client_error", repr(exc))

        try:
            return parse_enhancement_response(raw)
        except (ValueError, ValidationError) as exc:
            return EnhancementFailure("malformed_response", str(exc))


__all__ = [
    "ConfidenceLevel",
    "ConfidenceScore",
    "EnhancementFailure",
    "EnhancementOutcome",
    "EnhancementResponse",
    "EnhancementResult",
    "MatchEnhancer",
    "TextCompletionClient",
    "build_enhancement_payload",
    "build_prompt",
    "parse_enhancement_response",
]
