"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ScoringConfig(BaseModel):
    weights: dict[str, float] | None = None
    default_weight: float | None = Field(default=None, gt=0, le=1)

    model_config = ConfigDict(extra="forbid")


class FactorConfig(BaseModel):
    proximity: dict[str, Any] | None = None
    experience: dict[str, Any] | None = None
    preference: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")


class EnhancementConfig(BaseModel):
    enabled: bool = False
    endpoint: str | None = None
    api_key: str | None = None
    model: str = "gpt-3.5-turbo"
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=4, ge=1)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    factors: FactorConfig = Field(default_factory=FactorConfig)
    enhancement: EnhancementConfig = Field(default_factory=EnhancementConfig)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        scoring = self.scoring.model_dump(exclude_none=True)
        if scoring:
            settings["scoring"] = scoring
        factor_settings = self.factors.model_dump(exclude_none=True)
        if factor_settings:
            settings["factors"] = factor_settings
        settings["enhancement"] = self.enhancement.model_dump()
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
