"\"\"\"Pydantic configuration schema for CLI YAML input.\"\"\""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ActivitiesPolicy = Literal["strict", "lenient"]


class EngineSettings(BaseModel):
    """Overrides for decision engine thresholds."""

    activities_policy: ActivitiesPolicy | None = None
    academic_pass: float | None = None
    academic_max_total: float | None = None
    scholarship_tiers: dict[float, int] | None = None
    activities_min: int | None = None
    activity_bonus: int | None = None
    scholarship_cap: int | None = None
    interview_pass: float | None = None
    scholarship_interview_min: float | None = None
    scholarship_academic_min: float | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    engine: EngineSettings = Field(default_factory=EngineSettings)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        engine_settings = self.engine.model_dump(exclude_none=True)
        if engine_settings:
            settings["engine"] = engine_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
