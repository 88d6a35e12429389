"\"\"\"Applicant documents accepted by the batch pipeline.\"\"\""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .stage import Stage


class ApplicantRecord(BaseModel):
    """One applicant with raw inputs keyed by stage."""

    applicant_id: str
    name: str | None = None
    stages: dict[Stage, dict[str, Any]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @field_validator("stages", mode="before")
    @classmethod
    def _normalize_stage_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {Stage.parse(key): inputs or {} for key, inputs in value.items()}
