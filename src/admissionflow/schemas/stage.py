"\"\"\"Stage identifiers and per-stage input documents.\"\"\""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Stage(str, Enum):
    """Nodes of the admission decision process."""

    DOCS = "DOCS"
    ACADEMIC = "ACADEMIC"
    ACTIVITIES = "ACTIVITIES"
    INTERVIEW = "INTERVIEW"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.ACCEPTED, Stage.REJECTED)

    @classmethod
    def parse(cls, value: str | Stage) -> Stage:
        if isinstance(value, Stage):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown stage: {value!r}") from exc


INITIAL_STAGE = Stage.DOCS


class _StageInputsBase(BaseModel):
    stage: ClassVar[Stage]

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
        allow_inf_nan=False,
    )


class DocsInputs(_StageInputsBase):
    """Document verification outcome."""

    stage: ClassVar[Stage] = Stage.DOCS

    documents_verified: bool = Field(
        validation_alias=AliasChoices("documents_verified", "documentsVerified"),
    )


class AcademicInputs(_StageInputsBase):
    """Second-year marks and admission test marks."""

    stage: ClassVar[Stage] = Stage.ACADEMIC

    marks_2nd_year: float = Field(
        validation_alias=AliasChoices("marks_2nd_year", "marks2ndYear"),
    )
    marks_admission_test: float = Field(
        validation_alias=AliasChoices("marks_admission_test", "marksAdmissionTest"),
    )


class ActivitiesInputs(_StageInputsBase):
    """Selected extracurricular activities.

    The count may be given directly, as a list of activity names, or as
    ``activity_<name>`` flags the way the application form submits them.
    """

    stage: ClassVar[Stage] = Stage.ACTIVITIES

    FLAG_PREFIX: ClassVar[str] = "activity_"
    CHECKED_VALUES: ClassVar[frozenset[Any]] = frozenset({True, 1, "1", "on", "true", "yes"})

    activity_count: int = Field(
        validation_alias=AliasChoices("activity_count", "activityCount"),
    )
    activities: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_count(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "activity_count" in data or "activityCount" in data:
            return data

        flags = {key: value for key, value in data.items() if key.startswith(cls.FLAG_PREFIX)}
        if not flags and "activities" not in data:
            return data

        derived = dict(data)
        selected = list(data.get("activities") or [])
        selected.extend(
            key[len(cls.FLAG_PREFIX):]
            for key, value in flags.items()
            if _is_checked(value, cls.CHECKED_VALUES)
        )
        derived["activities"] = selected
        derived["activity_count"] = len(selected)
        return derived


class InterviewInputs(_StageInputsBase):
    """Interview result as a percentage."""

    stage: ClassVar[Stage] = Stage.INTERVIEW

    interview_percentage: float = Field(
        validation_alias=AliasChoices("interview_percentage", "interviewPercentage"),
    )


StageInputs = Union[DocsInputs, AcademicInputs, ActivitiesInputs, InterviewInputs]

STAGE_INPUT_MODELS: dict[Stage, type[_StageInputsBase]] = {
    Stage.DOCS: DocsInputs,
    Stage.ACADEMIC: AcademicInputs,
    Stage.ACTIVITIES: ActivitiesInputs,
    Stage.INTERVIEW: InterviewInputs,
}


def _is_checked(value: Any, checked: frozenset[Any]) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in checked
    try:
        return value in checked
    except TypeError:
        return False


def required_field_names(stage: Stage) -> set[str]:
    """Return every accepted name (field and aliases) of a stage's required inputs."""
    model = STAGE_INPUT_MODELS[stage]
    names: set[str] = set()
    for name, info in model.model_fields.items():
        if not info.is_required():
            continue
        names.add(name)
        alias = info.validation_alias
        if isinstance(alias, AliasChoices):
            names.update(choice for choice in alias.choices if isinstance(choice, str))
    return names
