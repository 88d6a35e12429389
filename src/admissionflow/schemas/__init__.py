"\"\"\"Pydantic schema definitions for stage inputs, applicants and configuration.\"\"\""

from __future__ import annotations

from .applicant import ApplicantRecord
from .stage import (
    INITIAL_STAGE,
    STAGE_INPUT_MODELS,
    AcademicInputs,
    ActivitiesInputs,
    DocsInputs,
    InterviewInputs,
    Stage,
    StageInputs,
)

__all__ = [
    "ApplicantRecord",
    "INITIAL_STAGE",
    "STAGE_INPUT_MODELS",
    "AcademicInputs",
    "ActivitiesInputs",
    "DocsInputs",
    "InterviewInputs",
    "Stage",
    "StageInputs",
]
