"\"\"\"Error kinds raised by the admission decision process.\"\"\""

from __future__ import annotations

from typing import Iterable

from ..schemas.stage import Stage


class AdmissionError(Exception):
    """Base class for admission process failures."""


class InvalidInputError(AdmissionError, ValueError):
    """Raised when stage inputs are missing a field or carry a non-numeric value."""

    def __init__(self, stage: Stage, errors: Iterable[str]):
        self.stage = stage
        self.errors = list(errors)
        super().__init__(f"Invalid inputs for stage {stage.value}: {'; '.join(self.errors)}")


class StageMismatchError(InvalidInputError):
    """Raised when inputs do not belong to the stage being evaluated."""

    def __init__(self, stage: Stage, errors: Iterable[str]):
        super().__init__(stage, errors)
        self.args = (f"Inputs do not match stage {stage.value}: {'; '.join(self.errors)}",)


class TerminalStageTransitionError(AdmissionError):
    """Raised when a transition is requested from ACCEPTED or REJECTED."""

    def __init__(self, stage: Stage):
        self.stage = stage
        super().__init__(f"Stage {stage.value} is terminal; no further transitions are accepted")


__all__ = [
    "AdmissionError",
    "InvalidInputError",
    "StageMismatchError",
    "TerminalStageTransitionError",
]
