"\"\"\"Per-applicant session driving the decision engine.\"\"\""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Mapping

import structlog
from pydantic import BaseModel

from ..schemas.stage import INITIAL_STAGE, Stage, StageInputs, required_field_names
from .engine import (
    DecisionEngine,
    TransitionRecord,
    TransitionResult,
    academic_percentage_from,
    coerce_inputs,
)
from .errors import InvalidInputError, TerminalStageTransitionError


@dataclass(frozen=True, slots=True)
class SessionSummary:
    """Final report data for one applicant."""

    applicant_id: str | None
    final_stage: Stage
    finished: bool
    outcome: str | None
    academic_percentage: float | None
    scholarship_tier: int
    scholarship_awarded: bool
    path: tuple[Stage, ...]


class AdmissionSession:
    """Mutable process state for a single applicant.

    Holds the current stage, the append-only transition history, the inputs
    accumulated so far and the scholarship tier. Each ``submit_stage`` call runs
    one engine transition to completion; failed submissions leave every piece of
    state untouched.
    """

    def __init__(self, engine: DecisionEngine, *, applicant_id: str | None = None) -> None:
        self._engine = engine
        self._applicant_id = applicant_id
        self._lock = threading.RLock()
        self._logger = structlog.get_logger(__name__)
        self._current_stage = INITIAL_STAGE
        self._history: list[TransitionRecord] = []
        self._applicant_data: dict[str, Any] = {}
        self._scholarship_tier = 0

    @property
    def applicant_id(self) -> str | None:
        return self._applicant_id

    @property
    def current_stage(self) -> Stage:
        return self._current_stage

    @property
    def history(self) -> tuple[TransitionRecord, ...]:
        return tuple(self._history)

    @property
    def scholarship_tier(self) -> int:
        return self._scholarship_tier

    @property
    def applicant_data(self) -> dict[str, Any]:
        return dict(self._applicant_data)

    @property
    def is_finished(self) -> bool:
        return self._current_stage.is_terminal

    def submit_stage(self, inputs: StageInputs | Mapping[str, Any]) -> TransitionResult:
        with self._lock:
            stage = self._current_stage
            if stage.is_terminal:
                self._logger.warning(
                    "admission.terminal_submission",
                    applicant_id=self._applicant_id,
                    stage=stage.value,
                )
                raise TerminalStageTransitionError(stage)

            try:
                parsed = coerce_inputs(stage, inputs)
            except InvalidInputError as exc:
                self._logger.warning(
                    "admission.invalid_input",
                    applicant_id=self._applicant_id,
                    stage=stage.value,
                    error_type=type(exc).__name__,
                    errors=exc.errors,
                )
                raise

            result, tier = self._engine.evaluate(
                stage,
                parsed,
                self._scholarship_tier,
                tuple(self._history),
            )

            self._history.append(TransitionRecord.from_result(stage, result))
            self._current_stage = result.next_stage
            self._scholarship_tier = tier
            self._applicant_data.update(_submitted_fields(stage, inputs, parsed))

            self._logger.info(
                "admission.transition",
                applicant_id=self._applicant_id,
                from_stage=stage.value,
                to_stage=result.next_stage.value,
                outcome=result.outcome,
                stage_score=result.stage_score,
                scholarship_tier=tier,
            )
            return result

    def reset(self) -> None:
        with self._lock:
            self._current_stage = INITIAL_STAGE
            self._history.clear()
            self._applicant_data.clear()
            self._scholarship_tier = 0

    def summary(self) -> SessionSummary:
        with self._lock:
            last = self._history[-1] if self._history else None
            accepted = self._current_stage == Stage.ACCEPTED
            path = (INITIAL_STAGE,) + tuple(record.to_stage for record in self._history)
            return SessionSummary(
                applicant_id=self._applicant_id,
                final_stage=self._current_stage,
                finished=self.is_finished,
                outcome=last.outcome if last else None,
                academic_percentage=(
                    academic_percentage_from(self._history)
                    if any(r.from_stage == Stage.ACADEMIC for r in self._history)
                    else None
                ),
                scholarship_tier=self._scholarship_tier,
                scholarship_awarded=accepted and self._scholarship_tier > 0,
                path=path,
            )


def _submitted_fields(
    stage: Stage,
    raw: StageInputs | Mapping[str, Any],
    parsed: BaseModel,
) -> dict[str, Any]:
    fields = parsed.model_dump(mode="python")
    if isinstance(raw, Mapping):
        aliases = required_field_names(stage)
        extras = {
            key: value
            for key, value in raw.items()
            if key not in fields and key not in aliases
        }
        return {**extras, **fields}
    return fields
