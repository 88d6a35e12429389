"\"\"\"Stage transition rules for the admission decision process.\"\"\""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel, ValidationError

from ..schemas.config import ActivitiesPolicy
from ..schemas.stage import (
    STAGE_INPUT_MODELS,
    AcademicInputs,
    ActivitiesInputs,
    DocsInputs,
    InterviewInputs,
    Stage,
    StageInputs,
    required_field_names,
)
from .errors import InvalidInputError, StageMismatchError, TerminalStageTransitionError

REJECTED_OUTCOME = "Rejected"


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Outcome of evaluating one stage."""

    next_stage: Stage
    outcome: str
    condition: str
    stage_score: float


@dataclass(frozen=True, slots=True)
class TransitionRecord:
    """History entry for a completed stage attempt."""

    from_stage: Stage
    to_stage: Stage
    outcome: str
    condition: str
    stage_score: float

    @classmethod
    def from_result(cls, from_stage: Stage, result: TransitionResult) -> TransitionRecord:
        return cls(
            from_stage=from_stage,
            to_stage=result.next_stage,
            outcome=result.outcome,
            condition=result.condition,
            stage_score=result.stage_score,
        )


@dataclass(frozen=True)
class EngineConfig:
    """Thresholds and policies for the decision engine."""

    activities_policy: ActivitiesPolicy = "lenient"
    academic_pass: float = 60
    academic_max_total: float = 1200
    # score threshold -> scholarship tier, checked from the highest threshold down
    scholarship_tiers: Mapping[float, int] = field(
        default_factory=lambda: {90: 30, 80: 20, 70: 10}
    )
    activities_min: int = 2
    activity_bonus: int = 5
    scholarship_cap: int = 30
    interview_pass: float = 50
    scholarship_interview_min: float = 70
    scholarship_academic_min: float = 70
    completed_stage_score: int = 100

    def __post_init__(self) -> None:
        if self.activities_policy not in ("strict", "lenient"):
            raise ValueError(f"Unknown activities policy: {self.activities_policy!r}")
        if self.academic_max_total <= 0:
            raise ValueError("academic_max_total must be positive")
        ordered = sorted(
            ((float(threshold), int(tier)) for threshold, tier in self.scholarship_tiers.items()),
            reverse=True,
        )
        object.__setattr__(self, "scholarship_tiers", MappingProxyType(dict(ordered)))


class DecisionEngine:
    """Compute the next stage, rationale and stage score for a submission.

    The engine keeps no per-applicant state: the scholarship tier and the prior
    history are passed in and the updated tier is returned with the result.
    """

    def __init__(self, *, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        self._handlers: dict[Stage, Callable[[Any, int, Sequence[TransitionRecord]], tuple[TransitionResult, int]]] = {
            Stage.DOCS: self._evaluate_docs,
            Stage.ACADEMIC: self._evaluate_academic,
            Stage.ACTIVITIES: self._evaluate_activities,
            Stage.INTERVIEW: self._evaluate_interview,
        }

    @property
    def config(self) -> EngineConfig:
        return self._config

    def evaluate(
        self,
        stage: Stage | str,
        inputs: StageInputs | Mapping[str, Any],
        scholarship_tier: int = 0,
        history: Sequence[TransitionRecord] = (),
    ) -> tuple[TransitionResult, int]:
        stage = Stage.parse(stage)
        if stage.is_terminal:
            raise TerminalStageTransitionError(stage)
        parsed = coerce_inputs(stage, inputs)
        return self._handlers[stage](parsed, scholarship_tier, history)

    def academic_score(self, marks_2nd_year: float, marks_admission_test: float) -> int:
        """Combined marks as a percentage of the maximum, rounded half up."""
        total = Decimal(str(marks_2nd_year)) + Decimal(str(marks_admission_test))
        percentage = total * 100 / Decimal(str(self._config.academic_max_total))
        return int(percentage.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def scholarship_tier_for(self, score: float) -> int:
        for threshold, tier in self._config.scholarship_tiers.items():
            if score >= threshold:
                return tier
        return 0

    def _evaluate_docs(
        self,
        inputs: DocsInputs,
        scholarship_tier: int,
        history: Sequence[TransitionRecord],
    ) -> tuple[TransitionResult, int]:
        # a new application starts here, so any carried tier is discarded
        if inputs.documents_verified:
            result = TransitionResult(
                next_stage=Stage.ACADEMIC,
                outcome="Documents Verified",
                condition="All Mandatory Documents Validated",
                stage_score=0,
            )
        else:
            result = TransitionResult(
                next_stage=Stage.REJECTED,
                outcome=REJECTED_OUTCOME,
                condition="Mandatory Document Failure",
                stage_score=0,
            )
        return result, 0

    def _evaluate_academic(
        self,
        inputs: AcademicInputs,
        scholarship_tier: int,
        history: Sequence[TransitionRecord],
    ) -> tuple[TransitionResult, int]:
        cfg = self._config
        score = self.academic_score(inputs.marks_2nd_year, inputs.marks_admission_test)

        if score < cfg.academic_pass:
            result = TransitionResult(
                next_stage=Stage.REJECTED,
                outcome=REJECTED_OUTCOME,
                condition=f"Combined Percentage {score}% < {_fmt(cfg.academic_pass)}%",
                stage_score=score,
            )
            return result, scholarship_tier

        tier = self.scholarship_tier_for(score)
        result = TransitionResult(
            next_stage=Stage.ACTIVITIES,
            outcome=f"Academic Pass (Score: {score}%)",
            condition=(
                f"Combined Percentage {score}% ≥ {_fmt(cfg.academic_pass)}% "
                f"(Scholarship Tentative: {tier}%)"
            ),
            stage_score=score,
        )
        return result, tier

    def _evaluate_activities(
        self,
        inputs: ActivitiesInputs,
        scholarship_tier: int,
        history: Sequence[TransitionRecord],
    ) -> tuple[TransitionResult, int]:
        cfg = self._config
        count = inputs.activity_count

        if cfg.activities_policy == "strict" and count < cfg.activities_min:
            result = TransitionResult(
                next_stage=Stage.REJECTED,
                outcome=REJECTED_OUTCOME,
                condition=f"Activities Count {count} < {cfg.activities_min}",
                stage_score=0,
            )
            return result, scholarship_tier

        tier = scholarship_tier
        if scholarship_tier > 0 and count > 0:
            tier = min(scholarship_tier + count * cfg.activity_bonus, cfg.scholarship_cap)

        if cfg.activities_policy == "strict":
            outcome = f"Activities Pass (Count: {count})"
            condition = f"Activities Count {count} ≥ {cfg.activities_min}"
        else:
            outcome = f"Activities Reviewed (Count: {count})"
            condition = f"Activities Count {count} recorded"
        if tier != scholarship_tier:
            condition += f" (Scholarship Bonus: {scholarship_tier}% -> {tier}%)"

        result = TransitionResult(
            next_stage=Stage.INTERVIEW,
            outcome=outcome,
            condition=condition,
            stage_score=cfg.completed_stage_score,
        )
        return result, tier

    def _evaluate_interview(
        self,
        inputs: InterviewInputs,
        scholarship_tier: int,
        history: Sequence[TransitionRecord],
    ) -> tuple[TransitionResult, int]:
        cfg = self._config
        score = inputs.interview_percentage

        if score < cfg.interview_pass:
            shortfall = round(cfg.interview_pass - score, 2)
            result = TransitionResult(
                next_stage=Stage.REJECTED,
                outcome=REJECTED_OUTCOME,
                condition=(
                    f"Interview Score {_fmt(score)}% < {_fmt(cfg.interview_pass)}% "
                    f"(short by {_fmt(shortfall)}%)"
                ),
                stage_score=score,
            )
            return result, scholarship_tier

        academic_percentage = academic_percentage_from(history)

        if scholarship_tier <= 0:
            result = TransitionResult(
                next_stage=Stage.ACCEPTED,
                outcome="Accepted Regular",
                condition=f"Interview Pass ({_fmt(score)}%) and Regular Acceptance Granted.",
                stage_score=score,
            )
            return result, 0

        if score >= cfg.scholarship_interview_min and academic_percentage >= cfg.scholarship_academic_min:
            result = TransitionResult(
                next_stage=Stage.ACCEPTED,
                outcome=f"Accepted with {scholarship_tier}% Scholarship",
                condition=f"Interview Pass ({_fmt(score)}%) and Scholarship Confirmed.",
                stage_score=score,
            )
            return result, scholarship_tier

        result = TransitionResult(
            next_stage=Stage.ACCEPTED,
            outcome="Accepted Regular (Scholarship Revoked)",
            condition=f"Interview Pass ({_fmt(score)}%), but Scholarship criteria not maintained.",
            stage_score=score,
        )
        return result, 0


def coerce_inputs(stage: Stage, inputs: StageInputs | Mapping[str, Any]) -> StageInputs:
    """Validate raw inputs against the input model of ``stage``."""
    model = STAGE_INPUT_MODELS[stage]

    if isinstance(inputs, BaseModel):
        if isinstance(inputs, model):
            return inputs
        raise StageMismatchError(
            stage,
            [f"expected {model.__name__}, got {type(inputs).__name__}"],
        )

    if not isinstance(inputs, Mapping):
        raise InvalidInputError(stage, [f"inputs must be a mapping, got {type(inputs).__name__}"])

    try:
        return model.model_validate(dict(inputs))
    except ValidationError as exc:
        messages = [
            f"{'.'.join(str(part) for part in error['loc']) or 'inputs'}: {error['msg']}"
            for error in exc.errors()
        ]
        only_missing = all(error["type"] == "missing" for error in exc.errors())
        if only_missing and not required_field_names(stage) & set(inputs):
            raise StageMismatchError(stage, messages) from exc
        raise InvalidInputError(stage, messages) from exc


def academic_percentage_from(history: Sequence[TransitionRecord]) -> float:
    """Stage score recorded for ACADEMIC, or 0 when it never ran."""
    for record in history:
        if record.from_stage == Stage.ACADEMIC:
            return record.stage_score
    return 0


def _fmt(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
