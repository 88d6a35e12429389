"\"\"\"Built-in end-to-end admission scenarios used as a self-test suite.\"\"\""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal

import structlog

from .core import AdmissionError, AdmissionSession, DecisionEngine, TransitionRecord
from .schemas import Stage

ExpectedDecision = Literal["scholarship", "regular", "rejected"]


@dataclass(frozen=True)
class Scenario:
    """Stage inputs for one applicant and the decision they should reach."""

    name: str
    stages: dict[Stage, dict[str, Any]]
    expected: ExpectedDecision
    policies: tuple[str, ...] = ("strict", "lenient")


@dataclass(slots=True)
class ScenarioResult:
    name: str
    expected: ExpectedDecision
    final_stage: Stage
    outcome: str | None
    scholarship_tier: int
    passed: bool
    transitions: list[TransitionRecord] = field(default_factory=list)
    error: str | None = None


BUILTIN_SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        name="Scholarship T3 (90%+ Academics)",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            # 1080 / 1200 = 90%
            Stage.ACADEMIC: {"marks2ndYear": 1000, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1, "activity_certificate": 1, "activity_volunteer": 1},
            Stage.INTERVIEW: {"interviewPercentage": 90},
        },
        expected="scholarship",
    ),
    Scenario(
        name="Regular Acceptance (65% Academics)",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            Stage.ACADEMIC: {"marks2ndYear": 700, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1, "activity_certificate": 1},
            Stage.INTERVIEW: {"interviewPercentage": 60},
        },
        expected="regular",
    ),
    Scenario(
        name="Scholarship Revoked (Weak Interview)",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            # 980 / 1200 = 82%, tier 20
            Stage.ACADEMIC: {"marks2ndYear": 900, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1, "activity_certificate": 1, "activity_volunteer": 1},
            Stage.INTERVIEW: {"interviewPercentage": 60},
        },
        expected="regular",
    ),
    Scenario(
        name="Interview Rejection",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            Stage.ACADEMIC: {"marks2ndYear": 900, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1, "activity_certificate": 1},
            Stage.INTERVIEW: {"interviewPercentage": 40},
        },
        expected="rejected",
    ),
    Scenario(
        name="Academic Rejection (50% Academics)",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            Stage.ACADEMIC: {"marks2ndYear": 500, "marksAdmissionTest": 100},
        },
        expected="rejected",
    ),
    Scenario(
        name="Document Rejection",
        stages={
            Stage.DOCS: {"documentsVerified": False},
        },
        expected="rejected",
    ),
    Scenario(
        name="Activity Rejection",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            # 830 / 1200 = 69%
            Stage.ACADEMIC: {"marks2ndYear": 750, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1},
        },
        expected="rejected",
        policies=("strict",),
    ),
    Scenario(
        name="Activity Bonus Lifts Tier",
        stages={
            Stage.DOCS: {"documentsVerified": True},
            Stage.ACADEMIC: {"marks2ndYear": 900, "marksAdmissionTest": 80},
            Stage.ACTIVITIES: {"activity_sports": 1, "activity_certificate": 1, "activity_volunteer": 1},
            Stage.INTERVIEW: {"interviewPercentage": 85},
        },
        expected="scholarship",
        policies=("lenient",),
    ),
)


def scenarios_for_policy(policy: str, scenarios: Iterable[Scenario] | None = None) -> list[Scenario]:
    pool = BUILTIN_SCENARIOS if scenarios is None else tuple(scenarios)
    return [scenario for scenario in pool if policy in scenario.policies]


def run_scenario(engine: DecisionEngine, scenario: Scenario) -> ScenarioResult:
    session = AdmissionSession(engine, applicant_id=scenario.name)
    error: str | None = None
    while not session.is_finished:
        inputs = scenario.stages.get(session.current_stage)
        if inputs is None:
            error = f"no inputs for stage {session.current_stage.value}"
            break
        try:
            session.submit_stage(inputs)
        except AdmissionError as exc:
            error = str(exc)
            break

    summary = session.summary()
    return ScenarioResult(
        name=scenario.name,
        expected=scenario.expected,
        final_stage=summary.final_stage,
        outcome=summary.outcome,
        scholarship_tier=summary.scholarship_tier,
        passed=error is None and _matches(scenario.expected, summary.final_stage, summary.outcome),
        transitions=list(session.history),
        error=error,
    )


def run_scenarios(
    engine: DecisionEngine,
    scenarios: Iterable[Scenario] | None = None,
) -> list[ScenarioResult]:
    """Run every scenario that applies to the engine's activities policy."""
    logger = structlog.get_logger(__name__)
    results = []
    for scenario in scenarios_for_policy(engine.config.activities_policy, scenarios):
        result = run_scenario(engine, scenario)
        logger.info(
            "scenario.result",
            scenario=scenario.name,
            expected=scenario.expected,
            final_stage=result.final_stage.value,
            outcome=result.outcome,
            passed=result.passed,
        )
        results.append(result)
    return results


def _matches(expected: ExpectedDecision, final_stage: Stage, outcome: str | None) -> bool:
    if expected == "rejected":
        return final_stage == Stage.REJECTED
    if final_stage != Stage.ACCEPTED or outcome is None:
        return False
    if expected == "scholarship":
        return outcome.startswith("Accepted with")
    return outcome.startswith("Accepted Regular")
