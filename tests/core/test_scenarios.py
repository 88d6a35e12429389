from __future__ import annotations

from admissionflow.core import DecisionEngine, EngineConfig
from admissionflow.scenarios import BUILTIN_SCENARIOS, Scenario, run_scenario, run_scenarios
from admissionflow.schemas import Stage


def test_builtin_scenarios_pass_under_lenient_policy():
    results = run_scenarios(DecisionEngine())

    assert results
    assert all(result.passed for result in results), [r for r in results if not r.passed]
    assert "Activity Rejection" not in {result.name for result in results}


def test_builtin_scenarios_pass_under_strict_policy():
    results = run_scenarios(DecisionEngine(config=EngineConfig(activities_policy="strict")))

    names = {result.name for result in results}
    assert "Activity Rejection" in names
    assert "Activity Bonus Lifts Tier" not in names
    assert all(result.passed for result in results)


def test_scholarship_scenario_reaches_top_tier():
    scenario = next(s for s in BUILTIN_SCENARIOS if s.name.startswith("Scholarship T3"))

    result = run_scenario(DecisionEngine(), scenario)

    assert result.final_stage == Stage.ACCEPTED
    assert result.outcome == "Accepted with 30% Scholarship"
    assert result.scholarship_tier == 30
    assert len(result.transitions) == 4


def test_scenario_with_missing_stage_inputs_fails():
    scenario = Scenario(
        name="Stops early",
        stages={Stage.DOCS: {"documentsVerified": True}},
        expected="regular",
    )

    result = run_scenario(DecisionEngine(), scenario)

    assert result.passed is False
    assert result.final_stage == Stage.ACADEMIC
    assert result.error == "no inputs for stage ACADEMIC"
