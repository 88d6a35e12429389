from __future__ import annotations

import pytest
from pydantic import ValidationError

from admissionflow.schemas import (
    AcademicInputs,
    ActivitiesInputs,
    ApplicantRecord,
    InterviewInputs,
    Stage,
)


def test_stage_terminal_flags():
    assert Stage.ACCEPTED.is_terminal
    assert Stage.REJECTED.is_terminal
    assert not any(stage.is_terminal for stage in (Stage.DOCS, Stage.ACADEMIC, Stage.ACTIVITIES, Stage.INTERVIEW))


def test_stage_parse_is_case_insensitive():
    assert Stage.parse("interview") == Stage.INTERVIEW
    with pytest.raises(ValueError):
        Stage.parse("S4")


def test_academic_inputs_accept_both_spellings():
    camel = AcademicInputs.model_validate({"marks2ndYear": 700, "marksAdmissionTest": 80})
    snake = AcademicInputs.model_validate({"marks_2nd_year": 700, "marks_admission_test": 80})

    assert camel == snake


def test_out_of_range_values_pass_through():
    inputs = InterviewInputs.model_validate({"interviewPercentage": 140})

    assert inputs.interview_percentage == 140


def test_activities_count_from_name_list():
    inputs = ActivitiesInputs.model_validate({"activities": ["sports", "debate", "volunteer"]})

    assert inputs.activity_count == 3


def test_activities_empty_name_list_counts_zero():
    inputs = ActivitiesInputs.model_validate({"activities": []})

    assert inputs.activity_count == 0


def test_activities_without_any_field_is_missing():
    with pytest.raises(ValidationError):
        ActivitiesInputs.model_validate({})


def test_applicant_record_normalizes_stage_keys():
    record = ApplicantRecord.model_validate(
        {
            "applicant_id": "A-9",
            "stages": {"docs": {"documentsVerified": True}, "Academic": None},
        }
    )

    assert set(record.stages) == {Stage.DOCS, Stage.ACADEMIC}
    assert record.stages[Stage.ACADEMIC] == {}


def test_applicant_record_rejects_unknown_stage():
    with pytest.raises(ValidationError):
        ApplicantRecord.model_validate({"applicant_id": "A-9", "stages": {"S1": {}}})


def test_activities_unchecked_flags_count_zero():
    inputs = ActivitiesInputs.model_validate({"activity_sports": 0, "activity_debate": False})

    assert inputs.activity_count == 0
    assert inputs.activities == []


@pytest.mark.parametrize("value", ["nan", "inf", float("-inf")])
def test_non_finite_interview_percentage_is_rejected(value):
    with pytest.raises(ValidationError):
        InterviewInputs.model_validate({"interviewPercentage": value})
