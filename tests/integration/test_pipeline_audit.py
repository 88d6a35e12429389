from __future__ import annotations

import json
from pathlib import Path

import pytest

from admissionflow.container import create_container
from admissionflow.pipeline import ApplicantLoader, ApplicantLoadError, AuditLogger


def test_pipeline_writes_audit_log(tmp_path: Path) -> None:
    applicants_path = tmp_path / "applicants.jsonl"
    output_path = tmp_path / "results.json"
    audit_path = tmp_path / "audit" / "audit.jsonl"

    records = [
        {
            "applicant_id": "A-100",
            "stages": {
                "DOCS": {"documentsVerified": True},
                "ACADEMIC": {"marks2ndYear": 900, "marksAdmissionTest": 80},
                "ACTIVITIES": {"activityCount": 2},
                "INTERVIEW": {"interviewPercentage": 65},
            },
        },
        {"applicant_id": "A-101", "stages": {"DOCS": {"documentsVerified": False}}},
    ]
    applicants_path.write_text(
        "\n".join(json.dumps(record) for record in records),
        encoding="utf-8",
    )

    pipeline = create_container().pipeline()
    results = pipeline.run(
        applicants_path=applicants_path,
        output_path=output_path,
        audit_logger=AuditLogger(audit_path),
    )

    assert [r["final_stage"] for r in results] == ["ACCEPTED", "REJECTED"]
    assert results[0]["outcome"] == "Accepted Regular (Scholarship Revoked)"

    audit_lines = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
    assert len(audit_lines) == 5
    assert audit_lines[0]["applicant_id"] == "A-100"
    assert audit_lines[2]["from_stage"] == "ACTIVITIES"
    assert audit_lines[2]["scholarship_tier"] == 30
    assert audit_lines[-1] == {
        **audit_lines[-1],
        "applicant_id": "A-101",
        "from_stage": "DOCS",
        "to_stage": "REJECTED",
    }
    assert all("timestamp" in line for line in audit_lines)


def test_pipeline_records_incomplete_and_invalid_applicants(tmp_path: Path) -> None:
    applicants_path = tmp_path / "applicants.json"
    output_path = tmp_path / "results.json"
    applicants_path.write_text(
        json.dumps(
            {
                "applicants": [
                    {"applicant_id": "A-200", "stages": {"DOCS": {"documentsVerified": True}}},
                    {
                        "applicant_id": "A-201",
                        "stages": {
                            "DOCS": {"documentsVerified": True},
                            "ACADEMIC": {"marks2ndYear": "lots", "marksAdmissionTest": 80},
                        },
                    },
                ]
            }
        ),
        encoding="utf-8",
    )

    results = create_container().pipeline().run(
        applicants_path=applicants_path,
        output_path=output_path,
    )

    assert results[0]["final_stage"] == "ACADEMIC"
    assert results[0]["error"] == "missing inputs for stage ACADEMIC"
    assert results[1]["final_stage"] == "ACADEMIC"
    assert "Invalid inputs for stage ACADEMIC" in results[1]["error"]

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(rendered["metadata"]["errors"]) == 2


def test_loader_keeps_valid_records_on_partial_failure(tmp_path: Path) -> None:
    applicants_path = tmp_path / "applicants.jsonl"
    applicants_path.write_text(
        "\n".join(
            [
                json.dumps({"applicant_id": "A-300", "stages": {}}),
                "{not json",
                json.dumps({"stages": {}}),
            ]
        ),
        encoding="utf-8",
    )

    with pytest.raises(ApplicantLoadError) as excinfo:
        ApplicantLoader().load(applicants_path)

    assert [record.applicant_id for record in excinfo.value.partial] == ["A-300"]
    assert len(excinfo.value.errors) == 2
    assert excinfo.value.errors[0].startswith("line 2")
