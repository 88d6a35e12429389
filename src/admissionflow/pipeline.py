"\"\"\"Batch evaluation pipeline assembly and execution.\"\"\""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import pendulum
import structlog
import yaml

from .logging import applicant_context
from .core import AdmissionError, AdmissionSession, DecisionEngine, TransitionRecord
from .schemas import ApplicantRecord
from . import __version__

SessionFactory = Callable[..., AdmissionSession]


class ApplicantLoadError(ValueError):
    """Raised when applicant loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[ApplicantRecord]):
        super().__init__("Applicant loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Applicant loading failed: {self.errors}"


class ApplicantLoader:
    """Load applicant documents from YAML, JSON or JSONL files."""

    def load(self, path: Path) -> list[ApplicantRecord]:
        raw_records, errors = self._read_records(path)
        applicants: list[ApplicantRecord] = []
        for idx, record in raw_records:
            try:
                applicants.append(ApplicantRecord.model_validate(record))
            except Exception as exc:  # noqa: BLE001
                errors.append(f"record {idx}: {exc}")
        if errors:
            raise ApplicantLoadError(errors, applicants)
        return applicants

    def _read_records(self, path: Path) -> tuple[list[tuple[int, Any]], list[str]]:
        errors: list[str] = []
        suffix = path.suffix.lower()
        with path.open("r", encoding="utf-8") as handle:
            if suffix == ".jsonl":
                records: list[tuple[int, Any]] = []
                for idx, line in enumerate(handle, start=1):
                    raw = line.strip()
                    if not raw:
                        continue
                    try:
                        records.append((idx, json.loads(raw)))
                    except json.JSONDecodeError as exc:
                        errors.append(f"line {idx}: invalid JSON ({exc})")
                return records, errors
            try:
                if suffix == ".json":
                    data = json.load(handle)
                else:
                    data = yaml.safe_load(handle)
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise ValueError(f"Invalid applicant file {path}: {exc}") from exc

        if isinstance(data, dict) and "applicants" in data:
            data = data["applicants"]
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ValueError(f"Applicant file {path} must contain an object or a list")
        return list(enumerate(data, start=1)), errors


class OutputWriter:
    """Persist evaluation outcomes."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


class EvaluationPipeline:
    """Run every applicant in a file through its own admission session."""

    def __init__(
        self,
        *,
        engine: DecisionEngine,
        session_factory: SessionFactory | None = None,
        loader: ApplicantLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory or (
            lambda **kwargs: AdmissionSession(engine, **kwargs)
        )
        self._loader = loader or ApplicantLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        applicants_path: Path,
        output_path: Path,
        audit_logger: AuditLogger | None = None,
    ) -> list[dict]:
        errors: list[str] = []
        try:
            applicants = self._loader.load(applicants_path)
        except ApplicantLoadError as exc:
            applicants = exc.partial
            errors.extend(exc.errors)
            self._logger.warning("applicants.partial_load", errors=exc.errors)

        results: list[dict] = []
        policy = self._engine.config.activities_policy
        for applicant in applicants:
            with applicant_context(applicant.applicant_id, activities_policy=policy):
                entry = self.evaluate(applicant, audit_logger=audit_logger)
                self._logger.info(
                    "pipeline.result",
                    final_stage=entry["final_stage"],
                    outcome=entry["outcome"],
                    scholarship_tier=entry["scholarship_tier"],
                )
            if entry["error"]:
                errors.append(f"{applicant.applicant_id}: {entry['error']}")
            results.append(entry)

        metadata = {
            "applicant_count": len(applicants),
            "activities_policy": policy,
            "errors": errors,
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "results": results})
        return results

    def evaluate(
        self,
        applicant: ApplicantRecord,
        *,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        session = self._session_factory(applicant_id=applicant.applicant_id)
        error: str | None = None

        while not session.is_finished:
            stage = session.current_stage
            inputs = applicant.stages.get(stage)
            if inputs is None:
                error = f"missing inputs for stage {stage.value}"
                break
            try:
                session.submit_stage(inputs)
            except AdmissionError as exc:
                error = str(exc)
                break
            if audit_logger:
                audit_logger.append(
                    {
                        "applicant_id": applicant.applicant_id,
                        "timestamp": pendulum.now().to_iso8601_string(),
                        "scholarship_tier": session.scholarship_tier,
                        **_record_to_dict(session.history[-1]),
                    }
                )

        summary = session.summary()
        return {
            "applicant_id": applicant.applicant_id,
            "final_stage": summary.final_stage.value,
            "outcome": summary.outcome,
            "scholarship_tier": summary.scholarship_tier,
            "history": [_record_to_dict(record) for record in session.history],
            "summary": _json_ready(asdict(summary)),
            "applicant_data": session.applicant_data,
            "error": error,
        }


def _record_to_dict(record: TransitionRecord) -> dict[str, Any]:
    return _json_ready(asdict(record))


def _json_ready(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _json_ready(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_ready(item) for item in value]
    return value


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
