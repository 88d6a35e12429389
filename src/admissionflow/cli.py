"\"\"\"Typer CLI entrypoint for the admission evaluation pipeline.\"\"\""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .logging import configure_logging
from .pipeline import AuditLogger
from .scenarios import run_scenarios
from .schemas.config import load_config

app = typer.Typer(help="Multi-stage admission evaluation CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_name="config")
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


def _build_container(config: Optional[Path]):
    settings = _load_settings(config)
    try:
        return create_container(settings=settings)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


@app.command()
def run(
    applicants: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Applicants YAML, JSON or JSONL path."
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Evaluate every applicant in a file through all admission stages."""
    configure_logging(log_level)

    container = _build_container(config)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    results = pipeline.run(
        applicants_path=applicants,
        output_path=output,
        audit_logger=audit_logger,
    )
    typer.echo(f"Processed {len(results)} applicants. Results saved to {output}.")


@app.command()
def scenarios(
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Run the built-in admission scenarios against the configured engine."""
    configure_logging(log_level)

    container = _build_container(config)
    engine = container.decision_engine()
    results = run_scenarios(engine)

    failures = 0
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        typer.echo(
            f"[{status}] {result.name}: {result.outcome or result.error} "
            f"(final stage {result.final_stage.value})"
        )
        if not result.passed:
            failures += 1

    typer.echo(f"{len(results) - failures}/{len(results)} scenarios passed "
               f"({engine.config.activities_policy} activities policy).")
    if failures:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
