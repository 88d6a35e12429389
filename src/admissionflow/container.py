"\"\"\"Dependency injection container for the admission system.\"\"\""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import AdmissionSession, DecisionEngine, EngineConfig
from .pipeline import ApplicantLoader, EvaluationPipeline, OutputWriter


class AdmissionContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    engine_config = providers.Singleton(EngineConfig)

    decision_engine = providers.Singleton(
        DecisionEngine,
        config=engine_config,
    )

    session = providers.Factory(
        AdmissionSession,
        engine=decision_engine,
    )

    applicant_loader = providers.Singleton(ApplicantLoader)
    output_writer = providers.Singleton(OutputWriter)

    pipeline = providers.Factory(
        EvaluationPipeline,
        engine=decision_engine,
        session_factory=session.provider,
        loader=applicant_loader,
        writer=output_writer,
    )


def create_container(*, settings: dict | None = None) -> AdmissionContainer:
    """Instantiate container with optional overrides."""

    container = AdmissionContainer()

    if not settings:
        return container

    engine_settings = settings.get("engine", {}) if isinstance(settings, dict) else {}
    if engine_settings:
        engine_config = EngineConfig(**engine_settings)
        container.engine_config.override(providers.Object(engine_config))

    return container
