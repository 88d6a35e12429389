"\"\"\"Logging utilities for the admission evaluation system.\"\"\""

from __future__ import annotations

import logging

import structlog

# applicant-scoped keys bound by the pipeline through structlog.contextvars
APPLICANT_CONTEXT_KEYS = ("applicant_id", "activities_policy")


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog JSON output on top of the stdlib root logger.

    Events carry the emitting module as ``logger`` and any applicant context
    bound with :func:`applicant_context`.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def applicant_context(applicant_id: str, **extra: str):
    """Bind applicant fields to every event logged inside the ``with`` block."""
    unknown = set(extra) - set(APPLICANT_CONTEXT_KEYS)
    if unknown:
        raise ValueError(f"Unsupported applicant context keys: {sorted(unknown)}")
    return structlog.contextvars.bound_contextvars(applicant_id=applicant_id, **extra)
