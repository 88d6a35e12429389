from __future__ import annotations

import json
import logging

import pytest
import structlog

from admissionflow.logging import applicant_context, configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def test_configure_logging_merges_context_vars():
    configure_logging("DEBUG")

    processors = structlog.get_config()["processors"]

    assert processors[0] is structlog.contextvars.merge_contextvars
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")

    logger = structlog.get_config()["wrapper_class"]

    assert logger.__name__ == structlog.make_filtering_bound_logger(logging.INFO).__name__


def test_applicant_context_binds_and_clears():
    with applicant_context("A-7", activities_policy="strict"):
        bound = structlog.contextvars.get_contextvars()
        assert bound == {"applicant_id": "A-7", "activities_policy": "strict"}

    assert structlog.contextvars.get_contextvars() == {}


def test_applicant_context_rejects_unknown_keys():
    with pytest.raises(ValueError):
        applicant_context("A-7", stage="DOCS")


def test_bound_applicant_reaches_rendered_event(caplog):
    configure_logging("INFO")
    caplog.set_level(logging.INFO)

    with applicant_context("A-8", activities_policy="lenient"):
        structlog.get_logger("admissionflow.test").info("admission.check")

    event = json.loads(caplog.records[-1].getMessage())
    assert event["event"] == "admission.check"
    assert event["applicant_id"] == "A-8"
    assert event["activities_policy"] == "lenient"
    assert event["logger"] == "admissionflow.test"
