"\"\"\"Core admission decision components.\"\"\""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .engine import (
    DecisionEngine,
    EngineConfig,
    TransitionRecord,
    TransitionResult,
    coerce_inputs,
)
from .errors import (
    AdmissionError,
    InvalidInputError,
    StageMismatchError,
    TerminalStageTransitionError,
)
from .session import AdmissionSession, SessionSummary

__all__ = [
    "AdmissionError",
    "AdmissionSession",
    "DecisionEngine",
    "EngineConfig",
    "InvalidInputError",
    "SessionSummary",
    "StageMismatchError",
    "TerminalStageTransitionError",
    "TransitionRecord",
    "TransitionResult",
    "coerce_inputs",
]
