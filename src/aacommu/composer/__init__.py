"""Sentence composition module for AACommu.

Provides the state machine that builds a reply token by token across
suggestion service calls.
"""

from .errors import (
    CaptureInProgressError,
    ComposerError,
    InvalidTransitionError,
    StaleResponseError,
)
from .machine import CompositionStateMachine
from .state import READY_STATES, ComposerSnapshot, ComposerState

__all__ = [
    "CaptureInProgressError",
    "ComposerError",
    "ComposerSnapshot",
    "ComposerState",
    "CompositionStateMachine",
    "InvalidTransitionError",
    "READY_STATES",
    "StaleResponseError",
]
