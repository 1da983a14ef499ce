"""Composition states and the read-only state snapshot."""

from dataclasses import dataclass
from enum import Enum

from ..dialog import DialogEntry
from ..scenarios import Context, Role


class ComposerState(Enum):
    """State of the composition state machine.

    - IDLE: No context chosen
    - CONTEXT_SELECTED: Context and role chosen, server not started
    - AWAITING_CAPTURE .. FINALIZING: Active conversation sub-states
    """

    IDLE = "idle"
    CONTEXT_SELECTED = "context_selected"
    AWAITING_CAPTURE = "awaiting_capture"
    CAPTURING = "capturing"
    PROCESSING = "processing"
    COMPOSING = "composing"
    FINALIZING = "finalizing"

    @property
    def is_active(self) -> bool:
        """Return True once the server conversation has started."""
        return self not in (ComposerState.IDLE, ComposerState.CONTEXT_SELECTED)


# States in which the user can pick tokens, presets, or record again.
READY_STATES = frozenset(
    {
        ComposerState.AWAITING_CAPTURE,
        ComposerState.COMPOSING,
        ComposerState.FINALIZING,
    }
)


@dataclass(frozen=True)
class ComposerSnapshot:
    """Immutable view of the composition state for display."""

    state: ComposerState
    context: Context | None
    role: Role | None
    turn: int
    tokens: tuple[str, ...]
    candidates: tuple[str, ...]
    transcript: str | None
    history: tuple[DialogEntry, ...]

    @property
    def partial_sentence(self) -> str:
        """Get the in-progress sentence text."""
        return " ".join(self.tokens)


__all__ = ["ComposerSnapshot", "ComposerState", "READY_STATES"]
