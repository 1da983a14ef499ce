"""Error types for sentence composition.

Custom exceptions for the composition state machine.
"""

from .state import ComposerState


class ComposerError(Exception):
    """Base exception for composition errors."""

    pass


class InvalidTransitionError(ComposerError):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, operation: str, state: ComposerState) -> None:
        """Initialize transition error.

        Args:
            operation: Requested operation.
            state: State the machine was in.
        """
        super().__init__(f"Cannot {operation} while {state.value}")
        self.operation = operation
        self.state = state


class CaptureInProgressError(InvalidTransitionError):
    """Raised when a capture is started while another one is running."""

    def __init__(self) -> None:
        super().__init__("start capture", ComposerState.CAPTURING)


class StaleResponseError(ComposerError):
    """Raised internally when a reply belongs to a superseded turn.

    Never surfaces to callers; the reply is discarded.
    """

    def __init__(self, operation: str, turn: int, current_turn: int) -> None:
        """Initialize stale response error.

        Args:
            operation: Gateway operation whose reply arrived late.
            turn: Turn the request was issued for.
            current_turn: Turn the machine has since moved to.
        """
        super().__init__(
            f"Discarding {operation} reply for turn {turn} (current turn {current_turn})"
        )
        self.operation = operation
        self.turn = turn
        self.current_turn = current_turn


__all__ = [
    "CaptureInProgressError",
    "ComposerError",
    "InvalidTransitionError",
    "StaleResponseError",
]
