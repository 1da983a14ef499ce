"""Mock suggestion service for testing.

Provides a controllable in-process implementation of the suggestion service
for unit and integration testing, and for running without a server.
"""

import asyncio
import logging

from ..suggest import FallbackSuggester
from .errors import GatewayTimeoutError, TransportError
from .service import EndResponse, SelectResponse, StartResponse, VoiceResponse

logger = logging.getLogger(__name__)

OPERATIONS = ("start", "voice", "select", "end")


class MockSuggestionService:
    """Mock suggestion service.

    Tracks a server-side sentence the way the real service does, answers
    voice with canned per-context prompts and select with the local
    suggestion tables. Failures and delayed replies can be scripted:

    Example:
        service = MockSuggestionService()
        service.fail_next("select")         # next select raises TransportError
        service.hold("select")              # selects wait until release()
        service.queue_options("voice", [])  # next voice returns no options
    """

    def __init__(
        self,
        suggester: FallbackSuggester | None = None,
        latency_ms: int = 0,
    ) -> None:
        """Initialize mock service.

        Args:
            suggester: Suggestion tables used to answer voice and select.
            latency_ms: Simulated latency per call.
        """
        self._suggester = suggester or FallbackSuggester()
        self._latency_ms = latency_ms
        self._context: str | None = None
        self._role: str | None = None
        self._sentence: list[str] = []
        self._started = False
        self._offline = False
        self._failures: dict[str, list[TransportError]] = {op: [] for op in OPERATIONS}
        self._options: dict[str, list[list[str]]] = {op: [] for op in OPERATIONS}
        self._transcripts: list[str] = []
        self._holds: dict[str, asyncio.Event] = {}
        self._calls: list[tuple[str, tuple[object, ...]]] = []

    # Scripting

    def fail_next(self, operation: str, error: TransportError | None = None) -> None:
        """Make the next call of an operation fail.

        Args:
            operation: start, voice, select or end.
            error: Error to raise (defaults to a timeout).
        """
        self._check_operation(operation)
        if error is None:
            error = GatewayTimeoutError(f"{operation} timed out", operation=operation)
        self._failures[operation].append(error)

    def set_offline(self, offline: bool) -> None:
        """Make every call fail with a connection error while offline."""
        self._offline = offline

    def queue_options(self, operation: str, options: list[str]) -> None:
        """Override the options returned by the next voice or select call."""
        self._check_operation(operation)
        self._options[operation].append(list(options))

    def queue_transcript(self, text: str) -> None:
        """Override the transcript returned by the next voice call."""
        self._transcripts.append(text)

    def hold(self, operation: str) -> None:
        """Hold every call of an operation until release() is called."""
        self._check_operation(operation)
        self._holds[operation] = asyncio.Event()

    def release(self, operation: str) -> None:
        """Release all calls waiting on a held operation."""
        event = self._holds.pop(operation, None)
        if event is not None:
            event.set()

    def set_latency(self, latency_ms: int) -> None:
        """Set simulated latency."""
        self._latency_ms = latency_ms

    # Service operations

    async def start(self, context: str, role: str | None = None) -> StartResponse:
        """Start a conversation."""
        await self._enter("start", context, role)
        self._context = context
        self._role = role
        self._sentence = []
        self._started = True
        return StartResponse(message=f"Conversation started: {context} ({role or '-'})")

    async def voice(self, audio: bytes) -> VoiceResponse:
        """Return a canned partner prompt for the current context."""
        await self._enter("voice", len(audio))
        self._require_started("voice")
        transcript, options = self._suggester.opener(self._context)
        if self._transcripts:
            transcript = self._transcripts.pop(0)
        if self._options["voice"]:
            options = self._options["voice"].pop(0)
        self._sentence = []
        return VoiceResponse(transcribed_text=transcript, options=options)

    async def select(self, choice: str) -> SelectResponse:
        """Append a choice to the tracked sentence."""
        await self._enter("select", choice)
        self._require_started("select")
        self._sentence.append(choice)
        options = self._suggester.suggest(self._context, choice)
        if self._options["select"]:
            options = self._options["select"].pop(0)
        return SelectResponse(current_sentence=" ".join(self._sentence), options=options)

    async def end(self) -> EndResponse:
        """Finalize the tracked sentence."""
        await self._enter("end")
        final_sentence = " ".join(self._sentence)
        self._sentence = []
        return EndResponse(final_sentence=final_sentence)

    # Inspection

    @property
    def calls(self) -> list[tuple[str, tuple[object, ...]]]:
        """Get list of (operation, arguments) for every call received."""
        return self._calls.copy()

    def call_count(self, operation: str) -> int:
        """Get number of calls of an operation."""
        return sum(1 for name, _ in self._calls if name == operation)

    @property
    def context(self) -> str | None:
        """Get the context of the current server session."""
        return self._context

    @property
    def role(self) -> str | None:
        """Get the role of the current server session."""
        return self._role

    @property
    def current_sentence(self) -> str:
        """Get the server-side sentence."""
        return " ".join(self._sentence)

    def clear(self) -> None:
        """Reset recorded calls and scripted behavior."""
        self._calls.clear()
        self._transcripts.clear()
        for op in OPERATIONS:
            self._failures[op].clear()
            self._options[op].clear()
        for event in self._holds.values():
            event.set()
        self._holds.clear()
        self._offline = False

    async def _enter(self, operation: str, *args: object) -> None:
        self._calls.append((operation, args))
        logger.debug(f"Mock service {operation}{args}")

        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000)

        event = self._holds.get(operation)
        if event is not None:
            await event.wait()

        if self._offline:
            raise TransportError(f"{operation} failed: service unreachable", operation=operation)
        if self._failures[operation]:
            raise self._failures[operation].pop(0)

    def _require_started(self, operation: str) -> None:
        if not self._started:
            raise TransportError(
                f"{operation} failed with status 400",
                operation=operation,
                status_code=400,
                body='{"detail": "conversation not started"}',
            )

    @staticmethod
    def _check_operation(operation: str) -> None:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")


__all__ = ["MockSuggestionService", "OPERATIONS"]
