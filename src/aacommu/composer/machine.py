"""Incremental sentence composition state machine.

Owns the conversation state (context, partial sentence, candidates,
transcript, history) and drives every transition in response to user
actions and suggestion service replies.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Collection
from typing import TYPE_CHECKING, TypeVar

from ..audio import CaptureError
from ..config import ComposerConfig
from ..dialog import ConversationLog, DialogEntry, Speaker
from ..gateway import TransportError
from ..scenarios import (
    Context,
    Role,
    context_label,
    parse_context,
    preset_sentences,
    resolve_role,
)
from ..suggest import FallbackSuggester
from .errors import CaptureInProgressError, InvalidTransitionError, StaleResponseError
from .state import READY_STATES, ComposerSnapshot, ComposerState

if TYPE_CHECKING:
    from ..audio import AudioRecorder
    from ..gateway import SuggestionService
    from ..tts import SpeechOutput

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CompositionStateMachine:
    """Tracks an utterance across start, voice, select and end calls.

    Every transition runs to completion between awaits on a single event
    loop. Service calls are serialized through one lock, so queued token
    choices are sent in order. Each call is tagged with the turn it was
    issued for; a reply that arrives after the turn was superseded (by
    ``clear``, ``speak``, a preset choice, a new capture or a new context)
    is discarded.

    The partial sentence is kept as settled tokens plus tokens still waiting
    for their select reply. A reply replaces the settled part with the
    server's ``current_sentence``; a failed reply settles the token locally
    and falls back to the local suggestion tables for candidates.

    Example:
        composer = CompositionStateMachine(service, speech, recorder)
        composer.select_context("restaurant")
        await composer.begin()
        await composer.capture_complete(wav_bytes)
        await composer.choose_token("불고기")
        await composer.speak()
    """

    def __init__(
        self,
        service: SuggestionService,
        speech: SpeechOutput,
        recorder: AudioRecorder | None = None,
        suggester: FallbackSuggester | None = None,
        log: ConversationLog | None = None,
        config: ComposerConfig | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            service: Suggestion service (HTTP gateway or mock).
            speech: Speech output device.
            recorder: Audio recorder for partner speech. Optional when
                clips are delivered directly via capture_complete().
            suggester: Local fallback suggestion engine.
            log: Conversation log to record finalized utterances in.
            config: Composition settings.
        """
        self._service = service
        self._speech = speech
        self._recorder = recorder
        self._suggester = suggester or FallbackSuggester()
        self._log = log if log is not None else ConversationLog()
        self._config = config or ComposerConfig()

        self._state = ComposerState.IDLE
        self._context: Context | None = None
        self._role: Role | None = None
        self._turn = 0
        self._settled: list[str] = []
        self._pending: list[str] = []
        self._candidates: list[str] = []
        self._transcript: str | None = None
        self._pre_capture_state = ComposerState.AWAITING_CAPTURE
        self._service_lock = asyncio.Lock()

    # Read model

    @property
    def state(self) -> ComposerState:
        """Get the current state."""
        return self._state

    @property
    def context(self) -> Context | None:
        """Get the selected context."""
        return self._context

    @property
    def role(self) -> Role | None:
        """Get the selected role."""
        return self._role

    @property
    def context_label(self) -> str:
        """Get the display label of the selected context."""
        return context_label(self._context)

    @property
    def turn(self) -> int:
        """Get the current turn number."""
        return self._turn

    @property
    def tokens(self) -> tuple[str, ...]:
        """Get the partial sentence as a token sequence."""
        return tuple(self._settled + self._pending)

    @property
    def partial_sentence(self) -> str:
        """Get the partial sentence text."""
        return " ".join(self.tokens)

    @property
    def candidates(self) -> list[str]:
        """Get the current candidate tokens."""
        return self._candidates.copy()

    @property
    def transcript(self) -> str | None:
        """Get the most recent partner utterance."""
        return self._transcript

    @property
    def history(self) -> list[DialogEntry]:
        """Get the full conversation history."""
        return self._log.entries()

    @property
    def preset_sentences(self) -> tuple[str, ...]:
        """Get the preset sentences for the selected context."""
        return preset_sentences(self._context)

    @property
    def is_busy(self) -> bool:
        """Return True while a service call is outstanding."""
        return self._service_lock.locked()

    def history_lines(self, limit: int | None = None) -> list[str]:
        """Get display lines for the most recent history entries.

        Args:
            limit: Number of entries; defaults to the configured display limit.
        """
        if limit is None:
            limit = self._config.history_display_limit
        return self._log.display_lines(limit)

    def snapshot(self) -> ComposerSnapshot:
        """Get an immutable view of the current state."""
        return ComposerSnapshot(
            state=self._state,
            context=self._context,
            role=self._role,
            turn=self._turn,
            tokens=self.tokens,
            candidates=tuple(self._candidates),
            transcript=self._transcript,
            history=tuple(self._log.entries()),
        )

    # Transitions

    def select_context(self, context: Context | str, role: str | None = None) -> None:
        """Choose the conversation context and role.

        Clears the conversation history. No service call is made; call
        begin() to start the server conversation.

        Args:
            context: Context or its tag.
            role: Role id within the context (defaults to the context's first role).

        Raises:
            ValueError: If the context or role is unknown.
        """
        selected = parse_context(context)
        selected_role = resolve_role(selected, role)

        self._abandon_capture()
        self._log.clear()
        self._context = selected
        self._role = selected_role
        self._transcript = None
        self._new_turn()
        self._state = ComposerState.CONTEXT_SELECTED

        role_id = selected_role.id if selected_role else "-"
        logger.info(f"Context selected: {selected.value} ({role_id})")

    async def begin(self) -> str | None:
        """Start the server conversation for the selected context.

        Returns:
            Server message, or None if the context changed meanwhile.

        Raises:
            InvalidTransitionError: If no context is selected.
            TransportError: If the service cannot be reached. The state stays
                CONTEXT_SELECTED so begin() can be retried.
        """
        self._require("begin", {ComposerState.CONTEXT_SELECTED})
        if self._context is None:
            raise InvalidTransitionError("begin", self._state)

        turn = self._turn
        context = self._context.value
        role = self._role.id if self._role else None

        try:
            response = await self._call(turn, "start", lambda: self._service.start(context, role))
        except StaleResponseError as e:
            logger.debug(str(e))
            return None
        except TransportError as e:
            logger.error(f"Failed to start conversation: {e}")
            raise

        self._state = ComposerState.AWAITING_CAPTURE
        logger.info(f"Conversation started: {response.message}")
        return response.message

    def start_capture(self) -> None:
        """Start recording the partner's speech.

        Raises:
            CaptureInProgressError: If a capture is already running.
            InvalidTransitionError: If no conversation is active.
            CaptureError: If the audio device is unavailable.
        """
        if self._state is ComposerState.CAPTURING:
            raise CaptureInProgressError()
        self._require("start capture", READY_STATES)
        if self._recorder is None:
            raise CaptureError("No audio recorder configured")

        self._recorder.start()
        self._pre_capture_state = self._state
        self._state = ComposerState.CAPTURING
        logger.debug("Capture started")

    async def stop_capture(self) -> None:
        """Stop recording and process the captured clip.

        Raises:
            InvalidTransitionError: If no capture is running.
            CaptureError: If the device failed or nothing was recorded.
        """
        self._require("stop capture", {ComposerState.CAPTURING})
        if self._recorder is None:
            raise CaptureError("No audio recorder configured")

        try:
            audio = self._recorder.stop()
        except CaptureError:
            self._state = self._pre_capture_state
            raise

        self._state = self._pre_capture_state
        await self.capture_complete(audio)

    async def capture_complete(self, audio: bytes) -> None:
        """Process a finished clip of partner speech.

        Starts a new turn. On success the transcript and candidates come
        from the service and the partner's utterance is logged. If the
        service fails, a local error transcript and the context's default
        suggestions are used instead.

        Args:
            audio: Complete WAV clip.
        """
        self._require("process capture", READY_STATES | {ComposerState.CAPTURING})
        self._abandon_capture()
        turn = self._new_turn()
        self._state = ComposerState.PROCESSING

        try:
            response = await self._call(turn, "voice", lambda: self._service.voice(audio))
        except StaleResponseError as e:
            logger.debug(str(e))
            return
        except TransportError as e:
            logger.warning(f"Voice processing failed, using local suggestions: {e}")
            self._transcript = self._config.voice_error_text
            self._candidates = self._suggester.suggest(self._context, None)
            self._state = ComposerState.COMPOSING
            return

        self._transcript = response.transcribed_text
        self._candidates = list(response.options)
        self._log.append(Speaker.PARTNER, response.transcribed_text)
        self._state = ComposerState.COMPOSING
        logger.debug(f"Partner said '{response.transcribed_text}' ({len(self._candidates)} options)")

    def choose_preset(self, sentence: str) -> None:
        """Use a complete ready-made sentence as the reply.

        Replaces any partial sentence; the service is not involved.

        Args:
            sentence: Preset sentence text.
        """
        self._require("choose preset", READY_STATES)

        self._new_turn()
        self._settled = [sentence]
        self._state = ComposerState.COMPOSING
        logger.debug(f"Preset chosen: {sentence}")

    async def choose_token(self, token: str) -> None:
        """Append a token to the partial sentence.

        The token is shown immediately, then sent to the service. The
        service's sentence replaces the local one when it answers; if it
        cannot be reached the token is kept locally and candidates come
        from the local tables keyed by the token.

        Args:
            token: Chosen token.
        """
        self._require("choose token", READY_STATES)

        turn = self._turn
        self._pending.append(token)
        self._state = ComposerState.COMPOSING

        try:
            response = await self._call(turn, "select", lambda: self._service.select(token))
        except StaleResponseError as e:
            logger.debug(str(e))
            return
        except TransportError as e:
            logger.warning(f"Select failed, continuing locally: {e}")
            self._pending.pop(0)
            self._settled.append(token)
            self._candidates = self._suggester.suggest(self._context, token)
            return

        self._pending.pop(0)
        sentence = response.current_sentence
        self._settled = [sentence] if sentence else []
        self._candidates = list(response.options)

    async def speak(self) -> str | None:
        """Speak the partial sentence and finish the turn.

        The sentence is spoken and logged first; the service is then told
        to end the sentence. The partial sentence and candidates are
        cleared whatever the service answers.

        Returns:
            The spoken sentence, or None if there was nothing to speak.

        Raises:
            RuntimeError: If the speech device fails (nothing is changed).
        """
        text = self.partial_sentence
        if not text:
            return None
        self._require("speak", READY_STATES)

        self._speech.speak(text)
        self._log.append(Speaker.SELF, text)
        turn = self._new_turn()
        self._state = ComposerState.FINALIZING
        logger.info(f"Spoke: {text}")

        try:
            response = await self._call(turn, "end", self._service.end)
        except StaleResponseError as e:
            logger.debug(str(e))
            return text
        except TransportError as e:
            logger.warning(f"End sentence failed (ignored): {e}")
        else:
            logger.debug(f"Server final sentence: {response.final_sentence}")

        # A capture started while end was in flight keeps its state
        if self._state is ComposerState.FINALIZING:
            self._state = ComposerState.COMPOSING
        return text

    def clear(self) -> None:
        """Discard the partial sentence and candidates without speaking."""
        self._require("clear", READY_STATES)
        self._new_turn()
        self._state = ComposerState.COMPOSING

    def leave(self) -> None:
        """Leave the conversation and return to IDLE.

        History is kept until the next context is selected.
        """
        self._abandon_capture()
        self._new_turn()
        self._context = None
        self._role = None
        self._transcript = None
        self._state = ComposerState.IDLE
        logger.info("Conversation left")

    def say(self, sentence: str) -> None:
        """Speak a quick phrase immediately, outside of composition.

        Raises:
            RuntimeError: If the speech device fails.
        """
        self._speech.speak(sentence)

    # Internals

    async def _call(self, turn: int, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run one service call for a turn.

        Raises:
            StaleResponseError: If the turn was superseded before or during the call.
            TransportError: If the call failed for the current turn.
        """
        async with self._service_lock:
            self._ensure_current(turn, operation)
            try:
                response = await call()
            except TransportError:
                self._ensure_current(turn, operation)
                raise
            self._ensure_current(turn, operation)
            return response

    def _ensure_current(self, turn: int, operation: str) -> None:
        if turn != self._turn:
            raise StaleResponseError(operation, turn, self._turn)

    def _new_turn(self) -> int:
        self._turn += 1
        self._settled = []
        self._pending = []
        self._candidates = []
        return self._turn

    def _abandon_capture(self) -> None:
        if self._state is ComposerState.CAPTURING and self._recorder is not None:
            self._recorder.cancel()
            logger.debug("Capture abandoned")

    def _require(self, operation: str, allowed: Collection[ComposerState]) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(operation, self._state)


__all__ = ["CompositionStateMachine"]
