"""Unit tests for the composition state machine.

Runs against the in-process mock service, mock recorder and mock speech
output.
"""

import asyncio

import pytest

from aacommu.audio import CaptureError
from aacommu.audio.mock import MockAudioRecorder
from aacommu.composer import (
    CaptureInProgressError,
    ComposerState,
    CompositionStateMachine,
    InvalidTransitionError,
)
from aacommu.config import ComposerConfig
from aacommu.dialog import Speaker
from aacommu.gateway import GatewayTimeoutError, MockSuggestionService
from aacommu.scenarios import Context, Role
from aacommu.suggest import suggest
from aacommu.tts.mock import MockSpeechOutput

VOICE_ERROR_TEXT = "음성 처리 중 오류가 발생했습니다."


@pytest.fixture
def service() -> MockSuggestionService:
    """Create mock suggestion service."""
    return MockSuggestionService()


@pytest.fixture
def speech() -> MockSpeechOutput:
    """Create mock speech output."""
    return MockSpeechOutput()


@pytest.fixture
def recorder() -> MockAudioRecorder:
    """Create mock recorder."""
    return MockAudioRecorder()


@pytest.fixture
def composer(
    service: MockSuggestionService,
    speech: MockSpeechOutput,
    recorder: MockAudioRecorder,
) -> CompositionStateMachine:
    """Create state machine wired to mocks."""
    return CompositionStateMachine(service=service, speech=speech, recorder=recorder)


async def settle() -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(5):
        await asyncio.sleep(0)


async def start_conversation(
    composer: CompositionStateMachine, context: str = "restaurant"
) -> None:
    """Select a context, begin and process one partner clip."""
    composer.select_context(context)
    await composer.begin()
    await composer.capture_complete(b"clip")


class TestContextSelection:
    """Tests for select_context and begin."""

    def test_initial_state(self, composer: CompositionStateMachine) -> None:
        """Test that a new machine is idle and empty."""
        assert composer.state is ComposerState.IDLE
        assert composer.context is None
        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.history == []
        assert composer.context_label == "대화"

    def test_select_context_defaults_role(self, composer: CompositionStateMachine) -> None:
        """Test that a missing role resolves to the first role."""
        composer.select_context("hospital")
        assert composer.state is ComposerState.CONTEXT_SELECTED
        assert composer.context is Context.HOSPITAL
        assert composer.role == Role("patient", "환자")
        assert composer.context_label == "병원"

    def test_select_context_unknown_raises(self, composer: CompositionStateMachine) -> None:
        """Test that an unknown context is rejected without changing state."""
        with pytest.raises(ValueError):
            composer.select_context("spaceship")
        assert composer.state is ComposerState.IDLE

    @pytest.mark.asyncio
    async def test_begin_starts_server_conversation(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that begin calls start with context and role."""
        composer.select_context("hospital", "visitor")
        message = await composer.begin()

        assert message is not None
        assert composer.state is ComposerState.AWAITING_CAPTURE
        assert service.context == "hospital"
        assert service.role == "visitor"

    @pytest.mark.asyncio
    async def test_begin_failure_is_surfaced(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a start failure propagates and begin can be retried."""
        composer.select_context("restaurant")
        service.fail_next("start")

        with pytest.raises(GatewayTimeoutError):
            await composer.begin()
        assert composer.state is ComposerState.CONTEXT_SELECTED

        await composer.begin()
        assert composer.state is ComposerState.AWAITING_CAPTURE

    @pytest.mark.asyncio
    async def test_begin_requires_context(self, composer: CompositionStateMachine) -> None:
        """Test that begin without a context is rejected."""
        with pytest.raises(InvalidTransitionError, match="begin"):
            await composer.begin()

    @pytest.mark.asyncio
    async def test_select_context_clears_history(
        self, composer: CompositionStateMachine
    ) -> None:
        """Test that selecting a context always clears history."""
        await start_conversation(composer)
        await composer.choose_token("감사합니다")
        await composer.speak()
        assert len(composer.history) == 2

        composer.select_context("classroom")

        assert composer.history == []
        assert composer.transcript is None
        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.state is ComposerState.CONTEXT_SELECTED

    @pytest.mark.asyncio
    async def test_select_context_from_idle_clears_history(
        self, composer: CompositionStateMachine
    ) -> None:
        """Test that history left after leave() is cleared by the next context."""
        await start_conversation(composer)
        composer.leave()
        assert len(composer.history) == 1

        composer.select_context("restaurant")
        assert composer.history == []


class TestCapture:
    """Tests for capture and voice processing."""

    @pytest.mark.asyncio
    async def test_record_and_process(
        self, composer: CompositionStateMachine, recorder: MockAudioRecorder
    ) -> None:
        """Test recording a clip and receiving transcript and candidates."""
        composer.select_context("restaurant")
        await composer.begin()

        composer.start_capture()
        assert composer.state is ComposerState.CAPTURING
        assert recorder.is_recording

        await composer.stop_capture()

        assert composer.state is ComposerState.COMPOSING
        assert composer.transcript == "뭘 주문하시겠어요?"
        assert composer.candidates == ["저는", "불고기", "비빔밥", "메뉴", "주문할게요"]
        assert composer.history_lines() == ["상대방: 뭘 주문하시겠어요?"]

    @pytest.mark.asyncio
    async def test_clip_while_capturing_releases_recorder(
        self, composer: CompositionStateMachine, recorder: MockAudioRecorder
    ) -> None:
        """Test that a clip delivered during a capture cancels the recording."""
        composer.select_context("restaurant")
        await composer.begin()
        composer.start_capture()

        await composer.capture_complete(b"clip")

        assert not recorder.is_recording
        assert composer.state is ComposerState.COMPOSING
        assert composer.transcript == "뭘 주문하시겠어요?"

        composer.start_capture()
        assert recorder.is_recording
        await composer.stop_capture()
        assert recorder.start_count == 2

    @pytest.mark.asyncio
    async def test_second_capture_rejected(self, composer: CompositionStateMachine) -> None:
        """Test that starting a capture while capturing raises."""
        composer.select_context("restaurant")
        await composer.begin()
        composer.start_capture()

        with pytest.raises(CaptureInProgressError):
            composer.start_capture()
        assert composer.state is ComposerState.CAPTURING

    @pytest.mark.asyncio
    async def test_device_unavailable(
        self, composer: CompositionStateMachine, recorder: MockAudioRecorder
    ) -> None:
        """Test that a device error propagates and leaves state unchanged."""
        composer.select_context("restaurant")
        await composer.begin()
        recorder.deny_access()

        with pytest.raises(CaptureError, match="permission"):
            composer.start_capture()
        assert composer.state is ComposerState.AWAITING_CAPTURE

    @pytest.mark.asyncio
    async def test_stop_failure_restores_state(
        self, composer: CompositionStateMachine, recorder: MockAudioRecorder
    ) -> None:
        """Test that a failed stop returns to the state before capture."""
        await start_conversation(composer)
        composer.start_capture()
        recorder.cancel()

        with pytest.raises(CaptureError):
            await composer.stop_capture()
        assert composer.state is ComposerState.COMPOSING

    @pytest.mark.asyncio
    async def test_capture_requires_active_conversation(
        self, composer: CompositionStateMachine
    ) -> None:
        """Test that capture before begin is rejected."""
        composer.select_context("restaurant")
        with pytest.raises(InvalidTransitionError):
            composer.start_capture()
        with pytest.raises(InvalidTransitionError):
            await composer.capture_complete(b"clip")

    @pytest.mark.asyncio
    async def test_no_recorder(
        self, service: MockSuggestionService, speech: MockSpeechOutput
    ) -> None:
        """Test that recording without a recorder raises CaptureError."""
        composer = CompositionStateMachine(service=service, speech=speech)
        composer.select_context("restaurant")
        await composer.begin()
        with pytest.raises(CaptureError):
            composer.start_capture()

    @pytest.mark.asyncio
    async def test_voice_failure_uses_fallback(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test the error transcript and context defaults when voice fails."""
        composer.select_context("hospital")
        await composer.begin()
        service.fail_next("voice")

        await composer.capture_complete(b"clip")

        assert composer.state is ComposerState.COMPOSING
        assert composer.transcript == VOICE_ERROR_TEXT
        assert composer.candidates == suggest("hospital", None)
        assert composer.history == []

    @pytest.mark.asyncio
    async def test_voice_error_text_configurable(
        self, service: MockSuggestionService, speech: MockSpeechOutput
    ) -> None:
        """Test that the error transcript comes from config."""
        composer = CompositionStateMachine(
            service=service,
            speech=speech,
            config=ComposerConfig(voice_error_text="다시 말씀해 주세요"),
        )
        composer.select_context("restaurant")
        await composer.begin()
        service.fail_next("voice")
        await composer.capture_complete(b"clip")
        assert composer.transcript == "다시 말씀해 주세요"

    @pytest.mark.asyncio
    async def test_empty_options_stay_empty(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that an explicit empty options list is not replaced."""
        composer.select_context("restaurant")
        await composer.begin()
        service.queue_options("voice", [])

        await composer.capture_complete(b"clip")
        assert composer.candidates == []

    @pytest.mark.asyncio
    async def test_new_capture_clears_partial(self, composer: CompositionStateMachine) -> None:
        """Test that a new clip starts a new turn."""
        await start_conversation(composer)
        await composer.choose_token("저는")
        turn = composer.turn

        await composer.capture_complete(b"clip")

        assert composer.turn > turn
        assert composer.partial_sentence == ""


class TestTokenChoice:
    """Tests for choose_token."""

    @pytest.mark.asyncio
    async def test_server_sentence_wins(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that the partial sentence equals the server's sentence."""
        await start_conversation(composer)
        # Server already tracks a token the client never chose
        await service.select("저는")

        await composer.choose_token("불고기")

        assert composer.partial_sentence == "저는 불고기"
        assert composer.candidates == ["주세요", "랑", "정식을", "세트를"]

    @pytest.mark.asyncio
    async def test_timeout_falls_back(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a select timeout keeps the token and uses local tables."""
        await start_conversation(composer, "restaurant")
        service.fail_next("select")

        await composer.choose_token("불고기")

        assert composer.partial_sentence == "불고기"
        assert composer.candidates == ["주세요", "랑", "정식을", "세트를"]
        assert composer.state is ComposerState.COMPOSING

    @pytest.mark.asyncio
    async def test_failure_appends_to_prior_partial(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a failed select appends to the existing sentence."""
        await start_conversation(composer)
        await composer.choose_token("저는")
        service.fail_next("select")

        await composer.choose_token("불고기")

        assert composer.partial_sentence == "저는 불고기"
        assert composer.tokens == ("저는", "불고기")
        assert composer.candidates == suggest("restaurant", "불고기")

    @pytest.mark.asyncio
    async def test_empty_options_from_select(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that empty select options mean no suggestions."""
        await start_conversation(composer)
        service.queue_options("select", [])

        await composer.choose_token("감사합니다")
        assert composer.candidates == []

    @pytest.mark.asyncio
    async def test_optimistic_append(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that the token is shown before the reply arrives."""
        await start_conversation(composer)
        service.hold("select")

        task = asyncio.create_task(composer.choose_token("불고기"))
        await settle()
        assert composer.partial_sentence == "불고기"
        assert composer.is_busy

        service.release("select")
        await task
        assert not composer.is_busy

    @pytest.mark.asyncio
    async def test_queued_choices_sent_in_order(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that rapid token choices are queued, not raced."""
        await start_conversation(composer)
        service.hold("select")

        first = asyncio.create_task(composer.choose_token("저는"))
        await settle()
        second = asyncio.create_task(composer.choose_token("불고기"))
        await settle()
        assert composer.partial_sentence == "저는 불고기"
        assert service.call_count("select") == 1

        service.release("select")
        await asyncio.gather(first, second)

        selects = [args for name, args in service.calls if name == "select"]
        assert selects == [("저는",), ("불고기",)]
        assert composer.partial_sentence == "저는 불고기"
        assert composer.candidates == suggest("restaurant", "불고기")

    @pytest.mark.asyncio
    async def test_choose_token_requires_conversation(
        self, composer: CompositionStateMachine
    ) -> None:
        """Test that tokens cannot be chosen before begin."""
        with pytest.raises(InvalidTransitionError):
            await composer.choose_token("네")


class TestStaleResponses:
    """Tests for discarding replies of superseded turns."""

    @pytest.mark.asyncio
    async def test_late_end_keeps_new_capture(
        self,
        composer: CompositionStateMachine,
        service: MockSuggestionService,
        recorder: MockAudioRecorder,
    ) -> None:
        """Test that an end reply arriving during a capture leaves it running."""
        await start_conversation(composer)
        composer.choose_preset("감사합니다")
        service.hold("end")

        task = asyncio.create_task(composer.speak())
        await settle()
        assert composer.state is ComposerState.FINALIZING

        composer.start_capture()
        service.release("end")
        assert await task == "감사합니다"

        assert composer.state is ComposerState.CAPTURING
        assert recorder.is_recording

        await composer.stop_capture()
        assert composer.state is ComposerState.COMPOSING
        assert not recorder.is_recording

    @pytest.mark.asyncio
    async def test_select_after_clear_is_discarded(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a late select reply does not repopulate a cleared sentence."""
        await start_conversation(composer)
        service.hold("select")

        task = asyncio.create_task(composer.choose_token("불고기"))
        await settle()
        composer.clear()
        assert composer.partial_sentence == ""

        service.release("select")
        await task

        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.state is ComposerState.COMPOSING

    @pytest.mark.asyncio
    async def test_failed_select_after_clear_is_discarded(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a late failure does not apply the local fallback."""
        await start_conversation(composer)
        service.hold("select")
        service.fail_next("select")

        task = asyncio.create_task(composer.choose_token("불고기"))
        await settle()
        composer.clear()

        service.release("select")
        await task

        assert composer.partial_sentence == ""
        assert composer.candidates == []

    @pytest.mark.asyncio
    async def test_queued_select_after_clear_is_not_sent(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that queued choices of a cleared turn are dropped before sending."""
        await start_conversation(composer)
        service.hold("select")

        first = asyncio.create_task(composer.choose_token("저는"))
        await settle()
        second = asyncio.create_task(composer.choose_token("불고기"))
        await settle()
        composer.clear()

        service.release("select")
        await asyncio.gather(first, second)

        assert service.call_count("select") == 1
        assert composer.partial_sentence == ""

    @pytest.mark.asyncio
    async def test_voice_after_context_change_is_discarded(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a late voice reply does not land in a new context."""
        composer.select_context("restaurant")
        await composer.begin()
        service.hold("voice")

        task = asyncio.create_task(composer.capture_complete(b"clip"))
        await settle()
        assert composer.state is ComposerState.PROCESSING

        composer.select_context("hospital")
        service.release("voice")
        await task

        assert composer.state is ComposerState.CONTEXT_SELECTED
        assert composer.transcript is None
        assert composer.candidates == []
        assert composer.history == []

    @pytest.mark.asyncio
    async def test_end_after_preset_is_discarded(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that the user can keep composing while end is in flight."""
        await start_conversation(composer)
        await composer.choose_token("감사합니다")
        service.hold("end")

        task = asyncio.create_task(composer.speak())
        await settle()
        assert composer.state is ComposerState.FINALIZING

        composer.choose_preset("계산서 주세요")
        service.release("end")
        assert await task == "감사합니다"

        assert composer.partial_sentence == "계산서 주세요"
        assert composer.state is ComposerState.COMPOSING


class TestPreset:
    """Tests for choose_preset."""

    @pytest.mark.asyncio
    async def test_preset_replaces_partial(
        self, composer: CompositionStateMachine, service: MockSuggestionService
    ) -> None:
        """Test that a preset replaces tokens without calling select."""
        await start_conversation(composer)
        await composer.choose_token("저는")

        composer.choose_preset("물을 주세요")

        assert composer.partial_sentence == "물을 주세요"
        assert composer.candidates == []
        assert service.call_count("select") == 1

    @pytest.mark.asyncio
    async def test_preset_sentences_for_context(
        self, composer: CompositionStateMachine
    ) -> None:
        """Test that presets follow the selected context."""
        composer.select_context("classroom")
        assert composer.preset_sentences[0] == "질문이 있습니다"


class TestSpeak:
    """Tests for speak, clear, leave and say."""

    @pytest.mark.asyncio
    async def test_speak_sentence(
        self,
        composer: CompositionStateMachine,
        service: MockSuggestionService,
        speech: MockSpeechOutput,
    ) -> None:
        """Test speaking records history and clears the sentence."""
        await start_conversation(composer)
        await composer.choose_token("감사합니다")

        spoken = await composer.speak()

        assert spoken == "감사합니다"
        assert speech.spoken_texts == ["감사합니다"]
        last = composer.history[-1]
        assert last.speaker is Speaker.SELF
        assert last.text == "감사합니다"
        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.state is ComposerState.COMPOSING
        assert service.call_count("end") == 1

    @pytest.mark.asyncio
    async def test_speak_when_end_fails(
        self,
        composer: CompositionStateMachine,
        service: MockSuggestionService,
        speech: MockSpeechOutput,
    ) -> None:
        """Test that an end failure does not undo speaking."""
        await start_conversation(composer)
        composer.choose_preset("감사합니다")
        service.fail_next("end")

        assert await composer.speak() == "감사합니다"

        assert speech.spoken_texts == ["감사합니다"]
        assert composer.history_lines(1) == ["나: 감사합니다"]
        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.state is ComposerState.COMPOSING

    @pytest.mark.asyncio
    async def test_speak_empty_is_noop(
        self,
        composer: CompositionStateMachine,
        service: MockSuggestionService,
        speech: MockSpeechOutput,
    ) -> None:
        """Test that speaking an empty sentence does nothing."""
        await start_conversation(composer)
        history = composer.history

        assert await composer.speak() is None

        assert speech.call_count == 0
        assert composer.history == history
        assert service.call_count("end") == 0

    @pytest.mark.asyncio
    async def test_speech_failure_changes_nothing(
        self, composer: CompositionStateMachine, speech: MockSpeechOutput
    ) -> None:
        """Test that a speech device error leaves the sentence in place."""
        await start_conversation(composer)
        composer.choose_preset("물을 주세요")
        speech.fail_next()

        with pytest.raises(RuntimeError):
            await composer.speak()

        assert composer.partial_sentence == "물을 주세요"
        assert len(composer.history) == 1

    @pytest.mark.asyncio
    async def test_clear(self, composer: CompositionStateMachine) -> None:
        """Test that clear discards the sentence without network calls."""
        await start_conversation(composer)
        await composer.choose_token("저는")

        composer.clear()

        assert composer.partial_sentence == ""
        assert composer.candidates == []
        assert composer.state is ComposerState.COMPOSING

    @pytest.mark.asyncio
    async def test_leave_keeps_history(
        self, composer: CompositionStateMachine, recorder: MockAudioRecorder
    ) -> None:
        """Test that leaving returns to idle and cancels capture."""
        await start_conversation(composer)
        composer.start_capture()

        composer.leave()

        assert composer.state is ComposerState.IDLE
        assert composer.context is None
        assert not recorder.is_recording
        assert len(composer.history) == 1

    def test_say_quick_phrase(
        self, composer: CompositionStateMachine, speech: MockSpeechOutput
    ) -> None:
        """Test that quick phrases are spoken without history."""
        composer.say("도와주세요")
        assert speech.spoken_texts == ["도와주세요"]
        assert composer.history == []


class TestSnapshot:
    """Tests for the read model."""

    @pytest.mark.asyncio
    async def test_snapshot_is_immutable(self, composer: CompositionStateMachine) -> None:
        """Test that snapshots do not follow later changes."""
        await start_conversation(composer)
        await composer.choose_token("저는")

        snapshot = composer.snapshot()
        composer.clear()

        assert snapshot.partial_sentence == "저는"
        assert snapshot.state is ComposerState.COMPOSING
        assert snapshot.context is Context.RESTAURANT
        assert len(snapshot.history) == 1
        assert composer.partial_sentence == ""

    @pytest.mark.asyncio
    async def test_candidates_are_copies(self, composer: CompositionStateMachine) -> None:
        """Test that callers cannot mutate candidates."""
        await start_conversation(composer)
        composer.candidates.clear()
        assert composer.candidates
