"""Interactive terminal front end.

Drives the composition state machine from typed commands, so the full
conversation flow can be used without a graphical UI.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from .audio import CaptureError, create_recorder
from .composer import ComposerError, CompositionStateMachine
from .config import AACConfig
from .gateway import MockSuggestionService, SuggestionGateway, TransportError
from .scenarios import QUICK_PHRASES, Context, context_label, roles_for
from .tts import create_speech_output

logger = logging.getLogger(__name__)

START_FAILED_MESSAGE = "서버 연결에 문제가 있습니다. 잠시 후 다시 시도해주세요."

HELP_TEXT = """Commands:
  contexts              List contexts and roles
  context ID [ROLE]     Select a context (clears history)
  begin                 Start the conversation with the server
  record / stop         Record the partner's speech
  wav PATH              Use a WAV file as the partner's speech
  pick N|TEXT           Add a candidate token to the sentence
  preset N|TEXT         Use a preset sentence
  speak                 Speak the sentence
  clear                 Discard the sentence
  history [N]           Show the conversation history
  say N|TEXT            Speak a quick phrase immediately
  status                Show the current state
  leave                 Leave the conversation
  quit                  Exit"""


def pick_item(arg: str, items: Sequence[str]) -> str:
    """Resolve a 1-based index or literal text against a list of items.

    Raises:
        ValueError: If the argument is empty or the index is out of range
    """
    arg = arg.strip()
    if not arg:
        raise ValueError("Missing choice")
    if arg.isdigit():
        index = int(arg) - 1
        if not 0 <= index < len(items):
            raise ValueError(f"Choice {arg} is out of range (1-{len(items)})")
        return items[index]
    return arg


def numbered(items: Sequence[str]) -> str:
    """Format items as a numbered list on one line."""
    return "  ".join(f"{i}. {item}" for i, item in enumerate(items, 1))


class ConsoleSession:
    """Command interpreter over a CompositionStateMachine."""

    def __init__(
        self,
        composer: CompositionStateMachine,
        output: Callable[[str], None] = print,
    ) -> None:
        """Initialize the session.

        Args:
            composer: State machine to drive.
            output: Line writer (defaults to print).
        """
        self._composer = composer
        self._out = output

    async def handle(self, line: str) -> bool:
        """Execute one command line.

        Returns:
            False when the session should end, True otherwise.
        """
        command, _, arg = line.strip().partition(" ")
        command = command.lower()
        if not command:
            return True
        if command in ("quit", "exit"):
            return False

        handler = getattr(self, f"_cmd_{command}", None)
        if handler is None:
            self._out(f"Unknown command: {command} (type 'help')")
            return True

        try:
            await handler(arg.strip())
        except TransportError as e:
            logger.error(f"Service error: {e}")
            self._out(START_FAILED_MESSAGE)
        except (CaptureError, ComposerError, ValueError, RuntimeError, OSError) as e:
            self._out(f"Error: {e}")
        return True

    async def _cmd_help(self, _arg: str) -> None:
        self._out(HELP_TEXT)

    async def _cmd_contexts(self, _arg: str) -> None:
        for context in Context:
            roles = ", ".join(f"{r.id} ({r.label})" for r in roles_for(context))
            self._out(f"{context.value} ({context_label(context)}): {roles}")

    async def _cmd_context(self, arg: str) -> None:
        context, _, role = arg.partition(" ")
        self._composer.select_context(context, role.strip() or None)
        self._print_status()

    async def _cmd_begin(self, _arg: str) -> None:
        message = await self._composer.begin()
        if message is not None:
            self._out(f"Conversation started: {message}")

    async def _cmd_record(self, _arg: str) -> None:
        self._composer.start_capture()
        self._out("녹음 중... (type 'stop' to finish)")

    async def _cmd_stop(self, _arg: str) -> None:
        self._out("처리 중...")
        await self._composer.stop_capture()
        self._print_status()

    async def _cmd_wav(self, arg: str) -> None:
        audio = Path(arg).expanduser().read_bytes()
        self._out("처리 중...")
        await self._composer.capture_complete(audio)
        self._print_status()

    async def _cmd_pick(self, arg: str) -> None:
        await self._composer.choose_token(pick_item(arg, self._composer.candidates))
        self._print_status()

    async def _cmd_preset(self, arg: str) -> None:
        self._composer.choose_preset(pick_item(arg, self._composer.preset_sentences))
        self._print_status()

    async def _cmd_speak(self, _arg: str) -> None:
        text = await self._composer.speak()
        if text is None:
            self._out("Nothing to speak")
        else:
            self._out(f"나: {text}")

    async def _cmd_clear(self, _arg: str) -> None:
        self._composer.clear()
        self._print_status()

    async def _cmd_history(self, arg: str) -> None:
        limit = int(arg) if arg else None
        lines = self._composer.history_lines(limit)
        if not lines:
            self._out("대화 기록이 없습니다")
        for entry in lines:
            self._out(entry)

    async def _cmd_say(self, arg: str) -> None:
        self._composer.say(pick_item(arg, QUICK_PHRASES))

    async def _cmd_status(self, _arg: str) -> None:
        self._print_status()

    async def _cmd_leave(self, _arg: str) -> None:
        self._composer.leave()
        self._print_status()

    def _print_status(self) -> None:
        composer = self._composer
        role = f" ({composer.role.label})" if composer.role else ""
        self._out(f"[{composer.context_label}{role}] state: {composer.state.value}")
        if composer.transcript:
            self._out(f"상대방: {composer.transcript}")
        if composer.partial_sentence:
            self._out(f"현재 문장: {composer.partial_sentence}")
        if composer.candidates:
            self._out(f"다음 문구: {numbered(composer.candidates)}")
        if composer.state.is_active:
            self._out(f"자주 쓰는 문장: {numbered(composer.preset_sentences)}")


async def run_console(
    config: AACConfig,
    use_mock_gateway: bool = False,
    use_mock_audio: bool = False,
) -> int:
    """Run the interactive console until the user quits.

    Returns:
        Exit code
    """
    if use_mock_gateway:
        service: SuggestionGateway | MockSuggestionService = MockSuggestionService()
    else:
        service = SuggestionGateway(config.gateway)

    composer = CompositionStateMachine(
        service=service,
        speech=create_speech_output(config.tts, use_mock=use_mock_audio),
        recorder=create_recorder(config.audio, use_mock=use_mock_audio),
        config=config.composer,
    )
    session = ConsoleSession(composer)

    print("\n" + "=" * 50)
    print("  AACommu")
    print("=" * 50)
    print(f"  Service: {'mock' if use_mock_gateway else config.gateway.base_url}")
    print(f"  Audio: {'mock' if use_mock_audio else config.audio.input_device}")
    print(f"  Quick phrases: {numbered(QUICK_PHRASES)}")
    print("=" * 50 + "\n")
    print("Type 'help' for commands.\n")

    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if not await session.handle(line):
                break
    finally:
        composer.leave()
        if isinstance(service, SuggestionGateway):
            await service.aclose()

    return 0


__all__ = ["ConsoleSession", "HELP_TEXT", "numbered", "pick_item", "run_console"]
