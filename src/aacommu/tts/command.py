"""Speech output through a system TTS command.

Uses the native `say` command on macOS and `espeak-ng` on Linux and
Raspberry Pi. Speech runs in a child process so the caller is never
blocked.
"""

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)

# espeak-ng speaks ~175 words per minute at its default rate, like `say`
BASE_RATE_WPM = 175


class CommandSpeechOutput:
    """Speech output that launches a TTS command per sentence.

    Implements the SpeechOutput protocol.
    """

    def __init__(
        self,
        command: str = "say",
        voice: str = "Yuna",
        speed: float = 1.0,
    ) -> None:
        """Initialize command speech output.

        Args:
            command: TTS command, "say" or "espeak-ng"
            voice: Voice name for `say`, or language/voice for `espeak-ng`
            speed: Speech speed multiplier (default: 1.0)
        """
        if command not in ("say", "espeak-ng"):
            raise ValueError(f"Unsupported TTS command: {command}")
        self._command = command
        self._voice = voice
        self._speed = max(0.5, min(2.0, speed))
        self._command_path = shutil.which(command)
        self._process: subprocess.Popen[bytes] | None = None

    @property
    def is_available(self) -> bool:
        """Return True if the TTS command is installed."""
        return self._command_path is not None

    @property
    def command(self) -> str:
        """Get the TTS command name."""
        return self._command

    def build_command(self, text: str) -> list[str]:
        """Build the argument list for speaking text."""
        rate = str(int(BASE_RATE_WPM * self._speed))
        if self._command == "say":
            return ["say", "-v", self._voice, "-r", rate, text]
        return ["espeak-ng", "-v", self._voice, "-s", rate, text]

    def speak(self, text: str) -> None:
        """Start speaking text in a child process.

        Raises:
            RuntimeError: If the command is missing or cannot be started
        """
        if not self.is_available:
            raise RuntimeError(f"TTS not available: {self._command} command not found")

        try:
            self._process = subprocess.Popen(
                self.build_command(text),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise RuntimeError(f"TTS failed to start: {e}") from e

        logger.debug(f"Speaking '{text[:30]}' with {self._command}")

    def stop(self) -> None:
        """Terminate the speaking process, if any."""
        if self._process is not None and self._process.poll() is None:
            self._process.terminate()
        self._process = None


__all__ = ["CommandSpeechOutput"]
