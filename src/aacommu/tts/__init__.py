"""Speech output module for AACommu.

Provides platform-adaptive speech output:
- macOS: native `say` command with a Korean voice
- Linux / Raspberry Pi: `espeak-ng`
- Other: Falls back to Mock output
"""

import logging
import platform
from typing import TYPE_CHECKING

from .command import CommandSpeechOutput
from .mock import MockSpeechOutput
from .speech import SpeechOutput

if TYPE_CHECKING:
    from ..config import TTSConfig

logger = logging.getLogger(__name__)


def create_speech_output(
    config: "TTSConfig | None" = None,
    use_mock: bool = False,
) -> SpeechOutput:
    """Create the appropriate speech output for the current platform.

    Args:
        config: TTS configuration (optional)
        use_mock: If True, force mock output for testing

    Returns:
        SpeechOutput implementation appropriate for the platform.
        Never returns None - always falls back to MockSpeechOutput.
    """
    engine = "auto"
    language = "ko-KR"
    voice = "Yuna"
    speed = 1.0

    if config is not None:
        engine = config.engine
        language = config.language
        voice = config.voice
        speed = config.speed

    if use_mock or engine == "mock":
        logger.info("TTS: Using MockSpeechOutput (requested)")
        return MockSpeechOutput()

    if engine == "auto":
        engine = "say" if platform.system() == "Darwin" else "espeak-ng"

    # espeak-ng selects voices by language code ("ko")
    if engine == "espeak-ng":
        voice = language.split("-")[0].lower()

    output = CommandSpeechOutput(command=engine, voice=voice, speed=speed)
    if output.is_available:
        logger.info(f"TTS: Using {engine} (voice: {voice})")
        return output

    logger.warning(f"TTS: {engine} command not available, using MockSpeechOutput")
    return MockSpeechOutput()


__all__ = [
    "CommandSpeechOutput",
    "MockSpeechOutput",
    "SpeechOutput",
    "create_speech_output",
]
