"""Configuration module for AACommu.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field


@dataclass
class GatewayConfig:
    """Remote transcription/suggestion service configuration."""

    base_url: str = "http://localhost:8000"
    timeout_seconds: float = 15.0
    voice_timeout_seconds: float = 60.0
    upload_filename: str = "recording.wav"
    upload_content_type: str = "audio/wav"


@dataclass
class AudioConfig:
    """Audio capture configuration."""

    input_device: str = "default"
    sample_rate: int = 16000
    channels: int = 1
    chunk_size: int = 1024
    max_record_seconds: float = 30.0


@dataclass
class TTSConfig:
    """Speech output configuration."""

    engine: str = "auto"
    language: str = "ko-KR"
    voice: str = "Yuna"
    speed: float = 1.0


@dataclass
class ComposerConfig:
    """Sentence composition behavior."""

    voice_error_text: str = "음성 처리 중 오류가 발생했습니다."
    history_display_limit: int = 20


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class TestingConfig:
    """Testing configuration."""

    mock_gateway_enabled: bool = False
    mock_audio_enabled: bool = False


@dataclass
class AACConfig:
    """Main AACommu configuration."""

    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    tts: TTSConfig = field(default_factory=TTSConfig)
    composer: ComposerConfig = field(default_factory=ComposerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)


# Public API
__all__ = [
    "AACConfig",
    "AudioConfig",
    "ComposerConfig",
    "GatewayConfig",
    "LoggingConfig",
    "TTSConfig",
    "TestingConfig",
]
