"""Audio recorder using PyAudio.

Captures microphone input on a background thread between start() and
stop(). Works on macOS, Linux and Raspberry Pi through PortAudio.
"""

import logging
import threading
import time
from typing import Any

from .recorder import CaptureError, encode_wav

logger = logging.getLogger(__name__)

# PyAudio import with fallback for type hints
try:
    import pyaudio

    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    pyaudio = None


class PyAudioRecorder:
    """Microphone recorder using PyAudio.

    Implements the AudioRecorder protocol.
    """

    def __init__(
        self,
        device_name: str = "default",
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_size: int = 1024,
        max_seconds: float = 30.0,
    ) -> None:
        """Initialize recorder.

        Args:
            device_name: Audio input device name or "default"
            sample_rate: Sample rate in Hz
            channels: Number of channels (1 for mono)
            chunk_size: Frames per buffer
            max_seconds: Recording stops collecting audio after this long
        """
        self._device_name = device_name
        self._sample_rate = sample_rate
        self._channels = channels
        self._chunk_size = chunk_size
        self._max_seconds = max_seconds
        self._sample_width = 2  # 16-bit audio

        self._pa: Any = None
        self._stream: Any = None
        self._frames: list[bytes] = []
        self._stop_flag = threading.Event()
        self._thread: threading.Thread | None = None
        self._read_error: Exception | None = None

    def _get_device_index(self) -> int | None:
        """Get device index for configured device name."""
        if self._device_name == "default" or self._pa is None:
            return None

        for i in range(self._pa.get_device_count()):
            info = self._pa.get_device_info_by_index(i)
            if self._device_name.lower() in info["name"].lower() and info["maxInputChannels"] > 0:
                return i

        return None  # Fall back to default

    def start(self) -> None:
        """Open the input stream and start collecting audio."""
        if self.is_recording:
            return
        if not PYAUDIO_AVAILABLE:
            raise CaptureError("PyAudio not available. Install with: pip install 'aacommu[audio]'")

        self._frames = []
        self._read_error = None
        self._stop_flag.clear()

        try:
            self._pa = pyaudio.PyAudio()
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self._channels,
                rate=self._sample_rate,
                input=True,
                input_device_index=self._get_device_index(),
                frames_per_buffer=self._chunk_size,
            )
        except OSError as e:
            self._close()
            raise CaptureError(f"Cannot open audio input: {e}") from e

        self._thread = threading.Thread(target=self._record_loop, daemon=True)
        self._thread.start()
        logger.debug("Recording started")

    def _record_loop(self) -> None:
        """Read chunks until stopped or the maximum duration is reached."""
        deadline = time.time() + self._max_seconds
        while not self._stop_flag.is_set():
            if time.time() >= deadline:
                logger.info(f"Recording reached {self._max_seconds}s limit")
                break
            try:
                data = self._stream.read(self._chunk_size, exception_on_overflow=False)
            except OSError as e:
                self._read_error = e
                break
            self._frames.append(data)

    def stop(self) -> bytes:
        """Stop recording and return the clip as WAV bytes."""
        if self._thread is None:
            raise CaptureError("Not recording")

        self._stop_flag.set()
        self._thread.join(timeout=2.0)
        self._thread = None
        self._close()

        if self._read_error is not None:
            raise CaptureError(f"Audio input failed: {self._read_error}") from self._read_error

        pcm = b"".join(self._frames)
        self._frames = []
        if not pcm:
            raise CaptureError("No audio captured")

        logger.debug(f"Recording stopped ({len(pcm)} bytes of PCM)")
        return encode_wav(pcm, self._sample_rate, self._channels, self._sample_width)

    def cancel(self) -> None:
        """Stop recording and discard audio."""
        if self._thread is None:
            return
        self._stop_flag.set()
        self._thread.join(timeout=2.0)
        self._thread = None
        self._close()
        self._frames = []

    def _close(self) -> None:
        if self._stream is not None:
            self._stream.stop_stream()
            self._stream.close()
            self._stream = None

        if self._pa is not None:
            self._pa.terminate()
            self._pa = None

    @property
    def is_recording(self) -> bool:
        """Return True while recording."""
        return self._thread is not None

    @property
    def sample_rate(self) -> int:
        """Get sample rate."""
        return self._sample_rate


__all__ = ["PYAUDIO_AVAILABLE", "PyAudioRecorder"]
