"""Audio sources feeding the pitch estimator."""

from __future__ import annotations
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..core.errors import (
    AudioCaptureError,
    CaptureToolMissingError,
    MicrophonePermissionError,
)
from ..core.events import AudioEventType, EventEmitter
from ..core.interfaces import IAudioInput

logger = get_logger(__name__)

_PERMISSION_HINTS = ("permission", "access", "denied", "not authorized", "not permitted")


def load_sounddevice() -> Any:
    """Import sounddevice, mapping a missing PortAudio library to CaptureToolMissingError."""
    try:
        import sounddevice as sd
    except (ImportError, OSError) as e:
        raise CaptureToolMissingError(
            f"Audio capture backend unavailable: {e}. "
            "Install PortAudio (e.g. 'brew install portaudio' or 'apt install libportaudio2')."
        ) from e
    return sd


def classify_capture_error(error: Exception) -> AudioCaptureError:
    """Map a backend exception onto the capture error hierarchy."""
    if isinstance(error, AudioCaptureError):
        return error
    if isinstance(error, PermissionError):
        return MicrophonePermissionError(str(error))
    message = str(error).lower()
    if any(hint in message for hint in _PERMISSION_HINTS):
        return MicrophonePermissionError(str(error))
    return AudioCaptureError(str(error))


class AudioInputHandler(IAudioInput, ABC):
    """Base class for audio sources: blocks and errors are delivered as events."""

    def __init__(self) -> None:
        self._events = EventEmitter()
        self._running = False

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running

    def on_error(self, callback: Callable[[Exception], None]) -> None:
        self._events.on(AudioEventType.ERROR, callback)

    def _deliver(self, samples: np.ndarray) -> None:
        self._events.emit(AudioEventType.AUDIO, samples)

    def _report_error(self, error: Exception) -> None:
        logger.warning(f"Audio source error: {error}")
        self._events.emit(AudioEventType.ERROR, error)

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray], None]) -> None:
        """Start capturing audio and pass each block to the callback.

        Raises:
            AudioCaptureError: If the source cannot be opened
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass


class SoundDeviceInput(AudioInputHandler):
    """Microphone capture through the sounddevice (PortAudio) library."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 1024
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Block size in frames, or None for default (1024)
            channels: Number of audio channels, or None for default (1)
        """
        super().__init__()
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS
        self._stream: Any = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: Any,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Note:
            This is called from the PortAudio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            self._report_error(AudioCaptureError(f"Audio stream status: {status}"))

        # Extract mono audio data (take first channel if multi-channel); PortAudio reuses indata
        audio_data = indata[:, 0] if indata.ndim > 1 else indata
        self._deliver(np.array(audio_data, dtype=np.float32))

    def _finished_callback(self) -> None:
        if self._running:
            self._report_error(AudioCaptureError("Audio stream finished unexpectedly"))

    def start(self, callback: Callable[[np.ndarray], None]) -> None:
        if self._running:
            logger.warning("Audio input already running")
            return

        sd = load_sounddevice()
        self._events.on(AudioEventType.AUDIO, callback)

        try:
            logger.info(
                f"Opening input device {self._device_id if self._device_id is not None else 'default'} "
                f"at {self._sample_rate} Hz, blocksize {self._frames_per_buffer}"
            )
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                blocksize=self._frames_per_buffer,
                channels=self._channels,
                dtype="float32",
                callback=self._audio_callback,
                finished_callback=self._finished_callback,
            )
            self._running = True
            self._stream.start()
        except Exception as e:
            self._running = False
            self._close_stream()
            self._events.off(AudioEventType.AUDIO, callback)
            error = classify_capture_error(e)
            logger.error(f"Failed to start audio input: {error}")
            raise error from e

        logger.info("Audio input started")

    def _close_stream(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except Exception as e:
            logger.error(f"Error closing audio stream: {e}")
        finally:
            self._stream = None

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        self._running = False
        self._close_stream()
        self._events.clear()
        logger.info("Audio input stopped")


class WavFileAudioInput(AudioInputHandler):
    """Provides audio data by reading from a sound file (WAV, FLAC, ...)."""

    def __init__(
        self,
        file_path: str,
        chunk_size: int = 1024,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ) -> None:
        """Open the file and read its format.

        Args:
            file_path: Path to the sound file
            chunk_size: Frames delivered per block
            loop: Restart from the beginning at end of file
            gain: Linear gain applied to every block
            realtime: Pace delivery at the file's sample rate

        Raises:
            AudioCaptureError: If the file cannot be opened
        """
        super().__init__()
        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._thread: Optional[threading.Thread] = None
        self._finished = threading.Event()

        try:
            info = sf.info(self._file_path)
        except Exception as e:
            raise AudioCaptureError(f"Cannot open sound file {file_path}: {e}") from e
        self._sample_rate = int(info.samplerate)
        self._channels = int(info.channels)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    def wait_finished(self, timeout: Optional[float] = None) -> bool:
        """Block until the file has been delivered completely or the source stops."""
        return self._finished.wait(timeout)

    def start(self, callback: Callable[[np.ndarray], None]) -> None:
        if self._running:
            return

        self._events.on(AudioEventType.AUDIO, callback)
        self._finished.clear()
        self._running = True
        self._thread = threading.Thread(
            target=self._stream_data, name="wav-audio-input", daemon=True
        )
        self._thread.start()
        logger.info(f"Streaming {self._file_path} at {self._sample_rate} Hz")

    def stop(self) -> None:
        self._running = False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None
        self._events.clear()

    def _stream_data(self) -> None:
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._running:
                    data = f.read(self._chunk_size, dtype="float32", always_2d=True)
                    if len(data) == 0:
                        if self._loop:
                            f.seek(0)
                            continue
                        break

                    block = data[:, 0]
                    if self._gain != 1.0:
                        block = np.clip(block * self._gain, -1.0, 1.0)

                    self._deliver(np.ascontiguousarray(block, dtype=np.float32))

                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(data) / self._sample_rate)
        except Exception as e:
            self._report_error(AudioCaptureError(f"Error streaming {self._file_path}: {e}"))
        finally:
            self._finished.set()
