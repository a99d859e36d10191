"""Shared test doubles and signal generators."""

import threading
from typing import Callable, List, Optional

import numpy as np

from guitar_tuner.core.interfaces import IAudioInput, IPitchAlgorithm, IPitchEstimator

SAMPLE_RATE = 44100


def sine(frequency: float, num_samples: int = 4096, amplitude: float = 0.5,
         sample_rate: int = SAMPLE_RATE, harmonics=()) -> np.ndarray:
    """A sine wave with optional (multiple, relative amplitude) harmonics."""
    t = np.arange(num_samples) / sample_rate
    signal = np.sin(2 * np.pi * frequency * t)
    for multiple, weight in harmonics:
        signal += weight * np.sin(2 * np.pi * frequency * multiple * t)
    signal *= amplitude / np.max(np.abs(signal))
    return signal.astype(np.float32)


class ScriptedAlgorithm(IPitchAlgorithm):
    """Returns queued frequencies and records the windows it was given."""

    def __init__(self, results=()):
        self.results: List[Optional[float]] = list(results)
        self.windows: List[np.ndarray] = []
        self.band = None

    def initialize(self, sample_rate, min_frequency, max_frequency):
        self.band = (sample_rate, min_frequency, max_frequency)

    def detect(self, window):
        self.windows.append(np.array(window))
        return self.results.pop(0) if self.results else None


class ScriptedEstimator(IPitchEstimator):
    """Treats every block as a frequency reading: block[0] in Hz, NaN for silence."""

    def __init__(self):
        self.initialized = False
        self.reset_count = 0

    def initialize(self):
        self.initialized = True

    def process(self, samples):
        value = float(samples[0])
        return None if np.isnan(value) else value

    def reset(self):
        self.reset_count += 1


class FakeAudioInput(IAudioInput):
    """Audio source driven by the test through push()."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self._callback: Optional[Callable[[np.ndarray], None]] = None
        self._error_callbacks = []
        self._running = False
        self._fail_with = fail_with
        self.stop_count = 0

    @property
    def sample_rate(self):
        return SAMPLE_RATE

    def start(self, callback):
        if self._fail_with is not None:
            raise self._fail_with
        self._callback = callback
        self._running = True

    def stop(self):
        self._running = False
        self._callback = None
        self.stop_count += 1

    def is_running(self):
        return self._running

    def on_error(self, callback):
        self._error_callbacks.append(callback)

    def push_frequency(self, frequency: Optional[float]) -> None:
        value = np.nan if frequency is None else frequency
        callback = self._callback
        if callback is not None:
            callback(np.array([value], dtype=np.float64))

    def report_error(self, error: Exception) -> None:
        for callback in self._error_callbacks:
            callback(error)


class FakeFactory:
    """Factory handing out one FakeAudioInput and one ScriptedEstimator per session."""

    def __init__(self, input_error: Optional[Exception] = None,
                 estimator_error: Optional[Exception] = None):
        self.input_error = input_error
        self.estimator_error = estimator_error
        self.inputs: List[FakeAudioInput] = []
        self.estimators: List[ScriptedEstimator] = []

    @property
    def audio_input(self) -> FakeAudioInput:
        return self.inputs[-1]

    def session_config(self):
        return {}

    def create_audio_input(self):
        audio_input = FakeAudioInput(fail_with=self.input_error)
        self.inputs.append(audio_input)
        return audio_input

    def create_pitch_estimator(self, sample_rate=None):
        if self.estimator_error is not None:
            raise self.estimator_error
        estimator = ScriptedEstimator()
        self.estimators.append(estimator)
        return estimator


class Player:
    """Feeds frequency readings to a FakeAudioInput from a background thread."""

    def __init__(self, audio_input: FakeAudioInput, frequencies, interval: float = 0.01,
                 delay: float = 0.05):
        self._audio_input = audio_input
        self._frequencies = list(frequencies)
        self._interval = interval
        self._delay = delay
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self):
        if self._stop.wait(self._delay):
            return
        for frequency in self._frequencies:
            self._audio_input.push_frequency(frequency)
            if self._stop.wait(self._interval):
                return

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._stop.set()
        self._thread.join(timeout=2)

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.stop()
