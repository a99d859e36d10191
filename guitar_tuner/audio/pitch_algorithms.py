"""Pitch detection algorithms used by the PitchEstimator."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

import numpy as np

from ..logger import get_logger
from ..core.errors import EstimatorNotInitializedError, EstimatorUnavailableError
from ..core.interfaces import IPitchAlgorithm

logger = get_logger(__name__)


def parabolic_interpolation(values: np.ndarray, index: int) -> float:
    """Refine the position of a peak at `index` using its two neighbours."""
    if index <= 0 or index >= len(values) - 1:
        return float(index)
    y0, y1, y2 = values[index - 1], values[index], values[index + 1]
    denom = y0 - 2.0 * y1 + y2
    if denom == 0:
        return float(index)
    return float(index + 0.5 * (y0 - y2) / denom)


class AutocorrelationPitchAlgorithm(IPitchAlgorithm):
    """Autocorrelation pitch detector with McLeod's normalized square difference.

    The autocorrelation is computed with an FFT and normalized per lag by the
    energy of the overlapping parts, so a perfectly periodic signal scores 1.0
    at its period regardless of lag. Among the peaks inside the search band the
    first one within `leniency` of the highest peak is taken as the period,
    which keeps the higher strings from being reported an octave low.
    """

    DEFAULT_LENIENCY: ClassVar[float] = 0.85
    DEFAULT_CLARITY: ClassVar[float] = 0.5  # Below this the window is not periodic enough

    def __init__(self, leniency: float = DEFAULT_LENIENCY, clarity: float = DEFAULT_CLARITY) -> None:
        if not 0.0 < leniency <= 1.0:
            raise ValueError("leniency must be in (0, 1]")
        if not 0.0 <= clarity <= 1.0:
            raise ValueError("clarity must be between 0.0 and 1.0")
        self._leniency = leniency
        self._clarity = clarity
        self._sample_rate: Optional[int] = None
        self._lag_min = 0
        self._lag_max = 0

    def initialize(self, sample_rate: int, min_frequency: float, max_frequency: float) -> None:
        if sample_rate <= 0:
            raise ValueError("Sample rate must be positive")
        if not 0 < min_frequency < max_frequency:
            raise ValueError("Frequency band must satisfy 0 < min_frequency < max_frequency")

        self._sample_rate = int(sample_rate)
        self._lag_min = max(1, int(sample_rate / max_frequency))
        self._lag_max = int(np.ceil(sample_rate / min_frequency))
        logger.debug(
            f"Autocorrelation detector: sample_rate={sample_rate}, "
            f"lags {self._lag_min}-{self._lag_max}, leniency={self._leniency}"
        )

    def detect(self, window: np.ndarray) -> Optional[float]:
        if self._sample_rate is None:
            raise EstimatorNotInitializedError()

        x = np.asarray(window, dtype=np.float64)
        x = x - np.mean(x)
        n = len(x)

        # Interpolation needs a neighbour on both sides of the peak
        lag_max = min(self._lag_max, n - 2)
        if lag_max <= self._lag_min + 2:
            return None

        # Autocorrelation via FFT for speed
        size = int(2 ** np.ceil(np.log2(2 * n)))
        spectrum = np.fft.rfft(x, n=size)
        acf = np.fft.irfft(spectrum * np.conj(spectrum), n=size)[:n]

        # m(k) = sum of x[j]^2 + x[j+k]^2 over the overlap
        squares = np.concatenate(([0.0], np.cumsum(x * x)))
        lags = np.arange(n)
        energy = squares[n - lags] + (squares[n] - squares[lags])
        if energy[0] <= 1e-12:
            return None
        nsdf = np.divide(2.0 * acf, energy, out=np.zeros(n), where=energy > 1e-12)

        segment = nsdf[self._lag_min : lag_max + 1]
        peaks = np.flatnonzero(
            (segment[1:-1] > segment[:-2]) & (segment[1:-1] >= segment[2:])
        ) + 1
        if peaks.size == 0:
            return None

        heights = segment[peaks]
        highest = float(heights.max())
        if highest < self._clarity:
            return None

        first = int(peaks[np.argmax(heights >= self._leniency * highest)])
        lag = parabolic_interpolation(nsdf, first + self._lag_min)
        if lag <= 0:
            return None

        return float(self._sample_rate / lag)


class AubioPitchAlgorithm(IPitchAlgorithm):
    """Pitch detection through aubio (yin, yinfft, ...)."""

    def __init__(self, method: str = "yin", tolerance: float = 0.8, min_confidence: float = 0.5) -> None:
        if not 0.0 <= tolerance <= 1.0:
            raise ValueError("Tolerance must be between 0.0 and 1.0")
        self._method = method
        self._tolerance = tolerance
        self._min_confidence = min_confidence
        self._aubio: Any = None
        self._pitch_detector: Any = None
        self._window_size = 0
        self._sample_rate = 0
        self._min_frequency = 0.0
        self._max_frequency = 0.0

    def initialize(self, sample_rate: int, min_frequency: float, max_frequency: float) -> None:
        try:
            import aubio
        except ImportError as e:
            raise EstimatorUnavailableError(
                f"aubio is required for the '{self._method}' pitch algorithm: {e}"
            ) from e

        self._aubio = aubio
        self._sample_rate = int(sample_rate)
        self._min_frequency = float(min_frequency)
        self._max_frequency = float(max_frequency)
        self._pitch_detector = None
        logger.info(f"aubio '{self._method}' pitch detector ready at {sample_rate} Hz")

    def _ensure_detector(self, window_size: int) -> None:
        """Create the aubio detector for the window size in use."""
        if self._pitch_detector is not None and window_size == self._window_size:
            return
        self._window_size = window_size
        self._pitch_detector = self._aubio.pitch(
            self._method, window_size, window_size, self._sample_rate
        )
        self._pitch_detector.set_unit("Hz")
        self._pitch_detector.set_tolerance(self._tolerance)

    def detect(self, window: np.ndarray) -> Optional[float]:
        if self._aubio is None:
            raise EstimatorNotInitializedError()

        self._ensure_detector(len(window))
        pitch = float(self._pitch_detector(np.asarray(window, dtype=np.float32))[0])
        confidence = float(self._pitch_detector.get_confidence())
        logger.debug(f"Pitch: {pitch:.2f} Hz, Confidence: {confidence:.4f}")

        # Skip if confidence is too low or pitch is out of range
        if (
            confidence < self._min_confidence
            or pitch < self._min_frequency
            or pitch > self._max_frequency
        ):
            return None
        return pitch
