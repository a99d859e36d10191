"""Rolling-window pitch estimation with an RMS noise gate."""

from __future__ import annotations

from typing import ClassVar, Optional

import numpy as np

from ..logger import get_logger
from ..core.errors import EstimatorNotInitializedError
from ..core.interfaces import IPitchAlgorithm, IPitchEstimator
from ..note_matcher import NoteMatcher
from ..note_utils import get_note_name

logger = get_logger(__name__)


class PitchEstimator(IPitchEstimator):
    """Turns a stream of sample blocks into a periodic frequency estimate.

    Samples accumulate until a full analysis window is available. Each
    analysis keeps the most recent half window, so successive windows overlap
    by 50%. Between analyses process() keeps returning the last estimate.
    """

    # Low E has a period of ~538 samples at 44.1 kHz; the detector needs several
    DEFAULT_WINDOW_SIZE: ClassVar[int] = 4096
    DEFAULT_RMS_THRESHOLD: ClassVar[float] = 0.01
    DEFAULT_SAMPLE_RATE: ClassVar[int] = 44100

    # Search band handed to the detection algorithm
    DEFAULT_MIN_FREQUENCY: ClassVar[float] = 70.0
    DEFAULT_MAX_FREQUENCY: ClassVar[float] = 500.0

    def __init__(
        self,
        algorithm: IPitchAlgorithm,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        window_size: int = DEFAULT_WINDOW_SIZE,
        rms_threshold: float = DEFAULT_RMS_THRESHOLD,
        min_frequency: float = DEFAULT_MIN_FREQUENCY,
        max_frequency: float = DEFAULT_MAX_FREQUENCY,
    ) -> None:
        """Initialize the PitchEstimator.

        Args:
            algorithm: Pitch detection algorithm run on each analysis window
            sample_rate: Audio sample rate in Hz
            window_size: Number of samples per analysis window
            rms_threshold: Windows with a lower RMS are treated as silence
            min_frequency: Lower edge of the detector search band in Hz
            max_frequency: Upper edge of the detector search band in Hz
        """
        if window_size < 2:
            raise ValueError("window_size must be at least 2")
        if rms_threshold < 0:
            raise ValueError("rms_threshold must not be negative")

        self._algorithm = algorithm
        self._sample_rate = int(sample_rate)
        self._window_size = int(window_size)
        self._overlap = self._window_size // 2
        self._rms_threshold = float(rms_threshold)
        self._min_frequency = float(min_frequency)
        self._max_frequency = float(max_frequency)

        self._buffer = np.zeros(0, dtype=np.float32)
        self._last_frequency: Optional[float] = None
        self._initialized = False

    def initialize(self) -> None:
        """Configure the detection algorithm; required before process()."""
        self._algorithm.initialize(self._sample_rate, self._min_frequency, self._max_frequency)
        self._initialized = True
        logger.info(
            f"Pitch estimator initialized: sample_rate={self._sample_rate}Hz, "
            f"window={self._window_size}, band={self._min_frequency:.0f}-{self._max_frequency:.0f}Hz"
        )

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def last_frequency(self) -> Optional[float]:
        return self._last_frequency

    @property
    def buffered_samples(self) -> int:
        return len(self._buffer)

    @property
    def window_size(self) -> int:
        return self._window_size

    def process(self, samples: np.ndarray) -> Optional[float]:
        """Append a block of samples and return the current frequency estimate.

        Args:
            samples: Mono samples normalized to [-1.0, 1.0]

        Returns:
            Frequency in Hz, or None when nothing usable has been heard

        Raises:
            EstimatorNotInitializedError: If initialize() has not been called
        """
        if not self._initialized:
            raise EstimatorNotInitializedError()

        block = np.asarray(samples, dtype=np.float32).ravel()
        self._buffer = np.concatenate((self._buffer, block))

        if len(self._buffer) < self._window_size:
            return self._last_frequency

        window = self._buffer[-self._window_size :]
        self._buffer = self._buffer[-self._overlap :] if self._overlap else self._buffer[:0]

        rms = float(np.sqrt(np.mean(window.astype(np.float64) ** 2)))
        if rms < self._rms_threshold:
            if self._last_frequency is not None:
                logger.debug(f"Signal dropped below gate (RMS: {rms:.4f}), clearing pitch")
            self._last_frequency = None
            return None

        frequency = self._algorithm.detect(window)

        if (
            frequency is not None
            and NoteMatcher.GUITAR_FREQ_MIN <= frequency <= NoteMatcher.GUITAR_FREQ_MAX
        ):
            self._last_frequency = frequency
            logger.debug(f"Pitch {frequency:.2f}Hz ({get_note_name(frequency)}), RMS: {rms:.4f}")
            return frequency

        # Misfire on an audible window: hold the previous estimate
        logger.debug(f"Detector misfire ({frequency}), holding {self._last_frequency}")
        return self._last_frequency

    def reset(self) -> None:
        """Forget buffered samples and the last estimate."""
        self._buffer = np.zeros(0, dtype=np.float32)
        self._last_frequency = None
