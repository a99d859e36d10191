"""Defines the core interfaces for the guitar tuner."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

import numpy as np


class IAudioInput(ABC):
    """Interface for audio sources.

    Implementations deliver mono float32 blocks normalized to [-1.0, 1.0]
    to the callback given to start(), and report asynchronous stream
    errors through on_error() listeners.
    """

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray], None]) -> None:
        """Start capturing audio."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @abstractmethod
    def on_error(self, callback: Callable[[Exception], None]) -> None:
        """Register a listener for stream errors."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass


class IPitchAlgorithm(ABC):
    """Interface for monophonic pitch detection algorithms."""

    @abstractmethod
    def initialize(self, sample_rate: int, min_frequency: float, max_frequency: float) -> None:
        """Configure the algorithm for a sample rate and search band."""
        pass

    @abstractmethod
    def detect(self, window: np.ndarray) -> Optional[float]:
        """Return the fundamental frequency of the window in Hz, or None."""
        pass


class IPitchEstimator(ABC):
    """Interface for the buffering, gating pitch estimator."""

    @abstractmethod
    def initialize(self) -> None:
        pass

    @abstractmethod
    def process(self, samples: np.ndarray) -> Optional[float]:
        """Feed a block of samples; return the current frequency estimate."""
        pass

    @abstractmethod
    def reset(self) -> None:
        pass
