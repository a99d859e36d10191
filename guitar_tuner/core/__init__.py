"""Core components for the guitar tuner."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    IPitchAlgorithm,
    IPitchEstimator,
)

__all__ = ["IAudioInput", "IPitchAlgorithm", "IPitchEstimator"]
