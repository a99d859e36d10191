"""Exceptions raised by the guitar tuner core."""

from typing import Iterable


class TunerError(Exception):
    """Base class for all guitar tuner errors."""


# Configuration errors


class ConfigurationError(TunerError, ValueError):
    """Raised when the stored configuration names a component that cannot be built."""


class UnknownTuningError(TunerError, ValueError):
    """Raised when a tuning id is not in the catalog."""

    def __init__(self, tuning_id: str, available: Iterable[str]):
        self.tuning_id = tuning_id
        self.available = list(available)
        super().__init__(
            f"Unknown tuning: {tuning_id}. Available tunings: {', '.join(self.available)}"
        )


# State errors


class SessionActiveError(TunerError):
    """Raised when starting a session while another one is active."""

    def __init__(self, tuning_name: str):
        self.tuning_name = tuning_name
        super().__init__(f"A tuning session is already active (tuning: {tuning_name})")


class NoActiveSessionError(TunerError):
    """Raised when an operation needs an active session and there is none."""

    def __init__(self, message: str = "No active tuning session"):
        super().__init__(message)


class SessionStoppedError(TunerError):
    """Raised to a waiter when the session is stopped while it waits."""

    def __init__(self, message: str = "Tuning session was stopped."):
        super().__init__(message)


# Resource acquisition errors


class AudioCaptureError(TunerError):
    """Raised when the audio source cannot be opened or started."""


class CaptureToolMissingError(AudioCaptureError):
    """Raised when the native audio capture library is not available."""


class MicrophonePermissionError(AudioCaptureError):
    """Raised when the operating system denies access to the microphone."""


class EstimatorUnavailableError(TunerError):
    """Raised when the configured pitch detection algorithm cannot be loaded."""


# Runtime contract errors


class EstimatorNotInitializedError(TunerError, RuntimeError):
    """Raised when the pitch estimator is used before initialize()."""

    def __init__(self):
        super().__init__("PitchEstimator not initialized. Call initialize() first.")
