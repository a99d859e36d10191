"""Tuning session: audio capture, stability tracking and per-string progress."""

from __future__ import annotations

import dataclasses
import threading
import time
from typing import Any, ClassVar, Optional

import numpy as np

from .logger import get_logger
from .core.errors import (
    NoActiveSessionError,
    SessionActiveError,
    SessionStoppedError,
    UnknownTuningError,
)
from .core.interfaces import IAudioInput, IPitchEstimator
from .detection.stability_tracker import StabilityTracker
from .note_matcher import NoteMatcher
from .note_types import PitchResult, SessionState, TuningPreset, TuningProgress
from .tunings import DEFAULT_TUNING_ID, get_tuning_by_id, get_tuning_ids

logger = get_logger(__name__)


class TuningSession:
    """One tuning session at a time over an audio source and a pitch estimator.

    The session is idle until start() and returns to idle on stop() or when
    setup fails. Audio blocks arrive on the audio source's thread; every
    mutation of session state happens under one condition lock, and
    wait_for_pitch() sleeps on that condition between checks.

    The factory must provide create_audio_input() and
    create_pitch_estimator(sample_rate=...); ComponentFactory is used when
    none is given.
    """

    STABLE_DURATION: ClassVar[float] = 0.4  # seconds a string must be held
    POLL_INTERVAL: ClassVar[float] = 0.05
    DEFAULT_TIMEOUT: ClassVar[float] = 30.0

    def __init__(
        self,
        factory: Any = None,
        stable_duration: Optional[float] = None,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if factory is None:
            from .core.factory import ComponentFactory

            factory = ComponentFactory()
        self._factory = factory

        session_config = factory.session_config() if hasattr(factory, "session_config") else {}
        self._stable_duration = (
            stable_duration
            if stable_duration is not None
            else session_config.get("stable_duration_ms", self.STABLE_DURATION * 1000) / 1000.0
        )
        self._poll_interval = (
            poll_interval
            if poll_interval is not None
            else session_config.get("poll_interval_ms", self.POLL_INTERVAL * 1000) / 1000.0
        )
        self._default_timeout = (
            timeout
            if timeout is not None
            else session_config.get("timeout_ms", self.DEFAULT_TIMEOUT * 1000) / 1000.0
        )

        self._cond = threading.Condition(threading.RLock())
        self._state: Optional[SessionState] = None
        self._tuning: Optional[TuningPreset] = None
        self._audio_input: Optional[IAudioInput] = None
        self._estimator: Optional[IPitchEstimator] = None
        self._last_result: Optional[PitchResult] = None
        self._tracker = StabilityTracker(stable_duration=self._stable_duration)
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self._state is not None

    @property
    def current_tuning(self) -> Optional[TuningPreset]:
        with self._cond:
            return self._state.tuning if self._state else None

    @property
    def last_result(self) -> Optional[PitchResult]:
        with self._cond:
            return self._last_result

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    def progress(self) -> Optional[TuningProgress]:
        with self._cond:
            if self._state is None:
                return None
            return TuningProgress.from_tuned(self._state.tuned_strings)

    def start(self, tuning_id: str = DEFAULT_TUNING_ID) -> TuningPreset:
        """Start capturing and tracking against a tuning.

        Args:
            tuning_id: Catalog id of the tuning

        Returns:
            The tuning preset now in use

        Raises:
            SessionActiveError: If a session is already running
            UnknownTuningError: If the id is not in the catalog
            AudioCaptureError: If the audio source cannot be started
            EstimatorUnavailableError: If the pitch algorithm cannot be loaded
        """
        with self._cond:
            if self._state is not None:
                raise SessionActiveError(self._state.tuning.name)

            tuning = get_tuning_by_id(tuning_id)
            if tuning is None:
                raise UnknownTuningError(tuning_id, get_tuning_ids())

            audio_input: Optional[IAudioInput] = None
            estimator: Optional[IPitchEstimator] = None
            failure: Optional[Exception] = None
            try:
                audio_input = self._factory.create_audio_input()
                estimator = self._factory.create_pitch_estimator(
                    sample_rate=audio_input.sample_rate
                )
                estimator.initialize()

                self._audio_input = audio_input
                self._estimator = estimator
                self._tuning = tuning
                self._last_result = None
                self._tracker.reset()

                audio_input.on_error(self._handle_audio_error)
                audio_input.start(self._handle_audio)
            except Exception as e:
                logger.error(f"Failed to start tuning session: {e}")
                self._clear()
                failure = e
            else:
                self._state = SessionState(tuning=tuning)
                self._generation += 1

        if failure is not None:
            # Released outside the lock: stopping a source may join its thread
            self._release(audio_input, estimator)
            raise failure

        logger.info(f"Started tuning session for {tuning.name}")
        return tuning

    def stop(self) -> TuningPreset:
        """Stop the session and release the audio source.

        Returns:
            The tuning that was active

        Raises:
            NoActiveSessionError: If no session is running
        """
        with self._cond:
            if self._state is None:
                raise NoActiveSessionError()

            tuning = self._state.tuning
            audio_input, estimator = self._audio_input, self._estimator
            self._state = None
            self._clear()
            self._cond.notify_all()

        # Outside the lock: the audio thread may be waiting on it
        self._release(audio_input, estimator)
        logger.info(f"Stopped tuning session for {tuning.name}")
        return tuning

    def wait_for_pitch(self, timeout: Optional[float] = None) -> PitchResult:
        """Block until one string has been held steadily, or until timeout.

        Only readings that arrive after the call count towards stability.

        Args:
            timeout: Upper bound in seconds, the configured default when None

        Returns:
            The stable PitchResult with progress attached, or the timeout result

        Raises:
            NoActiveSessionError: If no session is running
            SessionStoppedError: If the session is stopped while waiting
        """
        if timeout is None:
            timeout = self._default_timeout

        with self._cond:
            if self._state is None:
                raise NoActiveSessionError("No active tuning session. Call start_tuning first.")

            generation = self._generation
            deadline = time.monotonic() + timeout
            self._tracker.reset()

            while True:
                if self._state is None or self._generation != generation:
                    raise SessionStoppedError()

                stable_string = self._tracker.string_number
                if (
                    self._tracker.is_stable()
                    and self._last_result is not None
                    and self._last_result.closest_string == stable_string
                ):
                    return self._commit(self._last_result)

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.info(f"No stable pitch within {timeout:.1f}s")
                    return NoteMatcher.timeout_result()

                self._cond.wait(min(self._poll_interval, remaining))

    def _commit(self, result: PitchResult) -> PitchResult:
        """Record a stable reading in the session's progress."""
        assert self._state is not None
        result = dataclasses.replace(result)
        if result.in_tune and result.closest_string is not None:
            self._state.tuned_strings.add(result.closest_string)
        result.progress = TuningProgress.from_tuned(self._state.tuned_strings)
        logger.info(
            f"Stable reading: string {result.closest_string} ({result.note_name}) "
            f"{result.cents_deviation:+.1f} cents, {result.progress.tuned_count}/6 tuned"
        )
        return result

    def _handle_audio(self, samples: np.ndarray) -> None:
        with self._cond:
            estimator, tuning = self._estimator, self._tuning
            if estimator is None or tuning is None:
                return

            frequency = estimator.process(samples)
            result = NoteMatcher.build_pitch_result(frequency, tuning)
            self._last_result = result
            self._tracker.update(result.closest_string)
            self._cond.notify_all()

    def _handle_audio_error(self, error: Exception) -> None:
        # Stream errors do not end the session; the caller decides whether to stop
        logger.error(f"Audio source error: {error}")

    def _clear(self) -> None:
        self._audio_input = None
        self._estimator = None
        self._tuning = None
        self._last_result = None
        self._tracker.reset()

    @staticmethod
    def _release(
        audio_input: Optional[IAudioInput], estimator: Optional[IPitchEstimator]
    ) -> None:
        if audio_input is not None:
            try:
                audio_input.stop()
            except Exception as e:
                logger.error(f"Error stopping audio input: {e}", exc_info=True)
        if estimator is not None:
            estimator.reset()
