"""Transport-facing tuner operations returning plain dictionaries."""

from typing import Any, Dict, Optional

from ..logger import get_logger
from ..core.errors import (
    CaptureToolMissingError,
    MicrophonePermissionError,
    NoActiveSessionError,
    SessionActiveError,
    SessionStoppedError,
    TunerError,
    UnknownTuningError,
)
from ..session import TuningSession
from ..tunings import DEFAULT_TUNING_ID, list_tunings

logger = get_logger(__name__)

ALL_TUNED_MESSAGE = "All 6 strings are in tune! Session ended."
PORTAUDIO_HINT = (
    "Install PortAudio: 'brew install portaudio' on macOS, "
    "'sudo apt install libportaudio2' on Debian/Ubuntu."
)
PERMISSION_HINT = (
    "Grant microphone permission in System Settings > Privacy & Security > Microphone"
)


class TunerService:
    """The four tuner operations as structured results.

    Failures of the session are converted into ``success: False`` or
    ``error`` entries so a transport can serialize every outcome. The
    service also owns the completion policy: once all strings have been
    confirmed in tune, get_pitch() ends the session itself.
    """

    def __init__(self, session: Optional[TuningSession] = None) -> None:
        self._session = session if session is not None else TuningSession()

    @property
    def session(self) -> TuningSession:
        return self._session

    def list_tunings(self) -> Dict[str, Any]:
        return {
            "tunings": [tuning.to_dict() for tuning in list_tunings()],
            "default": DEFAULT_TUNING_ID,
        }

    def start_tuning(self, tuning_id: str = DEFAULT_TUNING_ID) -> Dict[str, Any]:
        """Start a session for a tuning.

        Args:
            tuning_id: Catalog id of the tuning

        Returns:
            ``{"success": True, "message", "tuning"}`` or
            ``{"success": False, "message", "error"}``
        """
        try:
            tuning = self._session.start(tuning_id)
        except SessionActiveError as e:
            return self._failure(
                "A tuning session is already active.",
                f"Stop the current session first. Currently tuning to: {e.tuning_name}",
            )
        except UnknownTuningError as e:
            return self._failure(
                f"Unknown tuning: {e.tuning_id}",
                f"Available tunings: {', '.join(e.available)}",
            )
        except CaptureToolMissingError as e:
            logger.error(f"Audio capture library missing: {e}")
            return self._failure("Audio capture library is not installed", PORTAUDIO_HINT)
        except MicrophonePermissionError as e:
            logger.error(f"Microphone access denied: {e}")
            return self._failure("Microphone access denied", PERMISSION_HINT)
        except TunerError as e:
            return self._failure("Failed to start tuning session", str(e))
        except Exception as e:
            logger.error(f"Unexpected error starting tuning session: {e}", exc_info=True)
            return self._failure("Failed to start tuning session", str(e))

        return {
            "success": True,
            "message": f"Started tuning session for {tuning.name}",
            "tuning": tuning.to_dict(),
        }

    def get_pitch(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Wait for a stable reading and return it with tuning guidance.

        Args:
            timeout: Seconds to wait, or None for the session default

        Returns:
            The reading as a dict, or ``{"error": ...}`` without a session
        """
        try:
            result = self._session.wait_for_pitch(timeout)
        except (NoActiveSessionError, SessionStoppedError) as e:
            return {"error": str(e)}

        data = result.to_dict()
        if result.progress is not None and result.progress.all_in_tune:
            try:
                self._session.stop()
            except NoActiveSessionError:
                logger.debug("Session already stopped after final string")
            data["message"] = ALL_TUNED_MESSAGE
            logger.info(ALL_TUNED_MESSAGE)
        return data

    def stop_tuning(self) -> Dict[str, Any]:
        try:
            tuning = self._session.stop()
        except NoActiveSessionError:
            return self._failure(
                "No active tuning session", "Call start_tuning first to begin a session."
            )
        return {
            "success": True,
            "message": f"Stopped tuning session for {tuning.name}. Microphone released.",
        }

    def shutdown(self) -> None:
        """Release the microphone if a session is still running."""
        if not self._session.is_active:
            return
        try:
            self._session.stop()
        except NoActiveSessionError:
            logger.debug("Session ended before shutdown")
            return
        logger.info("Tuner service shut down")

    @staticmethod
    def _failure(message: str, error: str) -> Dict[str, Any]:
        return {"success": False, "message": message, "error": error}
