import time
from typing import Callable, Optional

from ..logger import get_logger

logger = get_logger(__name__)


class StabilityTracker:
    """
    Tracks how long the same string has been heard without interruption.

    A reading for a different string, or no string at all, restarts the clock.
    """

    def __init__(
        self,
        stable_duration: float = 0.4,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._stable_duration = stable_duration
        self._clock = clock
        self._string_number: Optional[int] = None
        self._since: Optional[float] = None

    @property
    def string_number(self) -> Optional[int]:
        return self._string_number

    @property
    def since(self) -> Optional[float]:
        return self._since

    @property
    def stable_duration(self) -> float:
        return self._stable_duration

    def update(self, string_number: Optional[int]) -> None:
        """Record the string matched by the newest reading."""
        if string_number is not None and string_number == self._string_number:
            return

        if string_number is None:
            self._string_number = None
            self._since = None
            return

        logger.debug(f"Tracking string {string_number} (was {self._string_number})")
        self._string_number = string_number
        self._since = self._clock()

    def reset(self) -> None:
        self._string_number = None
        self._since = None

    def held_for(self) -> float:
        """Seconds the current string has been held, 0.0 when none is held."""
        if self._since is None:
            return 0.0
        return self._clock() - self._since

    def is_stable(self) -> bool:
        return self._string_number is not None and self.held_for() >= self._stable_duration
