"""Event system for guitar tuner components."""

import threading
from enum import Enum, auto
from typing import Any, Callable, Dict, List

from ..logger import get_logger

logger = get_logger(__name__)


class AudioEventType(Enum):
    """Event types emitted by audio sources."""

    AUDIO = auto()
    ERROR = auto()


class EventEmitter:
    """Synchronous event emitter shared between a capture thread and its owner.

    Listeners run on the emitting thread. Registration may happen on any
    thread; emit() works on a snapshot, so a listener added or removed
    during an emit takes effect from the next one.
    """

    def __init__(self):
        self._listeners: Dict[Any, List[Callable]] = {}
        self._lock = threading.Lock()

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs; registering
                the same callback twice has no effect
        """
        with self._lock:
            listeners = self._listeners.setdefault(event_type, [])
            if callback in listeners:
                return
            listeners.append(callback)
        logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> bool:
        """Remove a callback; returns False when it was not registered."""
        with self._lock:
            listeners = self._listeners.get(event_type, [])
            if callback not in listeners:
                return False
            listeners.remove(callback)
        return True

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Call every listener of an event type.

        A failing listener is logged and the remaining listeners still run,
        so one bad subscriber cannot kill the capture thread.
        """
        with self._lock:
            listeners = list(self._listeners.get(event_type, ()))

        for callback in listeners:
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def listener_count(self, event_type: Any) -> int:
        with self._lock:
            return len(self._listeners.get(event_type, ()))

    def clear(self) -> None:
        """Remove all event listeners."""
        with self._lock:
            self._listeners = {}
        logger.debug("Cleared all event listeners")
