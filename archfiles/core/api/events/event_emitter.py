"""Event emitter for session lifecycle notifications."""
from typing import Callable, Dict, List, Optional

from ...logging import get_logger

LOGIN = 'login'
LOGOUT = 'logout'
SESSION_RESUMED = 'session_resumed'
SESSION_REJECTED = 'session_rejected'


class EventEmitter:
    """Event emitter using Observer Pattern."""

    def __init__(self, logger_name: str = 'archfiles.events'):
        """Initializes event emitter."""
        self._events: Dict[str, List[Callable]] = {}
        self._logger = get_logger(logger_name)

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers an event handler."""
        self._events.setdefault(event, []).append(callback)
        return self

    def once(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers a handler that is removed after its first call."""
        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            callback(*args, **kwargs)
        return self.on(event, wrapper)

    def emit(self, event: str, *args, **kwargs) -> int:
        """Emits an event. Returns the number of handlers called."""
        handlers = list(self._events.get(event, ()))
        self._logger.debug(f"Emitting '{event}' to {len(handlers)} handler(s)")
        for callback in handlers:
            callback(*args, **kwargs)
        return len(handlers)

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Removes an event handler, or all handlers of an event."""
        if event not in self._events:
            return self

        if callback is None:
            del self._events[event]
        else:
            self._events[event] = [cb for cb in self._events[event] if cb != callback]

        return self

    def listener_count(self, event: str) -> int:
        return len(self._events.get(event, ()))
