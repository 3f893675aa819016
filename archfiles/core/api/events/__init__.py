"""Client lifecycle events."""
from .event_emitter import EventEmitter, LOGIN, LOGOUT, SESSION_REJECTED, SESSION_RESUMED

__all__ = [
    'EventEmitter',
    'LOGIN',
    'LOGOUT',
    'SESSION_REJECTED',
    'SESSION_RESUMED',
]
