"""
Session management module.

Provides persistent session storage so a login survives process restarts.
Only the session token and its timestamps are stored, never credentials.
"""
from .protocols import SessionStorage
from .models import SessionData
from .sqlite_session import SQLiteSession
from .memory_session import MemorySession

__all__ = [
    'SessionStorage',
    'SessionData',
    'SQLiteSession',
    'MemorySession',
]
