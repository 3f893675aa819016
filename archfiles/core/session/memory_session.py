"""Process-local session storage."""
from typing import Optional

from .protocols import SessionStorage
from .models import SessionData


class MemorySession(SessionStorage):
    """
    Keeps the current login in this object only.

    FileClient uses it when no session name is given, so a session
    lives exactly as long as the client. Saving stamps updated_at,
    like SQLiteSession does.
    """

    def __init__(self):
        self._data: Optional[SessionData] = None

    def load(self) -> Optional[SessionData]:
        return self._data

    def save(self, data: SessionData) -> None:
        data.update_timestamp()
        self._data = data

    def delete(self) -> None:
        self._data = None

    def exists(self) -> bool:
        return self._data is not None

    def close(self) -> None:
        # Nothing to release; the session survives close() like a file would
        return None

    def __enter__(self) -> 'MemorySession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        user = self._data.username if self._data else None
        return f"MemorySession(username={user!r})"
