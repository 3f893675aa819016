"""Interface between FileClient and wherever a login is persisted."""
from typing import Protocol, Optional, runtime_checkable
from .models import SessionData


@runtime_checkable
class SessionStorage(Protocol):
    """
    Holds at most one SessionData: the login FileClient should resume.

    FileClient saves after every login, loads in start(), and deletes on
    logout or when the server rejects a stored session. Storages never
    see credentials, only the session token and its timestamps.
    """

    def load(self) -> Optional[SessionData]:
        """Return the stored session, or None if nothing is stored."""
        ...

    def save(self, data: SessionData) -> None:
        """Replace the stored session with `data`."""
        ...

    def delete(self) -> None:
        """Forget the stored session; a no-op when there is none."""
        ...

    def exists(self) -> bool:
        ...

    def close(self) -> None:
        """Release handles. The stored session itself is kept."""
        ...
