"""
SQLite session storage implementation.

Provides persistent session storage using a SQLite database file.
"""
import sqlite3
import threading
from pathlib import Path
from datetime import datetime
from typing import Optional, Union
from contextlib import contextmanager

from .protocols import SessionStorage
from .models import SessionData


class SQLiteSession(SessionStorage):
    """
    SQLite-based session storage.

    Stores session data in a local SQLite database file.
    Thread-safe: a single connection guarded by a lock.

    Example:
        >>> session = SQLiteSession("work")
        >>> # Creates work.session file
        >>>
        >>> session.save(session_data)
        >>> loaded = session.load()
    """

    EXTENSION = '.session'
    SCHEMA_VERSION = 1

    def __init__(
        self,
        session_name: Union[str, Path],
        base_path: Optional[Path] = None
    ):
        """
        Initialize SQLite session storage.

        Args:
            session_name: Session name (without extension) or full path
            base_path: Optional base directory for session files
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        if isinstance(session_name, Path) or session_name.endswith(self.EXTENSION):
            self._path = Path(session_name)
        elif base_path:
            self._path = Path(base_path) / f"{session_name}{self.EXTENSION}"
        else:
            self._path = Path(f"{session_name}{self.EXTENSION}")

        self._path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    @property
    def path(self) -> Path:
        """Get session file path."""
        return self._path

    @contextmanager
    def _get_connection(self):
        """Get thread-safe database connection."""
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(
                    str(self._path),
                    check_same_thread=False
                )
                self._conn.row_factory = sqlite3.Row
            yield self._conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS version (
                    version INTEGER PRIMARY KEY
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS session (
                    id INTEGER PRIMARY KEY,
                    username TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    server_url TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    expires_at TEXT,
                    updated_at TEXT NOT NULL
                )
            ''')

            cursor.execute('SELECT version FROM version LIMIT 1')
            if cursor.fetchone() is None:
                cursor.execute(
                    'INSERT INTO version (version) VALUES (?)',
                    (self.SCHEMA_VERSION,)
                )

            conn.commit()

    def load(self) -> Optional[SessionData]:
        """
        Load session data from database.

        Returns:
            SessionData if exists, None otherwise
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                SELECT username, session_id, server_url,
                       created_at, expires_at, updated_at
                FROM session
                LIMIT 1
            ''')

            row = cursor.fetchone()
            if row is None:
                return None

            return SessionData(
                username=row['username'],
                session_id=row['session_id'],
                server_url=row['server_url'],
                created_at=datetime.fromisoformat(row['created_at']),
                expires_at=datetime.fromisoformat(row['expires_at']) if row['expires_at'] else None,
                updated_at=datetime.fromisoformat(row['updated_at']),
            )

    def save(self, data: SessionData) -> None:
        """
        Save session data, replacing any previous session.

        Args:
            data: Session data to save
        """
        data.update_timestamp()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM session')
            cursor.execute('''
                INSERT INTO session (
                    username, session_id, server_url,
                    created_at, expires_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
            ''', (
                data.username,
                data.session_id,
                data.server_url,
                data.created_at.isoformat(),
                data.expires_at.isoformat() if data.expires_at else None,
                data.updated_at.isoformat(),
            ))
            conn.commit()

    def delete(self) -> None:
        """Delete session data from database."""
        with self._get_connection() as conn:
            conn.execute('DELETE FROM session')
            conn.commit()

    def exists(self) -> bool:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT COUNT(*) FROM session')
            return cursor.fetchone()[0] > 0

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def delete_file(self) -> None:
        """Delete the session file completely."""
        self.close()
        if self._path.exists():
            self._path.unlink()

    def __enter__(self) -> 'SQLiteSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"SQLiteSession('{self._path}')"
