"""
Session data models.

Contains the persisted form of a login session.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import json


@dataclass
class SessionData:
    """
    Persisted session data.

    Contains what is needed to resume a session without re-entering
    credentials. There is no password field.

    Attributes:
        username: Account the session belongs to
        session_id: Value of the server's session cookie
        server_url: Base URL the session was issued by
        created_at: Login timestamp
        expires_at: Time after which the server drops the session
        updated_at: Last update timestamp
    """
    username: str
    session_id: str
    server_url: str
    created_at: datetime = field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            'username': self.username,
            'session_id': self.session_id,
            'server_url': self.server_url,
            'created_at': self.created_at.isoformat(),
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionData':
        """
        Create from dictionary.

        Args:
            data: Dictionary with session data

        Returns:
            SessionData instance
        """
        return cls(
            username=data['username'],
            session_id=data['session_id'],
            server_url=data.get('server_url', ''),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now(),
            expires_at=datetime.fromisoformat(data['expires_at']) if data.get('expires_at') else None,
            updated_at=datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else datetime.now(),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> 'SessionData':
        return cls.from_dict(json.loads(json_str))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now()) >= self.expires_at

    def is_valid(self) -> bool:
        """
        Check if session data is usable.

        Returns:
            True if all required fields are present and it has not expired
        """
        return bool(
            self.username and
            self.session_id and
            not self.is_expired()
        )

    def update_timestamp(self) -> None:
        """Update the updated_at timestamp to now."""
        self.updated_at = datetime.now()

    def __repr__(self) -> str:
        return (
            f"SessionData(username={self.username!r}, server_url={self.server_url!r}, "
            f"expires_at={self.expires_at.isoformat() if self.expires_at else None})"
        )
