"""
Async authentication service.

Handles login, logout and session checks against the file server.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .async_client import AsyncAPIClient
from ..exceptions import AuthenticationError
from ..files.models import ResponseMeta, UserInfo, parse_model
from ..logging import get_logger


@dataclass(frozen=True)
class AuthResult:
    """
    Authentication result.

    An immutable snapshot of an established session. A new login
    produces a new snapshot; existing ones are never modified.
    """
    username: str
    session_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now()) >= self.expires_at

    @property
    def remaining(self) -> timedelta:
        return max(self.expires_at - datetime.now(), timedelta(0))

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks
        return (
            f"AuthResult(username={self.username!r}, "
            f"created_at={self.created_at.isoformat()}, expires_at={self.expires_at.isoformat()})"
        )


class AsyncAuthService:
    """
    Asynchronous authentication service.

    Exchanges credentials for a session cookie and validates sessions.
    The password is only ever placed in the login request body.
    """

    def __init__(self, client: AsyncAPIClient):
        """
        Initialize auth service.

        Args:
            client: Async API client
        """
        self._client = client
        self._logger = get_logger('archfiles.auth')

    @property
    def client(self) -> AsyncAPIClient:
        return self._client

    def new_session(self, username: str, session_id: str, created_at: Optional[datetime] = None) -> AuthResult:
        """Build a session snapshot valid for the configured TTL."""
        created_at = created_at or datetime.now()
        return AuthResult(
            username=username,
            session_id=session_id,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=self._client.config.session_ttl)
        )

    async def login(self, username: str, password: str) -> AuthResult:
        """
        Login to the file server.

        Args:
            username: Account name
            password: Account password

        Returns:
            AuthResult with the new session

        Raises:
            ValueError: If username or password is empty
            AuthenticationError: If credentials are rejected or no session cookie is issued
            ArchFilesError: For network and server failures
        """
        if not username or not password:
            raise ValueError("Username and password are required")

        self._logger.debug(f"Logging in as {username}")
        response = await self._client.login(username, password)

        cookie_name = self._client.config.session_cookie_name
        session_id = response.cookies.get(cookie_name)
        if not session_id:
            raise AuthenticationError(
                f"Login succeeded but no '{cookie_name}' cookie was issued",
                response.status,
                ResponseMeta(status=response.status, headers=response.headers)
            )

        server_username = username
        try:
            body = json.loads(response.body) if response.body else {}
            if isinstance(body, dict) and body.get('username'):
                server_username = body['username']
        except ValueError:
            self._logger.debug("Login response body is not JSON")

        result = self.new_session(server_username, session_id)
        self._logger.info(f"Logged in as {result.username}")
        return result

    async def logout(self, session: AuthResult) -> None:
        """Invalidate a session on the server."""
        await self._client.logout(session.session_id)
        self._logger.info(f"Logged out {session.username}")

    async def whoami(self, session: AuthResult) -> UserInfo:
        """
        Ask the server who owns a session.

        Raises:
            AuthenticationError: If the server no longer accepts the session
        """
        data = await self._client.get_user(session.session_id)
        return parse_model(lambda body: UserInfo(username=body.get('username') or session.username), data)
