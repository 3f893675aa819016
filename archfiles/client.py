"""
FileClient - High-level async client for an Arch file server.

Example:
    >>> async with FileClient(username="alice", password="secret") as client:
    ...     result = await client.fetch("/reports/q3.pdf")
    ...     print(result.status, len(result.data))
"""
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .core.api import (
    APIConfig,
    AsyncAPIClient,
    AsyncAuthService,
    AuthResult,
    HTTPTransport,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
)
from .core.api.events import EventEmitter, LOGIN, LOGOUT, SESSION_REJECTED, SESSION_RESUMED
from .core.completion import run_with_completion
from .core.exceptions import ArchFilesError, AuthenticationError
from .core.files import DirectoryListing, FetchResult, FileInfo, FileService, ResponseMeta, UserInfo, normalize_path
from .core.logging import get_logger
from .core.session import MemorySession, SessionData, SessionStorage, SQLiteSession

LoginCompletion = Callable[[bool, Optional[ArchFilesError]], None]
FetchCompletion = Callable[[Optional[bytes], Optional[ResponseMeta], Optional[ArchFilesError]], None]


class FileClient:
    """
    High-level async client with login and file access.

    Supports two modes:

    1. Session mode:
        >>> client = FileClient("work")
        >>> await client.start("alice", "secret")  # resumes work.session when possible

    2. Direct credentials mode (session kept in memory):
        >>> async with FileClient(username="alice", password="secret") as client:
        ...     listing = await client.list_directory("/")

    Every file operation requires a successful login first. The current
    session is an immutable AuthResult snapshot: login swaps it, readers
    take it once and never see a half-updated session.
    """

    _default: Optional['FileClient'] = None

    def __init__(
        self,
        session: Optional[Union[str, SessionStorage]] = None,
        *,
        config: Optional[APIConfig] = None,
        base_path: Optional[Path] = None,
        transport: Optional[HTTPTransport] = None,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        """
        Initialize the client.

        Args:
            session: Session name (creates a .session file) or a SessionStorage;
                None keeps the session in memory
            config: Optional API configuration
            base_path: Base path for session files
            transport: Optional HTTP transport (aiohttp by default)
            username: Optional username used by start() and 'async with'
            password: Optional password used by start() and 'async with'
        """
        self._config = config or APIConfig.default()
        self._logger = get_logger('archfiles.client')

        if session is None:
            self._session: SessionStorage = MemorySession()
        elif isinstance(session, str):
            self._session = SQLiteSession(session, base_path)
        else:
            self._session = session

        self._username = username
        self._password = password

        self._api = AsyncAPIClient(self._config, transport)
        self._auth = AsyncAuthService(self._api)
        self._files = FileService(self._api)
        self._events = EventEmitter('archfiles.client')

        self._auth_result: Optional[AuthResult] = None
        self._login_lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    # =========================================================================
    # Configuration helpers
    # =========================================================================

    @staticmethod
    def create_config(
        base_url: Optional[str] = None,
        proxy: Optional[str] = None,
        proxy_user: Optional[str] = None,
        proxy_pass: Optional[str] = None,
        timeout: float = 300,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None
    ) -> APIConfig:
        """
        Create API configuration with common options.

        Args:
            base_url: Server URL (e.g., "https://files.example.com")
            proxy: Proxy URL (e.g., "http://proxy:8080")
            proxy_user: Proxy username
            proxy_pass: Proxy password
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            user_agent: Custom user agent string

        Returns:
            APIConfig instance
        """
        proxy_config = None
        if proxy:
            proxy_config = ProxyConfig(
                url=proxy,
                username=proxy_user,
                password=proxy_pass
            )

        options: Dict[str, Any] = {}
        if base_url:
            options['base_url'] = base_url
        if user_agent:
            options['user_agent'] = user_agent

        return APIConfig(
            proxy=proxy_config,
            timeout=TimeoutConfig(total=timeout),
            ssl=SSLConfig(verify=verify_ssl, check_hostname=verify_ssl),
            **options
        )

    @classmethod
    def default(cls) -> 'FileClient':
        """
        Shared client configured from ARCHFILES_* environment variables.

        The same instance is returned on every call, and it can be used
        from successive event loops (e.g. repeated asyncio.run calls).
        """
        if cls._default is None:
            cls._default = cls(config=APIConfig.from_env())
        return cls._default

    @property
    def config(self) -> APIConfig:
        return self._config

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, callback: Callable) -> 'FileClient':
        """Register a handler for 'login', 'logout', 'session_resumed' or 'session_rejected'."""
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'FileClient':
        self._events.off(event, callback)
        return self

    # =========================================================================
    # Session management
    # =========================================================================

    @property
    def current_session(self) -> Optional[AuthResult]:
        """Current session snapshot, or None when logged out."""
        return self._auth_result

    @property
    def is_logged_in(self) -> bool:
        session = self._auth_result
        return session is not None and not session.is_expired()

    @property
    def username(self) -> Optional[str]:
        session = self._auth_result
        return session.username if session else None

    @property
    def session_file(self) -> Optional[Path]:
        """Get session file path if using SQLite session."""
        if isinstance(self._session, SQLiteSession):
            return self._session.path
        return None

    def get_session(self) -> Optional[SessionData]:
        """Get stored session data."""
        return self._session.load()

    async def start(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None
    ) -> 'FileClient':
        """
        Resume the stored session or log in.

        A stored session is resumed when it has not expired, was issued by
        the configured server and is still accepted by it. Otherwise the
        credentials are used for a fresh login.

        Args:
            username: Optional username (overrides the constructor value)
            password: Optional password (overrides the constructor value)

        Returns:
            Self for chaining

        Raises:
            AuthenticationError: If no session can be resumed and no
                credentials are available, or the login is rejected
        """
        if username:
            self._username = username
        if password:
            self._password = password

        session_data = self._session.load() if self._session.exists() else None
        if session_data and session_data.is_valid() and session_data.server_url == self._config.base_url:
            try:
                await self._resume_session(session_data)
                return self
            except AuthenticationError as e:
                self._logger.warning(f"Stored session for {session_data.username} rejected: {e}")

        if not self._username or not self._password:
            raise AuthenticationError("No session to resume; username and password are required")

        await self.login(self._username, self._password)
        return self

    async def _resume_session(self, session_data: SessionData) -> None:
        """Verify a stored session with the server and adopt it."""
        snapshot = self._auth.new_session(
            session_data.username,
            session_data.session_id,
            session_data.created_at
        )
        if session_data.expires_at:
            snapshot = replace(snapshot, expires_at=session_data.expires_at)

        try:
            await self._auth.whoami(snapshot)
        except AuthenticationError:
            self._session.delete()
            raise

        self._auth_result = snapshot
        self._session.save(session_data)
        self._logger.info(f"Session resumed for {snapshot.username}")
        self._events.emit(SESSION_RESUMED, snapshot)

    def _store(self, snapshot: AuthResult) -> None:
        self._session.save(SessionData(
            username=snapshot.username,
            session_id=snapshot.session_id,
            server_url=self._config.base_url,
            created_at=snapshot.created_at,
            expires_at=snapshot.expires_at
        ))

    def _session_lock(self) -> asyncio.Lock:
        """Lock serializing login/logout, one per running event loop."""
        loop = asyncio.get_running_loop()
        if self._login_lock is None or self._lock_loop is not loop:
            self._login_lock = asyncio.Lock()
            self._lock_loop = loop
        return self._login_lock

    def _require_session(self) -> AuthResult:
        session = self._auth_result
        if session is None:
            raise AuthenticationError("Not logged in. Call login() or start() first.")
        if session.is_expired():
            raise AuthenticationError(
                f"Session for {session.username} expired at {session.expires_at.isoformat()}"
            )
        return session

    # =========================================================================
    # Context manager
    # =========================================================================

    async def __aenter__(self) -> 'FileClient':
        """Enter async context - resumes or logs in when credentials are known."""
        if self._username and self._password:
            await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release connections; the stored session is kept."""
        await self._api.close()
        self._session.close()

    # =========================================================================
    # Authentication
    # =========================================================================

    async def login(self, username: str, password: str) -> AuthResult:
        """
        Log in and make the new session current.

        Args:
            username: Account name
            password: Account password

        Returns:
            AuthResult snapshot of the new session

        Raises:
            ValueError: If username or password is empty
            AuthenticationError: If the credentials are rejected
            NetworkError: If the server cannot be reached
            ServerError: If the server fails
        """
        if not username or not password:
            raise ValueError("Username and password are required")

        async with self._session_lock():
            snapshot = await self._auth.login(username, password)
            self._auth_result = snapshot
            self._store(snapshot)

        self._events.emit(LOGIN, snapshot)
        return snapshot

    def login_with_completion(
        self,
        username: str,
        password: str,
        completion: LoginCompletion
    ) -> 'asyncio.Task':
        """
        Log in and report the outcome to completion(success, error).

        Must be called from a running event loop. The completion is invoked
        exactly once, on the loop thread.

        Returns:
            Task running the login; cancel it to abort
        """
        return run_with_completion(
            self.login(username, password),
            on_success=lambda result: (True, None),
            on_failure=lambda error: (False, error),
            completion=completion,
            name='archfiles.login'
        )

    async def logout(self) -> None:
        """
        Log out and forget the session.

        Local state is cleared even when the server cannot be reached;
        the error is re-raised afterwards.
        """
        async with self._session_lock():
            session = self._auth_result
            self._auth_result = None
            self._session.delete()

        if session is None:
            return

        try:
            await self._auth.logout(session)
        except ArchFilesError as e:
            self._logger.warning(f"Server logout failed for {session.username}: {e!r}")
            raise
        finally:
            self._events.emit(LOGOUT, session)

    async def whoami(self) -> UserInfo:
        """Ask the server which user owns the current session."""
        session = self._require_session()
        return await self._guard(self._auth.whoami(session), session)

    async def _guard(self, operation, session: AuthResult):
        """Await an operation made with `session`, reporting a server-side rejection of it."""
        try:
            return await operation
        except AuthenticationError as e:
            if e.status == 401:
                self._logger.info(f"Server rejected the session of {session.username}")
                self._events.emit(SESSION_REJECTED, session)
            raise

    # =========================================================================
    # Files
    # =========================================================================

    async def fetch(self, path: str) -> FetchResult:
        """
        Fetch a remote file into memory.

        Args:
            path: Remote file path (e.g., "/docs/readme.txt")

        Returns:
            FetchResult with data, status and headers

        Raises:
            ValueError: If path is empty
            AuthenticationError: If not logged in or the session was rejected
            AccessDeniedError: If the path is outside the shared directory
            NotFoundError: If the file does not exist
            NetworkError: If the server cannot be reached
        """
        path = normalize_path(path)
        session = self._require_session()
        return await self._guard(self._files.fetch(path, session), session)

    def fetch_with_completion(
        self,
        path: str,
        completion: FetchCompletion
    ) -> 'asyncio.Task':
        """
        Fetch a file and report to completion(data, response, error).

        On failure data is None and response carries the status and
        headers when the server answered at all.

        Returns:
            Task running the fetch; cancel it to abort
        """
        return run_with_completion(
            self.fetch(path),
            on_success=lambda result: (result.data, result.response, None),
            on_failure=lambda error: (None, error.response, error),
            completion=completion,
            name='archfiles.fetch'
        )

    async def list_directory(self, path: str = '/') -> DirectoryListing:
        """List a remote directory, directories first."""
        session = self._require_session()
        return await self._guard(self._files.list_directory(path, session), session)

    async def ls(self, path: str = '/') -> DirectoryListing:
        return await self.list_directory(path)

    async def file_info(self, path: str) -> FileInfo:
        """Get metadata of a remote file or directory."""
        session = self._require_session()
        return await self._guard(self._files.file_info(path, session), session)

    async def download(
        self,
        path: str,
        dest: Union[str, Path] = '.',
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> Path:
        """
        Download a remote file to disk.

        Args:
            path: Remote file path
            dest: Local destination path or directory
            progress_callback: Optional callback(downloaded_bytes, total_bytes)

        Returns:
            Path to downloaded file
        """
        session = self._require_session()
        return await self._guard(self._files.download(path, session, dest, progress_callback), session)

    async def health(self) -> Dict[str, Any]:
        """Check server health (no login needed)."""
        return await self._api.health()

    def __repr__(self) -> str:
        state = f"user={self.username!r}" if self.is_logged_in else "logged out"
        return f"FileClient({self._config.base_url}, {state})"
