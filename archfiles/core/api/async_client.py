"""
Async API client.

Endpoint-level access to the Arch file server on top of an HTTPTransport.
"""
import json
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from .config import APIConfig
from .errors import error_from_status
from .transport import AiohttpTransport, HTTPResponse, HTTPTransport
from ..exceptions import UnknownError
from ..files.models import ResponseMeta
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous client for the file server endpoints.

    Features:
    - Full async/await support
    - Pluggable transport (aiohttp by default)
    - Explicit session cookie per request
    - Uniform status to exception mapping

    The client keeps no authentication state of its own: every
    protected call takes the session id to present.

    Example:
        >>> async with AsyncAPIClient(APIConfig.default()) as api:
        ...     status = await api.health()
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        transport: Optional[HTTPTransport] = None
    ):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
            transport: HTTP transport (an AiohttpTransport is created if not provided)
        """
        self._config = config or APIConfig.default()
        self._owns_transport = transport is None
        self._transport: HTTPTransport = transport or AiohttpTransport(self._config)
        self._logger = get_logger('archfiles.api')

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    async def __aenter__(self) -> 'AsyncAPIClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    def _headers(self, session_id: Optional[str]) -> Dict[str, str]:
        if not session_id:
            return {}
        return {'Cookie': f"{self._config.session_cookie_name}={session_id}"}

    def _raise_for_status(self, response: HTTPResponse, path: Optional[str] = None) -> None:
        if response.ok:
            return
        meta = ResponseMeta(status=response.status, headers=response.headers)
        error = error_from_status(response.status, response.body, meta, path)
        self._logger.info(f"Request failed: {error!r}")
        raise error

    def _parse_json(self, response: HTTPResponse) -> Any:
        try:
            return json.loads(response.body)
        except (ValueError, UnicodeDecodeError) as e:
            meta = ResponseMeta(status=response.status, headers=response.headers)
            raise UnknownError(
                f"Malformed response body: {e}", response.status, meta
            ) from e

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        session_id: Optional[str] = None,
        resource: Optional[str] = None
    ) -> HTTPResponse:
        """
        Make a request and raise for error statuses.

        Args:
            method: HTTP method
            endpoint: Endpoint path (e.g. '/api/files')
            params: Query string parameters
            json_body: JSON request body
            session_id: Session id to present as cookie
            resource: Remote path the request is about (for error messages)

        Returns:
            The successful HTTPResponse

        Raises:
            ArchFilesError: For transport failures and non-2xx statuses
        """
        response = await self._transport.request(
            method,
            self._config.url_for(endpoint),
            params=params,
            json=json_body,
            headers=self._headers(session_id)
        )
        self._raise_for_status(response, resource)
        return response

    async def request_json(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make a request and decode its JSON body."""
        response = await self.request(method, endpoint, **kwargs)
        return self._parse_json(response)

    # Endpoints

    async def login(self, username: str, password: str) -> HTTPResponse:
        """POST credentials; the caller reads the session cookie."""
        return await self.request(
            'POST',
            self._config.login_path,
            json_body={'username': username, 'password': password}
        )

    async def logout(self, session_id: str) -> Dict[str, Any]:
        return await self.request_json('POST', self._config.logout_path, session_id=session_id)

    async def get_user(self, session_id: str) -> Dict[str, Any]:
        """Get the user owning a session."""
        return await self.request_json('GET', self._config.user_path, session_id=session_id)

    async def list_files(self, path: str, session_id: str) -> Dict[str, Any]:
        """Get a directory listing."""
        return await self.request_json(
            'GET',
            self._config.files_path,
            params={'path': path},
            session_id=session_id,
            resource=path
        )

    async def get_file_info(self, path: str, session_id: str) -> Dict[str, Any]:
        """Get metadata for a file or directory."""
        return await self.request_json(
            'GET',
            self._config.file_info_path,
            params={'path': path},
            session_id=session_id,
            resource=path
        )

    async def download(self, path: str, session_id: str) -> HTTPResponse:
        """Download a whole file into memory."""
        return await self.request(
            'GET',
            self._config.download_path,
            params={'path': path},
            session_id=session_id,
            resource=path
        )

    @asynccontextmanager
    async def open_download(self, path: str, session_id: str):
        """
        Open a streaming download.

        Yields:
            HTTPStream positioned at the start of the body

        Raises:
            ArchFilesError: If the server answers with an error status
        """
        async with self._transport.stream(
            'GET',
            self._config.url_for(self._config.download_path),
            params={'path': path},
            headers=self._headers(session_id)
        ) as stream:
            if not 200 <= stream.status < 300:
                body = await stream.read()
                self._raise_for_status(
                    HTTPResponse(status=stream.status, headers=stream.headers, body=body),
                    path
                )
            yield stream

    async def health(self) -> Dict[str, Any]:
        """Get server health status."""
        return await self.request_json('GET', self._config.health_path)
