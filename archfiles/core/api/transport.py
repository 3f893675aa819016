"""
HTTP transport.

The client never talks to aiohttp directly: it goes through an
HTTPTransport, which issues a request and hands back status, headers,
cookies and body. AiohttpTransport is the default implementation.
"""
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Protocol, runtime_checkable

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from .config import APIConfig
from ..exceptions import NetworkError
from ..logging import get_logger

DEFAULT_CHUNK_SIZE = 131072


def _freeze_headers(headers: Mapping[str, str]) -> CIMultiDictProxy:
    return CIMultiDictProxy(CIMultiDict(headers))


@dataclass
class HTTPResponse:
    """Fully read HTTP response."""
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class HTTPStream(Protocol):
    """Response whose body is consumed incrementally."""

    status: int
    headers: Mapping[str, str]

    def iter_chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Iterate over body chunks of at most `size` bytes."""
        ...

    async def read(self) -> bytes:
        """Read the remaining body."""
        ...


@runtime_checkable
class HTTPTransport(Protocol):
    """
    Protocol for HTTP transports.

    Implementations must raise NetworkError when the server cannot be
    reached; HTTP error statuses are returned, not raised.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> HTTPResponse:
        """Issue a request and read the whole response."""
        ...

    def stream(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """Async context manager yielding an HTTPStream."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...


class _AiohttpStream:
    """HTTPStream over an aiohttp response."""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response
        self.status = response.status
        self.headers = _freeze_headers(response.headers)

    async def iter_chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.content.iter_chunked(size):
                yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Connection lost while reading body: {e}") from e

    async def read(self) -> bytes:
        try:
            return await self._response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Connection lost while reading body: {e}") from e


class AiohttpTransport:
    """
    HTTPTransport backed by a pooled aiohttp.ClientSession.

    The session uses a DummyCookieJar: authentication cookies are passed
    explicitly by the caller on every request.

    Example:
        >>> async with AiohttpTransport(APIConfig.default()) as transport:
        ...     response = await transport.request('GET', 'http://localhost:3001/health')
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize transport.

        Args:
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._logger = get_logger('archfiles.transport')

    async def __aenter__(self) -> 'AiohttpTransport':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    def _detach(self) -> None:
        """Forget a session that belongs to another event loop."""
        if self._session is not None and not self._session.closed:
            self._logger.debug("Dropping HTTP session bound to a previous event loop")
        self._session = None
        self._connector = None
        self._loop = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """
        Ensure session is created and open on the running loop.

        A session created under an earlier event loop (e.g. a previous
        asyncio.run) cannot be used or closed from this one, so it is
        replaced.
        """
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            self._detach()

        if self._session is None or self._session.closed:
            self._loop = loop
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                cookie_jar=aiohttp.DummyCookieJar(),
                **self._config.get_session_kwargs()
            )
        return self._session

    def _proxy(self) -> Optional[str]:
        return self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> HTTPResponse:
        session = await self._ensure_session()
        self._logger.debug(f"{method} {url} params={params}")

        try:
            async with session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                proxy=self._proxy()
            ) as response:
                body = await response.read()
                cookies = {name: morsel.value for name, morsel in response.cookies.items()}
                self._logger.debug(f"{method} {url} -> {response.status} ({len(body)} bytes)")
                return HTTPResponse(
                    status=response.status,
                    headers=_freeze_headers(response.headers),
                    cookies=cookies,
                    body=body
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Network error on {method} {url}: {e!r}")
            raise NetworkError(f"Network error: {e!r}") from e

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        session = await self._ensure_session()
        self._logger.debug(f"{method} {url} params={params} (stream)")

        try:
            response = await session.request(
                method,
                url,
                params=params,
                headers=headers,
                proxy=self._proxy()
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Network error on {method} {url}: {e!r}")
            raise NetworkError(f"Network error: {e!r}") from e

        try:
            yield _AiohttpStream(response)
        finally:
            response.release()

    async def close(self) -> None:
        """Close transport and release resources."""
        if self._loop is not None and self._loop is not asyncio.get_running_loop():
            self._detach()
            return

        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
        self._connector = None
        self._loop = None
