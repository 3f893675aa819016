"""Pytest fixtures for archfiles tests."""
import asyncio
import json
import posixpath
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlsplit

import pytest

from archfiles import APIConfig, FileClient
from archfiles.core.api.transport import HTTPResponse
from archfiles.core.exceptions import NetworkError

BASE_URL = 'http://files.test'


@dataclass
class Call:
    """A request seen by FakeTransport."""
    method: str
    path: str
    params: Optional[Dict[str, str]] = None
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def cookie(self) -> Optional[str]:
        value = self.headers.get('Cookie', '')
        if value.startswith('sessionId='):
            return value[len('sessionId='):]
        return None


def json_response(status: int, data: Any, cookies: Optional[Dict[str, str]] = None) -> HTTPResponse:
    return HTTPResponse(
        status=status,
        headers={'Content-Type': 'application/json'},
        cookies=cookies or {},
        body=json.dumps(data).encode()
    )


class FakeStream:
    """HTTPStream over a canned response; can drop the connection midway."""

    def __init__(self, response: HTTPResponse, fail_after: Optional[int] = None):
        self.status = response.status
        self.headers = response.headers
        self._body = response.body
        self._fail_after = fail_after

    async def iter_chunks(self, size: int = 131072):
        sent = 0
        for start in range(0, len(self._body), size):
            if self._fail_after is not None and sent >= self._fail_after:
                raise NetworkError("Connection reset")
            chunk = self._body[start:start + size]
            sent += len(chunk)
            yield chunk

    async def read(self) -> bytes:
        return self._body


class FakeTransport:
    """
    In-memory HTTPTransport.

    Requests are routed to handler(call) -> HTTPResponse by (method, path).
    A handler may also be an exception instance, which is raised.
    """

    def __init__(self):
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Call] = []
        self.closed = False
        self.stream_fail_after: Optional[int] = None

    def route(self, method: str, path: str, handler: Any) -> None:
        self.routes[(method, path)] = handler

    def calls_to(self, path: str) -> List[Call]:
        return [c for c in self.calls if c.path == path]

    async def request(self, method, url, *, params=None, json=None, headers=None) -> HTTPResponse:
        # Yield like a real transport so concurrent callers interleave
        await asyncio.sleep(0)
        call = Call(method, urlsplit(url).path, params, json, dict(headers or {}))
        self.calls.append(call)

        handler = self.routes.get((method, call.path))
        if handler is None:
            return json_response(404, {'error': 'Not found'})
        if isinstance(handler, BaseException):
            raise handler
        return handler(call)

    @asynccontextmanager
    async def stream(self, method, url, *, params=None, headers=None):
        response = await self.request(method, url, params=params, headers=headers)
        yield FakeStream(response, self.stream_fail_after)

    async def close(self) -> None:
        self.closed = True


class FakeArchServer:
    """
    Emulates the Arch file-browser server on top of FakeTransport.

    Users, sessions and a small file tree are kept in memory. Status
    codes and bodies follow the real server, including its 500 ENOENT
    answer for missing files.
    """

    MODIFIED = '2025-11-10T12:00:00.000Z'

    def __init__(self, transport: FakeTransport):
        self.transport = transport
        self.users = {'alice': 'secret', 'bob': 'hunter2'}
        self.sessions: Dict[str, str] = {}
        self.files: Dict[str, bytes] = {
            '/docs/readme.txt': b'hello arch',
            '/docs/report.pdf': b'%PDF-1.4 ' + b'x' * 300_000,
            '/notes.md': b'# notes\n',
        }
        self.dirs = {'/', '/docs', '/docs/empty', '/photos'}
        self._counter = 0

        transport.route('POST', '/api/login', self.login)
        transport.route('POST', '/logout', self.logout)
        transport.route('GET', '/api/user', self.protected(self.user))
        transport.route('GET', '/api/files', self.protected(self.list_files))
        transport.route('GET', '/api/file-info', self.protected(self.file_info))
        transport.route('GET', '/api/download', self.protected(self.download))
        transport.route('GET', '/health', lambda call: json_response(200, {'status': 'ok', 'timestamp': self.MODIFIED}))

    def protected(self, handler: Callable[[Call, str], HTTPResponse]) -> Callable[[Call], HTTPResponse]:
        def wrapper(call: Call) -> HTTPResponse:
            username = self.sessions.get(call.cookie or '')
            if not username:
                return json_response(401, {'error': 'Unauthorized', 'redirect': '/login'})
            return handler(call, username)
        return wrapper

    def expire_all(self) -> None:
        self.sessions.clear()

    def login(self, call: Call) -> HTTPResponse:
        body = call.json or {}
        username, password = body.get('username'), body.get('password')
        if not username or not password:
            return json_response(400, {'success': False, 'message': 'Username and password are required'})
        if self.users.get(username) != password:
            return json_response(401, {'success': False, 'message': 'Invalid username or password'})
        self._counter += 1
        token = f"token-{self._counter}"
        self.sessions[token] = username
        return json_response(
            200,
            {'success': True, 'message': 'Login successful', 'username': username},
            cookies={'sessionId': token}
        )

    def logout(self, call: Call) -> HTTPResponse:
        self.sessions.pop(call.cookie or '', None)
        return json_response(200, {'success': True, 'message': 'Logged out successfully'})

    def user(self, call: Call, username: str) -> HTTPResponse:
        return json_response(200, {'username': username})

    DENIED = '<denied>'

    def _resolve(self, call: Call) -> Optional[str]:
        raw = (call.params or {}).get('path')
        if raw is None:
            return None
        full = posixpath.normpath('/srv/' + raw.lstrip('/'))
        if full != '/srv' and not full.startswith('/srv/'):
            return self.DENIED
        return full[len('/srv'):] or '/'

    def _denied(self, path: str) -> bool:
        return path == self.DENIED

    def list_files(self, call: Call, username: str) -> HTTPResponse:
        path = self._resolve(call) or '/'
        if self._denied(path):
            return json_response(403, {'error': 'Access denied'})
        if path in self.files:
            return json_response(400, {'error': 'Path is not a directory'})
        if path not in self.dirs:
            return json_response(500, {
                'error': 'Error reading directory',
                'message': f"ENOENT: no such file or directory, stat '{path}'"
            })

        entries = []
        prefix = path.rstrip('/') + '/'
        for name in sorted(self.dirs | set(self.files)):
            if name != path and name.startswith(prefix) and '/' not in name[len(prefix):]:
                is_dir = name in self.dirs
                entries.append({
                    'name': name[len(prefix):],
                    'type': 'directory' if is_dir else 'file',
                    'size': None if is_dir else len(self.files[name]),
                    'modified': self.MODIFIED,
                    'path': name,
                })
        # The server sends entries unsorted; the client sorts them
        entries.reverse()
        return json_response(200, {'path': path, 'files': entries})

    def file_info(self, call: Call, username: str) -> HTTPResponse:
        path = self._resolve(call)
        if not path:
            return json_response(400, {'error': 'Path is required'})
        if self._denied(path):
            return json_response(403, {'error': 'Access denied'})
        if path not in self.files and path not in self.dirs:
            return json_response(500, {
                'error': 'Error getting file info',
                'message': f"ENOENT: no such file or directory, stat '{path}'"
            })
        is_dir = path in self.dirs
        return json_response(200, {
            'name': posixpath.basename(path),
            'type': 'directory' if is_dir else 'file',
            'size': 4096 if is_dir else len(self.files[path]),
            'modified': self.MODIFIED,
            'created': self.MODIFIED,
            'path': path,
        })

    def download(self, call: Call, username: str) -> HTTPResponse:
        path = self._resolve(call)
        if not path:
            return json_response(400, {'error': 'Path is required'})
        if self._denied(path):
            return json_response(403, {'error': 'Access denied'})
        if path in self.dirs:
            return json_response(400, {'error': 'Cannot download directory'})
        if path not in self.files:
            return json_response(500, {
                'error': 'Error downloading file',
                'message': f"ENOENT: no such file or directory, stat '{path}'"
            })
        data = self.files[path]
        return HTTPResponse(
            status=200,
            headers={
                'Content-Type': 'application/octet-stream',
                'Content-Length': str(len(data)),
                'Content-Disposition': f'attachment; filename="{posixpath.basename(path)}"',
            },
            body=data
        )


@pytest.fixture
def transport():
    """Bare in-memory transport with no routes."""
    return FakeTransport()


@pytest.fixture
def server(transport):
    """Fake Arch server wired into the transport."""
    return FakeArchServer(transport)


@pytest.fixture
def config():
    return APIConfig(base_url=BASE_URL)


@pytest.fixture
def client(server, config):
    """FileClient talking to the fake server, session kept in memory."""
    return FileClient(config=config, transport=server.transport)
