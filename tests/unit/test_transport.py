"""
Tests for AiohttpTransport.

Runs the transport and the full client against a local aiohttp server.
"""
import asyncio
import threading

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from archfiles import (
    APIConfig,
    AiohttpTransport,
    AuthenticationError,
    FileClient,
    HTTPTransport,
    NetworkError,
    NotFoundError,
)

BLOB = bytes(range(256)) * 1200


def make_app() -> web.Application:
    sessions = {}

    async def login(request):
        data = await request.json()
        if data.get('password') != 'secret':
            return web.json_response({'success': False, 'message': 'Invalid username or password'}, status=401)
        token = f"tok-{len(sessions) + 1}"
        sessions[token] = data['username']
        response = web.json_response({'success': True, 'username': data['username']})
        response.set_cookie('sessionId', token, httponly=True)
        return response

    def protected(handler):
        async def wrapper(request):
            if request.cookies.get('sessionId') not in sessions:
                return web.json_response({'error': 'Unauthorized', 'redirect': '/login'}, status=401)
            return await handler(request)
        return wrapper

    async def user(request):
        return web.json_response({'username': sessions[request.cookies['sessionId']]})

    async def download(request):
        if request.query.get('path') != '/blob.bin':
            return web.json_response({
                'error': 'Error downloading file',
                'message': "ENOENT: no such file or directory"
            }, status=500)
        return web.Response(body=BLOB, content_type='application/octet-stream')

    async def echo(request):
        return web.json_response({
            'cookie': request.headers.get('Cookie'),
            'user_agent': request.headers.get('User-Agent'),
            'path': request.query.get('path'),
        })

    async def health(request):
        return web.json_response({'status': 'ok'})

    app = web.Application()
    app.router.add_post('/api/login', login)
    app.router.add_get('/api/user', protected(user))
    app.router.add_get('/api/download', protected(download))
    app.router.add_get('/echo', echo)
    app.router.add_get('/health', health)
    return app


@pytest_asyncio.fixture
async def http_server():
    server = test_utils.TestServer(make_app())
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def http_config(http_server):
    return APIConfig(base_url=str(http_server.make_url('/')), user_agent='archfiles-test')


@pytest_asyncio.fixture
async def aiohttp_transport(http_config):
    transport = AiohttpTransport(http_config)
    yield transport
    await transport.close()


class TestAiohttpTransport:
    """Test suite for AiohttpTransport."""

    def test_implements_protocol(self):
        assert isinstance(AiohttpTransport(), HTTPTransport)

    @pytest.mark.asyncio
    async def test_request_reads_cookies(self, aiohttp_transport, http_config):
        response = await aiohttp_transport.request(
            'POST', http_config.url_for('/api/login'),
            json={'username': 'alice', 'password': 'secret'}
        )

        assert response.status == 200
        assert response.cookies == {'sessionId': 'tok-1'}
        assert response.headers['content-type'].startswith('application/json')

    @pytest.mark.asyncio
    async def test_error_status_returned(self, aiohttp_transport, http_config):
        response = await aiohttp_transport.request('GET', http_config.url_for('/api/user'))

        assert response.status == 401
        assert response.ok is False

    @pytest.mark.asyncio
    async def test_headers_and_params_sent(self, aiohttp_transport, http_config):
        response = await aiohttp_transport.request(
            'GET', http_config.url_for('/echo'),
            params={'path': '/a b.txt'},
            headers={'Cookie': 'sessionId=xyz'}
        )

        data = response.body.decode()
        assert '"cookie": "sessionId=xyz"' in data
        assert '"user_agent": "archfiles-test"' in data
        assert '"path": "/a b.txt"' in data

    @pytest.mark.asyncio
    async def test_no_cookie_jar(self, aiohttp_transport, http_config):
        """Test cookies from one response are not replayed on the next request."""
        await aiohttp_transport.request(
            'POST', http_config.url_for('/api/login'),
            json={'username': 'alice', 'password': 'secret'}
        )

        response = await aiohttp_transport.request('GET', http_config.url_for('/echo'))

        assert '"cookie": null' in response.body.decode()

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        config = APIConfig(base_url=f"http://127.0.0.1:{test_utils.unused_port()}")

        async with AiohttpTransport(config) as transport:
            with pytest.raises(NetworkError):
                await transport.request('GET', config.url_for('/health'))

    @pytest.mark.asyncio
    async def test_close(self, http_config):
        transport = AiohttpTransport(http_config)
        await transport.request('GET', http_config.url_for('/health'))
        assert transport.closed is False

        await transport.close()

        assert transport.closed is True


class TestClientOverHttp:
    """FileClient end to end over aiohttp."""

    @pytest_asyncio.fixture
    async def http_client(self, http_config):
        client = FileClient(config=http_config)
        yield client
        await client.close()

    @pytest.mark.asyncio
    async def test_login_and_fetch(self, http_client):
        session = await http_client.login('alice', 'secret')

        result = await http_client.fetch('/blob.bin')

        assert session.session_id == 'tok-1'
        assert result.data == BLOB
        assert result.response.content_type == 'application/octet-stream'

    @pytest.mark.asyncio
    async def test_bad_password(self, http_client):
        with pytest.raises(AuthenticationError):
            await http_client.login('alice', 'wrong')

    @pytest.mark.asyncio
    async def test_missing_file(self, http_client):
        await http_client.login('alice', 'secret')

        with pytest.raises(NotFoundError):
            await http_client.fetch('/nope')

    @pytest.mark.asyncio
    async def test_streamed_download(self, http_client, tmp_path):
        await http_client.login('alice', 'secret')

        target = await http_client.download('/blob.bin', tmp_path)

        assert target.read_bytes() == BLOB

    @pytest.mark.asyncio
    async def test_whoami(self, http_client):
        await http_client.login('bob', 'secret')

        assert (await http_client.whoami()).username == 'bob'


@pytest.fixture
def threaded_server():
    """Local server on its own loop and thread, for tests that call asyncio.run."""
    loop = asyncio.new_event_loop()
    runner = web.AppRunner(make_app())
    port = test_utils.unused_port()

    loop.run_until_complete(runner.setup())
    loop.run_until_complete(web.TCPSite(runner, '127.0.0.1', port).start())
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}"

    asyncio.run_coroutine_threadsafe(runner.cleanup(), loop).result(timeout=10)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=10)
    loop.close()


class TestSuccessiveEventLoops:
    """Clients and transports reused across asyncio.run calls."""

    def test_transport_reopens_on_new_loop(self, threaded_server):
        config = APIConfig(base_url=threaded_server)
        transport = AiohttpTransport(config)

        async def health():
            response = await transport.request('GET', config.url_for('/health'))
            return response.status

        assert asyncio.run(health()) == 200
        assert asyncio.run(health()) == 200

        asyncio.run(transport.close())
        assert transport.closed is True

    def test_close_from_other_loop(self, threaded_server):
        config = APIConfig(base_url=threaded_server)
        transport = AiohttpTransport(config)
        asyncio.run(transport.request('GET', config.url_for('/health')))

        asyncio.run(transport.close())

        assert transport.closed is True

    def test_default_client_in_successive_loops(self, threaded_server, monkeypatch):
        monkeypatch.setattr(FileClient, '_default', None)
        monkeypatch.setenv('ARCHFILES_URL', threaded_server)

        first = asyncio.run(FileClient.default().health())
        second = asyncio.run(FileClient.default().health())

        assert first['status'] == 'ok'
        assert second['status'] == 'ok'
        asyncio.run(FileClient.default().close())

    def test_default_client_login_in_successive_loops(self, threaded_server, monkeypatch):
        monkeypatch.setattr(FileClient, '_default', None)
        monkeypatch.setenv('ARCHFILES_URL', threaded_server)
        client = FileClient.default()

        async def login_and_fetch(username):
            await client.login(username, 'secret')
            return (await client.fetch('/blob.bin')).data

        assert asyncio.run(login_and_fetch('alice')) == BLOB
        assert asyncio.run(login_and_fetch('bob')) == BLOB
        assert client.username == 'bob'
        asyncio.run(client.close())
