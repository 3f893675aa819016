"""Tests for API configuration."""
import aiohttp
import pytest

from archfiles import APIConfig, FileClient, ProxyConfig, SSLConfig, TimeoutConfig


class TestAPIConfig:
    """Test suite for APIConfig."""

    def test_defaults(self):
        config = APIConfig()

        assert config.base_url == 'http://localhost:3001'
        assert config.session_cookie_name == 'sessionId'
        assert config.session_ttl == 24 * 60 * 60
        assert config.login_path == '/api/login'
        assert config.logout_path == '/logout'

    def test_trailing_slash_stripped(self):
        config = APIConfig(base_url='https://files.example.com/')

        assert config.url_for('/api/files') == 'https://files.example.com/api/files'

    def test_insecure(self):
        config = APIConfig.insecure()

        assert config.ssl.verify is False
        assert config.get_connector_kwargs()['ssl'] is False

    def test_with_proxy(self):
        config = APIConfig.with_proxy('http://proxy:8080')

        assert config.proxy.url == 'http://proxy:8080'

    def test_session_kwargs(self):
        config = APIConfig(user_agent='test-agent', extra_headers={'X-Trace': '1'})

        kwargs = config.get_session_kwargs()

        assert kwargs['headers'] == {'User-Agent': 'test-agent', 'X-Trace': '1'}
        assert isinstance(kwargs['timeout'], aiohttp.ClientTimeout)


class TestFromEnv:
    """Test suite for APIConfig.from_env."""

    def test_empty_environment(self):
        config = APIConfig.from_env({})

        assert config == APIConfig()

    def test_reads_variables(self):
        config = APIConfig.from_env({
            'ARCHFILES_URL': 'https://arch.local/',
            'ARCHFILES_TIMEOUT': '12.5',
            'ARCHFILES_VERIFY_SSL': 'false',
            'ARCHFILES_PROXY': 'http://proxy:3128',
            'ARCHFILES_USER_AGENT': 'ua/2',
        })

        assert config.base_url == 'https://arch.local'
        assert config.timeout.total == 12.5
        assert config.ssl.verify is False
        assert config.proxy.url == 'http://proxy:3128'
        assert config.user_agent == 'ua/2'

    @pytest.mark.parametrize('value', ['1', 'true', 'YES', 'on'])
    def test_verify_ssl_true_values(self, value):
        assert APIConfig.from_env({'ARCHFILES_VERIFY_SSL': value}).ssl.verify is True

    def test_kwargs_override_environment(self):
        config = APIConfig.from_env({'ARCHFILES_URL': 'http://env'}, base_url='http://arg')

        assert config.base_url == 'http://arg'

    def test_bad_timeout(self):
        with pytest.raises(ValueError):
            APIConfig.from_env({'ARCHFILES_TIMEOUT': 'soon'})

    def test_uses_os_environ(self, monkeypatch):
        monkeypatch.setenv('ARCHFILES_URL', 'http://from-os')

        assert APIConfig.from_env().base_url == 'http://from-os'


class TestSubConfigs:
    """Tests for proxy, SSL and timeout configuration."""

    def test_proxy_with_credentials(self):
        proxy = ProxyConfig(url='http://proxy:8080', username='u', password='p')

        assert proxy.to_aiohttp_proxy() == 'http://u:p@proxy:8080'

    def test_proxy_without_url(self):
        assert ProxyConfig().to_aiohttp_proxy() is None

    def test_ssl_context_verifies(self):
        context = SSLConfig().create_ssl_context()

        assert context.check_hostname is True

    def test_timeout_conversion(self):
        timeout = TimeoutConfig(total=10, connect=2).to_aiohttp_timeout()

        assert timeout.total == 10
        assert timeout.connect == 2

    def test_create_config(self):
        config = FileClient.create_config(
            base_url='http://x',
            proxy='http://proxy:1',
            proxy_user='u',
            proxy_pass='p',
            timeout=5,
            verify_ssl=False
        )

        assert config.base_url == 'http://x'
        assert config.proxy.to_aiohttp_proxy() == 'http://u:p@proxy:1'
        assert config.timeout.total == 5
        assert config.ssl.verify is False
