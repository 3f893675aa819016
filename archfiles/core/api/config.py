"""
API configuration module.

Provides configuration for the archfiles client: server location,
endpoint paths, proxy, SSL and timeouts.
"""
import os
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

DEFAULT_BASE_URL = 'http://localhost:3001'
DEFAULT_USER_AGENT = 'archfiles/1.0.0'
SESSION_DURATION = 24 * 60 * 60  # seconds

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class ProxyConfig:
    """
    Proxy configuration.

    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None

        if self.username and self.password:
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"

        return self.url


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Granular control over different timeout types.
    """
    total: float = 300.0  # Total request timeout
    connect: float = 30.0  # Connection timeout
    sock_read: float = 60.0  # Socket read timeout
    sock_connect: float = 30.0  # Socket connect timeout

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete client configuration.

    Centralizes the server location, endpoint paths and connection options.
    Endpoint defaults match the Arch file-browser server.
    """
    # Server
    base_url: str = DEFAULT_BASE_URL

    # Endpoints
    login_path: str = '/api/login'
    logout_path: str = '/logout'
    user_path: str = '/api/user'
    files_path: str = '/api/files'
    file_info_path: str = '/api/file-info'
    download_path: str = '/api/download'
    health_path: str = '/health'

    # Session
    session_cookie_name: str = 'sessionId'
    session_ttl: float = SESSION_DURATION

    # User agent
    user_agent: str = DEFAULT_USER_AGENT

    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    # Additional headers
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Logging
    log_level: int = 20  # logging.INFO

    # Connection pool settings
    limit_per_host: int = 10
    limit: int = 100

    def __post_init__(self):
        self.base_url = self.base_url.rstrip('/')

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **kwargs) -> 'APIConfig':
        """
        Create configuration from ARCHFILES_* environment variables.

        Recognized variables:
            ARCHFILES_URL: Server base URL
            ARCHFILES_TIMEOUT: Total request timeout in seconds
            ARCHFILES_VERIFY_SSL: 0/false to disable certificate checks
            ARCHFILES_PROXY: Proxy URL
            ARCHFILES_USER_AGENT: User agent string

        Explicit keyword arguments take precedence over the environment.

        Raises:
            ValueError: If ARCHFILES_TIMEOUT is not a number
        """
        env = os.environ if environ is None else environ

        options: Dict[str, Any] = {}
        if env.get('ARCHFILES_URL'):
            options['base_url'] = env['ARCHFILES_URL']
        if env.get('ARCHFILES_USER_AGENT'):
            options['user_agent'] = env['ARCHFILES_USER_AGENT']
        if env.get('ARCHFILES_TIMEOUT'):
            options['timeout'] = TimeoutConfig(total=float(env['ARCHFILES_TIMEOUT']))
        if env.get('ARCHFILES_VERIFY_SSL'):
            verify = env['ARCHFILES_VERIFY_SSL'].strip().lower() in _TRUE_VALUES
            options['ssl'] = SSLConfig(verify=verify, check_hostname=verify)
        if env.get('ARCHFILES_PROXY'):
            options['proxy'] = ProxyConfig(url=env['ARCHFILES_PROXY'])

        options.update(kwargs)
        return cls(**options)

    def url_for(self, path: str) -> str:
        """Build an absolute URL for an endpoint path."""
        return f"{self.base_url}{path}"

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
