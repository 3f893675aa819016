"""File server API module."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .transport import AiohttpTransport, HTTPResponse, HTTPStream, HTTPTransport
from .async_client import AsyncAPIClient
from .async_auth import AsyncAuthService, AuthResult
from .errors import StatusCodes, error_from_status
from .events import EventEmitter

__all__ = [
    # Clients
    'AsyncAPIClient',
    'AsyncAuthService',
    'AuthResult',

    # Transport
    'HTTPTransport',
    'HTTPStream',
    'HTTPResponse',
    'AiohttpTransport',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Errors
    'StatusCodes',
    'error_from_status',

    # Events
    'EventEmitter',
]
