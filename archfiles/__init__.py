"""
archfiles - Async Python client for Arch file servers.

Usage:
    >>> from archfiles import FileClient
    >>>
    >>> async with FileClient(username="alice", password="secret") as client:
    ...     result = await client.fetch("/notes/todo.txt")
    ...     print(result.text())
"""
import logging
from .client import FileClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    AsyncAuthService,
    AuthResult,
    AiohttpTransport,
    HTTPTransport,
    HTTPResponse,
)

# Errors
from .core.exceptions import (
    ErrorKind,
    ArchFilesError,
    NetworkError,
    AuthenticationError,
    AccessDeniedError,
    NotFoundError,
    InvalidRequestError,
    ServerError,
    UnknownError,
    OperationCancelledError,
)

# Files
from .core.files import (
    DirectoryListing,
    FetchResult,
    FileEntry,
    FileInfo,
    ResponseMeta,
    UserInfo,
)

# Session management
from .core.session import (
    SessionStorage,
    SessionData,
    SQLiteSession,
    MemorySession
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for archfiles modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'archfiles',
        'archfiles.client',
        'archfiles.api',
        'archfiles.auth',
        'archfiles.files',
        'archfiles.transport',
        'archfiles.completion',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'FileClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'AsyncAuthService',
    'AuthResult',
    'AiohttpTransport',
    'HTTPTransport',
    'HTTPResponse',
    'ErrorKind',
    'ArchFilesError',
    'NetworkError',
    'AuthenticationError',
    'AccessDeniedError',
    'NotFoundError',
    'InvalidRequestError',
    'ServerError',
    'UnknownError',
    'OperationCancelledError',
    'DirectoryListing',
    'FetchResult',
    'FileEntry',
    'FileInfo',
    'ResponseMeta',
    'UserInfo',
    'SessionStorage',
    'SessionData',
    'SQLiteSession',
    'MemorySession',
    'setup_logging',
]
