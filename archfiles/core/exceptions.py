"""
Custom exceptions for archfiles operations.

This module defines the error taxonomy surfaced by the client. Every
failure of a login, fetch or related call reaches the caller as one of
these classes.
"""
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .files.models import ResponseMeta


class ErrorKind(str, Enum):
    """Coarse classification of a failure."""
    NETWORK = 'network'
    AUTH_REJECTED = 'auth-rejected'
    ACCESS_DENIED = 'access-denied'
    NOT_FOUND = 'not-found'
    INVALID_REQUEST = 'invalid-request'
    SERVER_ERROR = 'server-error'
    CANCELLED = 'cancelled'
    UNKNOWN = 'unknown'


class ArchFilesError(Exception):
    """Base exception for all archfiles errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response: Optional['ResponseMeta'] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (if a response was received)
            response: Response metadata (if a response was received)
        """
        self.message = message
        self.status = status
        self.response = response
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class NetworkError(ArchFilesError):
    """Exception raised when the server could not be reached."""
    kind = ErrorKind.NETWORK


class AuthenticationError(ArchFilesError):
    """Exception raised for rejected credentials or a missing/expired session."""
    kind = ErrorKind.AUTH_REJECTED


class AccessDeniedError(AuthenticationError):
    """Exception raised when the server refuses access to a path."""
    kind = ErrorKind.ACCESS_DENIED


class NotFoundError(ArchFilesError):
    """Exception raised when a remote file or directory does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        status: Optional[int] = None,
        response: Optional['ResponseMeta'] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            path: Remote path that was not found
            status: HTTP status code
            response: Response metadata
        """
        self.path = path
        super().__init__(message, status, response)


class InvalidRequestError(ArchFilesError):
    """Exception raised when the server rejects a request as malformed."""
    kind = ErrorKind.INVALID_REQUEST


class ServerError(ArchFilesError):
    """Exception raised for 5xx responses."""
    kind = ErrorKind.SERVER_ERROR


class UnknownError(ArchFilesError):
    """Exception raised for failures that fit no other kind."""
    kind = ErrorKind.UNKNOWN


class OperationCancelledError(UnknownError):
    """Delivered to a completion when its task was cancelled."""
    kind = ErrorKind.CANCELLED
