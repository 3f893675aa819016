"""Server status codes and their mapping onto archfiles exceptions."""
import json
from typing import Dict, Optional

from ...exceptions import (
    AccessDeniedError,
    ArchFilesError,
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    ServerError,
    UnknownError,
)
from ...files.models import ResponseMeta


class StatusCodes:
    """Status codes returned by the file server."""

    MESSAGES: Dict[int, str] = {
        400: 'Bad Request: missing or invalid parameters',
        401: 'Unauthorized: valid session cookie required',
        403: 'Access denied: path is outside the shared directory',
        404: 'Not found',
        500: 'Internal server error',
        502: 'Bad gateway',
        503: 'Service unavailable',
        504: 'Gateway timeout',
    }

    @classmethod
    def get_message(cls, status: int) -> str:
        """Gets the default message for a status code."""
        return cls.MESSAGES.get(status, f"Unexpected status: {status}")


def extract_message(body: bytes) -> Optional[str]:
    """
    Pull a human readable message out of a JSON error body.

    The server answers with {"error": ..., "message": ...}; the message
    field wins when both are present.
    """
    if not body:
        return None
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    message = data.get('message') or data.get('error')
    return str(message) if message else None


def error_from_status(
    status: int,
    body: bytes = b'',
    response: Optional[ResponseMeta] = None,
    path: Optional[str] = None
) -> ArchFilesError:
    """
    Build the exception for a non-2xx response.

    Args:
        status: HTTP status code
        body: Raw response body
        response: Response metadata to attach
        path: Remote path the request was about

    Returns:
        Exception instance (not raised)
    """
    message = extract_message(body) or StatusCodes.get_message(status)
    if path:
        message = f"{message} ({path})"

    if status == 400:
        return InvalidRequestError(message, status, response)
    if status == 401:
        return AuthenticationError(message, status, response)
    if status == 403:
        return AccessDeniedError(message, status, response)
    if status == 404:
        return NotFoundError(message, path, status, response)
    if status >= 500:
        # The file server reports a missing file as a 500 carrying the fs error
        if message.startswith('ENOENT'):
            return NotFoundError(message, path, status, response)
        return ServerError(message, status, response)
    return UnknownError(message, status, response)
