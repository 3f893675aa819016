"""HTTP status to archfiles error mapping."""
from .api_errors import StatusCodes, error_from_status, extract_message

__all__ = [
    'StatusCodes',
    'error_from_status',
    'extract_message',
]
