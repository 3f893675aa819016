"""Remote file models and access service."""
from .models import (
    DIRECTORY,
    FILE,
    DirectoryListing,
    FetchResult,
    FileEntry,
    FileInfo,
    ResponseMeta,
    UserInfo,
)
from .service import FileService, normalize_path

__all__ = [
    'FILE',
    'DIRECTORY',
    'DirectoryListing',
    'FetchResult',
    'FileEntry',
    'FileInfo',
    'ResponseMeta',
    'UserInfo',
    'FileService',
    'normalize_path',
]
