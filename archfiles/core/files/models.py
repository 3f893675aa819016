"""
File data models.

Contains data classes for remote files, directory listings and fetch results.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from ..exceptions import UnknownError

FILE = 'file'
DIRECTORY = 'directory'

T = TypeVar("T")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the server ('...Z' suffix)."""
    if not value:
        return None
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class ResponseMeta:
    """Status code and headers of an HTTP response."""
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get('Content-Type', '')

    @property
    def content_length(self) -> Optional[int]:
        value = self.headers.get('Content-Length')
        return int(value) if value and value.isdigit() else None


@dataclass(frozen=True)
class FetchResult:
    """
    Result of a successful fetch.

    Attributes:
        path: Remote path that was fetched
        data: Raw file bytes
        response: Status code and headers of the response
    """
    path: str
    data: bytes
    response: ResponseMeta

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def headers(self) -> Mapping[str, str]:
        return self.response.headers

    @property
    def size(self) -> int:
        return len(self.data)

    def text(self, encoding: str = 'utf-8') -> str:
        """Decode the payload as text."""
        return self.data.decode(encoding)


@dataclass
class FileEntry:
    """A single entry of a directory listing."""
    name: str
    type: str
    path: str
    size: Optional[int] = None
    modified: Optional[datetime] = None

    @property
    def is_dir(self) -> bool:
        return self.type == DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.type == FILE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileEntry':
        """
        Create from a server listing item.

        Args:
            data: Dictionary with name, type, size, modified and path

        Returns:
            FileEntry instance
        """
        return cls(
            name=data['name'],
            type=data.get('type', FILE),
            path=data.get('path') or data['name'],
            size=data.get('size'),
            modified=parse_timestamp(data.get('modified')),
        )

    def __str__(self) -> str:
        return f"{self.name}/" if self.is_dir else self.name


@dataclass
class DirectoryListing:
    """Contents of a remote directory, directories first then by name."""
    path: str
    entries: List[FileEntry] = field(default_factory=list)

    def __post_init__(self):
        self.entries.sort(key=lambda e: (not e.is_dir, e.name))

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def files(self) -> List[FileEntry]:
        return [e for e in self.entries if e.is_file]

    @property
    def directories(self) -> List[FileEntry]:
        return [e for e in self.entries if e.is_dir]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DirectoryListing':
        return cls(
            path=data.get('path', '/'),
            entries=[FileEntry.from_dict(item) for item in data.get('files', [])],
        )


@dataclass
class FileInfo:
    """Metadata of a single remote file or directory."""
    name: str
    type: str
    path: str
    size: int = 0
    modified: Optional[datetime] = None
    created: Optional[datetime] = None

    @property
    def is_dir(self) -> bool:
        return self.type == DIRECTORY

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileInfo':
        return cls(
            name=data['name'],
            type=data.get('type', FILE),
            path=data.get('path', ''),
            size=data.get('size') or 0,
            modified=parse_timestamp(data.get('modified')),
            created=parse_timestamp(data.get('created')),
        )


@dataclass(frozen=True)
class UserInfo:
    """User reported by the server for the current session."""
    username: str


def parse_model(factory: Callable[[Any], T], data: Any) -> T:
    """
    Build a model from a decoded JSON body.

    Raises:
        UnknownError: If the body is valid JSON of the wrong shape
    """
    try:
        return factory(data)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise UnknownError(f"Malformed response body: {type(e).__name__}: {e}") from e
