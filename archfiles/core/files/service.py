"""Remote file access service."""
import posixpath
from pathlib import Path
from typing import Callable, Optional, Union, TYPE_CHECKING

import aiofiles

from .models import DirectoryListing, FetchResult, FileInfo, ResponseMeta, parse_model
from ..exceptions import InvalidRequestError
from ..logging import get_logger

if TYPE_CHECKING:
    from ..api.async_auth import AuthResult
    from ..api.async_client import AsyncAPIClient

CHUNK_SIZE = 131072

ProgressCallback = Callable[[int, int], None]


def normalize_path(path: str) -> str:
    """
    Normalize a remote path to the server's '/a/b' form.

    Raises:
        ValueError: If the path is empty or whitespace
    """
    if path is None or not str(path).strip():
        raise ValueError("Path must be a non-empty string")
    path = str(path).strip().replace('\\', '/')
    if not path.startswith('/'):
        path = '/' + path
    return path


class FileService:
    """
    Reads files and directories from the server on behalf of a session.

    Responsibilities:
    - Directory listings and file metadata
    - In-memory fetch of file contents
    - Streamed download to local disk
    """

    def __init__(self, api: 'AsyncAPIClient', chunk_size: int = CHUNK_SIZE):
        self._api = api
        self._chunk_size = chunk_size
        self._logger = get_logger('archfiles.files')

    async def list_directory(self, path: str, session: 'AuthResult') -> DirectoryListing:
        path = normalize_path(path)
        data = await self._api.list_files(path, session.session_id)
        listing = parse_model(DirectoryListing.from_dict, data)
        self._logger.debug(f"Listed {path}: {len(listing)} entries")
        return listing

    async def file_info(self, path: str, session: 'AuthResult') -> FileInfo:
        path = normalize_path(path)
        data = await self._api.get_file_info(path, session.session_id)
        return parse_model(FileInfo.from_dict, data)

    async def fetch(self, path: str, session: 'AuthResult') -> FetchResult:
        """
        Fetch a whole file into memory.

        Args:
            path: Remote file path
            session: Session to authenticate with

        Returns:
            FetchResult with payload, status and headers
        """
        path = normalize_path(path)
        response = await self._api.download(path, session.session_id)
        self._logger.debug(f"Fetched {path}: {len(response.body)} bytes")
        return FetchResult(
            path=path,
            data=response.body,
            response=ResponseMeta(status=response.status, headers=response.headers)
        )

    async def download(
        self,
        path: str,
        session: 'AuthResult',
        dest: Union[str, Path] = '.',
        progress_callback: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Stream a remote file to disk.

        Args:
            path: Remote file path
            session: Session to authenticate with
            dest: Local file path or directory
            progress_callback: Optional callback(downloaded_bytes, total_bytes)

        Returns:
            Path to the downloaded file

        Raises:
            InvalidRequestError: If the remote path names a directory
            ArchFilesError: For transport and server failures
        """
        path = normalize_path(path)
        name = posixpath.basename(path.rstrip('/'))
        if not name:
            raise InvalidRequestError("Cannot download a directory", response=None)

        target = Path(dest)
        if target.is_dir():
            target = target / name
        target.parent.mkdir(parents=True, exist_ok=True)

        downloaded = 0
        async with self._api.open_download(path, session.session_id) as stream:
            length = stream.headers.get('Content-Length')
            total = int(length) if length and length.isdigit() else 0

            try:
                async with aiofiles.open(target, 'wb') as f:
                    async for chunk in stream.iter_chunks(self._chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)

                        if progress_callback:
                            progress_callback(downloaded, total)
            except BaseException:
                # Never leave a truncated file behind
                target.unlink(missing_ok=True)
                raise

        self._logger.info(f"Downloaded {path} to {target} ({downloaded} bytes)")
        return target
