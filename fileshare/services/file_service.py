"""File sharing service: upload, download, delete and token checks."""

import asyncio
import functools
import mimetypes
from pathlib import Path
from typing import Optional, Union

from common.constants import DEFAULT_CONTENT_TYPE
from common.logging_config import get_logger
from common.types import DownloadResult, KeyPair
from fileshare import blob_storage, config
from fileshare.blob_storage import BlobSource
from fileshare.exceptions import FileNotFoundError, FileShareException, UnauthorizedAccessError
from fileshare.keys import generate_keys
from fileshare.paths import PathResolver
from fileshare.repositories.file_repository import FileRecord, FileRepository
from fileshare.repositories.quota_repository import QuotaRepository

logger = get_logger(__name__)


class FileService:
    def __init__(
        self,
        storage_root: Optional[Union[str, Path]] = None,
        folder: Optional[str] = None,
        download_limit: Optional[int] = None,
        lock_timeout: Optional[float] = None,
    ):
        self.download_limit = config.DOWNLOAD_LIMIT if download_limit is None else download_limit
        self.file_repo = FileRepository(lock_timeout=lock_timeout)
        self.quota_repo = QuotaRepository(lock_timeout=lock_timeout)
        self.resolver = PathResolver(
            storage_root if storage_root is not None else config.STORAGE_ROOT,
            folder if folder is not None else config.FOLDER,
            file_repo=self.file_repo,
        )

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def upload(self, file_name: str, data: BlobSource) -> KeyPair:
        """
        Store a file and hand back its owner and share tokens.

        Args:
            file_name: Client supplied file name
            data: Bytes, a binary file-like object, or an iterable of byte pieces

        Returns:
            KeyPair for the new record

        Raises:
            InvalidFileNameError: If file_name has no usable base name
            StorageIOError: If the blob or ledger write fails
            ConflictingWriteError: If the ledger stays locked past the timeout
        """
        return await self._run(self._upload, file_name, data)

    async def download(self, key: str, origin: str) -> DownloadResult:
        """
        Open a stored file for streaming, charging one download to `origin`.

        Raises:
            FileNotFoundError: If key is unknown or the blob is gone
            QuotaExceededError: If origin has no downloads left
        """
        return await self._run(self._download, key, origin)

    async def delete(self, owner_token: str) -> None:
        """
        Remove a stored file and its record.

        Raises:
            FileNotFoundError: If no record carries owner_token, or its blob is
                gone (the stale record is dropped first)
            UnauthorizedAccessError: If a share token is passed instead
            StorageIOError: If the delete cannot complete; nothing is removed
        """
        await self._run(self._delete, owner_token)

    async def is_valid_public_key(self, key: str) -> bool:
        return await self._run(self._is_valid, key, "share_token")

    async def is_valid_private_key(self, key: str) -> bool:
        return await self._run(self._is_valid, key, "owner_token")

    def _upload(self, file_name: str, data: BlobSource) -> KeyPair:
        keys = generate_keys()
        file_name = self.resolver.safe_file_name(file_name)
        paths = self.resolver.resolve(self.resolver.stored_name(file_name))

        staged, size = blob_storage.stage_blob(self.resolver.staging_dir, data)
        committed = False
        try:
            with self.file_repo.locked(paths.ledger_path):
                self.file_repo.ensure(paths.ledger_path)
                blob_storage.commit_blob(staged, paths.blob_path)
                committed = True

                record = FileRecord(
                    file_name=file_name,
                    share_token=keys.share_token,
                    owner_token=keys.owner_token,
                    file_path=str(paths.blob_path),
                )
                self.file_repo.save(paths.ledger_path, record)
        except Exception:
            if committed:
                logger.info(f"Removing blob {paths.blob_path.name} after failed metadata write")
                blob_storage.delete_blob(paths.blob_path)
            else:
                blob_storage.discard_staged(staged)
            raise

        logger.info(f"Uploaded {file_name} ({size} bytes) as {paths.blob_path.name}")
        return keys

    def _download(self, key: str, origin: str) -> DownloadResult:
        record = self.resolver.find_record(key)
        blob_path = Path(record.file_path)
        try:
            f, size = blob_storage.open_blob(blob_path)
        except FileNotFoundError:
            logger.warning(f"Record points at missing blob {blob_path.name}")
            raise

        try:
            remaining = self.quota_repo.check_and_decrement(
                self.resolver.quota_ledger_path(blob_path),
                origin,
                self.download_limit,
            )
        except Exception:
            f.close()
            raise
        stream = blob_storage.stream_blob(f)

        content_type, _ = mimetypes.guess_type(record.file_name)

        logger.info(f"Serving {record.file_name} to {origin} [remaining={remaining}]")
        return DownloadResult(
            file_name=record.file_name,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=size,
            stream=stream,
        )

    def _delete(self, owner_token: str) -> None:
        ledger_path = self.resolver.ledger_path

        with self.file_repo.locked(ledger_path):
            record = self.file_repo.find_by_key(ledger_path, owner_token)
            if record is None:
                raise FileNotFoundError("file does not exist")
            if record.owner_token != owner_token:
                raise UnauthorizedAccessError("Only the owner token can delete a file")

            blob_path = Path(record.file_path)
            if not blob_storage.blob_exists(blob_path):
                logger.warning(f"Dropping record for {record.file_name}; blob {blob_path.name} is gone")
                self.file_repo.delete(ledger_path, owner_token)
                raise FileNotFoundError("file does not exist")

            dir_path = blob_path.parent
            if blob_storage.list_blobs(dir_path) == [blob_path.name]:
                aside = blob_storage.set_aside(dir_path, self.resolver.aside_path(dir_path))
                logger.info(f"Removed last file {record.file_name}; dropping directory {dir_path.name}")
            else:
                aside = blob_storage.set_aside(blob_path, self.resolver.aside_path(blob_path))
                try:
                    self.file_repo.delete(ledger_path, owner_token)
                except FileShareException:
                    logger.error(f"Ledger update failed, restoring {blob_path.name}")
                    blob_storage.restore(aside, blob_path)
                    raise
                logger.info(f"Deleted {record.file_name}")

        if not blob_storage.purge(aside):
            logger.warning(f"Leftover data from deleted file remains at {aside}")

    def _is_valid(self, key: str, field: str) -> bool:
        blob_path = self.resolver.reverse_resolve(key)
        if not blob_storage.blob_exists(blob_path):
            raise FileNotFoundError("file does not exist")

        for record in self.file_repo.read_all(self.resolver.ledger_path):
            if getattr(record, field) == key:
                return True
        return False
