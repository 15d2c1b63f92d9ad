"""Maps file names and tokens to locations under the configured storage root."""

import uuid
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional, Union

from common.constants import LEDGER_FILE_NAME, STAGING_DIR, USERS_DATA_DIR
from common.logging_config import get_logger
from common.types import StoragePaths
from fileshare.exceptions import FileNotFoundError, InvalidFileNameError
from fileshare.repositories.file_repository import FileRecord, FileRepository

logger = get_logger(__name__)


class PathResolver:
    """
    Resolve storage locations relative to an explicit root.

    Layout::

        <root>/<folder>/data.json      file ledger
        <root>/<folder>/<blob>         blobs
        <root>/usersData/data.json     quota ledger
        <root>/.staging/               uploads in progress

    Attributes:
        root: Base directory for all storage
        folder: Name of the blob directory under root
    """

    def __init__(
        self,
        root: Union[str, Path],
        folder: str,
        file_repo: Optional[FileRepository] = None,
    ):
        self.root = Path(root).resolve()
        self.folder = folder
        self.file_repo = file_repo or FileRepository()

    @property
    def dir_path(self) -> Path:
        return self.root / self.folder

    @property
    def ledger_path(self) -> Path:
        return self.dir_path / LEDGER_FILE_NAME

    @property
    def staging_dir(self) -> Path:
        return self.root / STAGING_DIR

    def aside_path(self, path: Union[str, Path]) -> Path:
        """Hidden sibling name used while `path` is being deleted."""
        path = Path(path)
        return path.parent / f".deleting_{uuid.uuid4().hex}_{path.name}"

    def resolve(self, file_name: str) -> StoragePaths:
        """
        Compute where a stored file name lives.

        Args:
            file_name: Name of the blob inside the storage folder

        Returns:
            StoragePaths with blob, ledger and directory paths
        """
        return StoragePaths(
            blob_path=self.dir_path / file_name,
            ledger_path=self.ledger_path,
            dir_path=self.dir_path,
        )

    def quota_ledger_path(self, blob_path: Union[str, Path]) -> Path:
        """Return the quota ledger sitting two levels above `blob_path`."""
        return Path(blob_path).parent.parent / USERS_DATA_DIR / LEDGER_FILE_NAME

    def find_record(self, key: str) -> FileRecord:
        """
        Find the record carrying an owner or share token.

        Raises:
            FileNotFoundError: If no record carries `key`
        """
        record = self.file_repo.find_by_key(self.ledger_path, key)
        if record is None:
            logger.debug("Key did not resolve to any record")
            raise FileNotFoundError("file does not exist")
        return record

    def reverse_resolve(self, key: str) -> Path:
        """
        Find the blob path stored for an owner or share token.

        Args:
            key: Owner token or share token

        Returns:
            Stored blob path of the first matching record

        Raises:
            FileNotFoundError: If no record carries `key`
        """
        return Path(self.find_record(key).file_path)

    @staticmethod
    def safe_file_name(file_name: str) -> str:
        """
        Drop directory components (POSIX or Windows style) from a client name.

        Raises:
            InvalidFileNameError: If nothing usable remains of `file_name`
        """
        base = PureWindowsPath(PurePosixPath(file_name or "").name).name.strip()
        if not base or base in (".", ".."):
            raise InvalidFileNameError(f"Invalid file name: {file_name!r}")
        return base

    def stored_name(self, file_name: str) -> str:
        """
        Build a collision-free blob name from a client supplied file name.

        A random prefix keeps two uploads of the same name in separate blobs.
        """
        return f"{uuid.uuid4().hex}_{self.safe_file_name(file_name)}"
