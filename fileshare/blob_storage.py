"""Manages blob files on disk: streaming write, streaming read and delete."""

import builtins
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Tuple, Union

from common.constants import LEDGER_FILE_NAME, STREAM_PIECE_SIZE
from common.logging_config import get_logger
from fileshare.exceptions import FileNotFoundError, StorageIOError

logger = get_logger(__name__)

BlobSource = Union[bytes, bytearray, BinaryIO, Iterable[bytes]]


def _iter_source(data: BlobSource, piece_size: int) -> Iterator[bytes]:
    if isinstance(data, (bytes, bytearray)):
        yield bytes(data)
        return

    if hasattr(data, "read"):
        while True:
            piece = data.read(piece_size)
            if not piece:
                break
            yield piece
        return

    for piece in data:
        yield piece


def stage_blob(
    staging_dir: Union[str, Path],
    data: BlobSource,
    piece_size: int = STREAM_PIECE_SIZE,
) -> Tuple[Path, int]:
    """
    Stream data into a hidden temp file under `staging_dir`.

    The write is complete and synced when this returns. A failed write
    leaves no temp file behind.

    Args:
        staging_dir: Directory for the temp file, created if missing
        data: Bytes, a binary file-like object, or an iterable of byte pieces
        piece_size: Read size used for file-like sources

    Returns:
        Tuple of (temp file path, number of bytes written)

    Raises:
        StorageIOError: If the write fails or `data` raises while being read
    """
    staging_dir = Path(staging_dir)
    tmp_path = None
    size = 0
    staged = False
    try:
        staging_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".upload_", dir=str(staging_dir))
        with os.fdopen(fd, "wb") as f:
            for piece in _iter_source(data, piece_size):
                f.write(piece)
                size += len(piece)
            f.flush()
            os.fsync(f.fileno())
        staged = True
    except Exception as e:
        logger.error(f"Failed to stage upload: {e}")
        raise StorageIOError(f"Failed to write upload: {e}") from e
    finally:
        if not staged and tmp_path is not None:
            Path(tmp_path).unlink(missing_ok=True)

    logger.debug(f"Staged {size} bytes at {Path(tmp_path).name}")
    return Path(tmp_path), size


def commit_blob(staged_path: Union[str, Path], blob_path: Union[str, Path]) -> None:
    """
    Move a staged file to its final location.

    Raises:
        StorageIOError: If the rename fails
    """
    try:
        os.replace(staged_path, blob_path)
    except OSError as e:
        raise StorageIOError(f"Failed to store {Path(blob_path).name}: {e}") from e


def discard_staged(staged_path: Union[str, Path]) -> None:
    """Remove a staged temp file if it is still there."""
    Path(staged_path).unlink(missing_ok=True)


def open_blob(blob_path: Union[str, Path]) -> Tuple[BinaryIO, int]:
    """
    Open a blob for reading.

    The size comes from the open file, so it matches what will be streamed
    even if the path is removed afterwards. The caller owns the file and must
    close it, either directly or by exhausting stream_blob.

    Returns:
        Tuple of (open binary file, size in bytes)

    Raises:
        FileNotFoundError: If the blob does not exist
        StorageIOError: If the blob cannot be opened
    """
    blob_path = Path(blob_path)
    try:
        f = open(blob_path, "rb")
    except builtins.FileNotFoundError as e:
        raise FileNotFoundError("file does not exist") from e
    except OSError as e:
        raise StorageIOError(f"Failed to open {blob_path.name}: {e}") from e
    return f, os.fstat(f.fileno()).st_size


def stream_blob(f: BinaryIO, piece_size: int = STREAM_PIECE_SIZE) -> Iterator[bytes]:
    """Yield an open blob in pieces, closing it when done."""
    with f:
        while True:
            piece = f.read(piece_size)
            if not piece:
                break
            yield piece



def delete_blob(blob_path: Union[str, Path]) -> bool:
    """
    Delete a blob from disk.

    Returns:
        True if the blob was deleted, False if it didn't exist

    Raises:
        StorageIOError: If the blob exists but cannot be removed
    """
    blob_path = Path(blob_path)
    try:
        blob_path.unlink()
    except builtins.FileNotFoundError:
        return False
    except OSError as e:
        raise StorageIOError(f"Failed to delete {blob_path.name}: {e}") from e
    return True


def blob_exists(blob_path: Union[str, Path]) -> bool:
    return Path(blob_path).is_file()


def list_blobs(dir_path: Union[str, Path]) -> List[str]:
    """
    List blob names in a storage directory.

    The ledger file and hidden files (temp files, pending deletes) are skipped.
    """
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        return []
    return sorted(
        entry.name
        for entry in dir_path.iterdir()
        if entry.is_file() and entry.name != LEDGER_FILE_NAME and not entry.name.startswith(".")
    )


def set_aside(path: Union[str, Path], aside_path: Union[str, Path]) -> Path:
    """
    Rename a blob or directory out of the way so it can be restored or purged.

    Raises:
        FileNotFoundError: If `path` does not exist
        StorageIOError: If the rename fails
    """
    try:
        os.replace(path, aside_path)
    except builtins.FileNotFoundError as e:
        raise FileNotFoundError("file does not exist") from e
    except OSError as e:
        raise StorageIOError(f"Failed to move {Path(path).name}: {e}") from e
    return Path(aside_path)


def restore(aside_path: Union[str, Path], path: Union[str, Path]) -> None:
    """Undo set_aside."""
    try:
        os.replace(aside_path, path)
    except OSError as e:
        logger.critical(f"Failed to restore {Path(path).name} from {aside_path}: {e}")
        raise StorageIOError(f"Failed to restore {Path(path).name}: {e}") from e


def purge(aside_path: Union[str, Path]) -> bool:
    """
    Permanently remove a set-aside blob or directory.

    Returns:
        True if everything was removed, False if leftovers remain on disk
    """
    aside_path = Path(aside_path)
    try:
        if aside_path.is_dir():
            shutil.rmtree(aside_path)
        else:
            aside_path.unlink(missing_ok=True)
    except OSError as e:
        logger.error(f"Failed to purge {aside_path}: {e}", exc_info=True)
        return False
    return True
