"""JSON-array ledger keyed by one record field, shared by file and quota metadata."""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar, Union

from common.logging_config import get_logger
from fileshare import config
from fileshare.exceptions import LedgerCorruptedError, StorageIOError
from fileshare.locking import LedgerLockRegistry, ledger_locks

logger = get_logger(__name__)

R = TypeVar("R")
PathLike = Union[str, Path]


class KeyedLedger(Generic[R]):
    """
    Read-modify-write access to a ledger file holding a JSON array of records.

    Records are dataclasses exposing ``to_dict()`` and a ``from_dict()``
    classmethod; ``key_field`` names the JSON field that identifies a record.
    Every mutation holds the ledger's lock for the whole cycle and replaces the
    file atomically, so concurrent writers cannot lose each other's updates and
    readers never see a partial file.
    """

    def __init__(
        self,
        record_type: Type[R],
        key_field: str,
        lock_timeout: Optional[float] = None,
        locks: Optional[LedgerLockRegistry] = None,
    ):
        self.record_type = record_type
        self.key_field = key_field
        self._lock_timeout = lock_timeout
        self._locks = locks or ledger_locks

    @property
    def lock_timeout(self) -> float:
        if self._lock_timeout is not None:
            return self._lock_timeout
        return config.LEDGER_LOCK_TIMEOUT

    def locked(self, path: PathLike):
        """
        Hold the ledger lock across several operations.

        Ledger methods called inside the block reuse the held lock.
        """
        return self._locks.hold(path, self.lock_timeout)

    def key_of(self, record: R) -> Any:
        return record.to_dict()[self.key_field]

    def read_all(self, path: PathLike) -> List[R]:
        """
        Load every record in the ledger.

        A missing or blank ledger reads as an empty list.

        Raises:
            LedgerCorruptedError: If the file is not a JSON array
            StorageIOError: If the file cannot be read
        """
        return [self.record_type.from_dict(row) for row in self._load(path)]

    def find(self, path: PathLike, predicate: Callable[[R], bool]) -> Optional[R]:
        """Return the first record matching `predicate`, or None."""
        for record in self.read_all(path):
            if predicate(record):
                return record
        return None

    def ensure(self, path: PathLike) -> bool:
        """
        Create the ledger's directory and an empty ledger if it does not exist yet.

        Returns:
            True if a new ledger was written, False if one already existed
        """
        path = Path(path)
        with self._locks.hold(path, self.lock_timeout):
            if path.exists():
                return False
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError(f"Failed to create ledger directory {path.parent}: {e}") from e
            self._write(path, [])
            logger.info(f"Created empty ledger [path={path}]")
            return True

    @contextmanager
    def update(self, path: PathLike) -> Iterator[List[R]]:
        """
        Yield the ledger's records for in-place mutation under the ledger lock.

        The list is written back only if the with block exits cleanly.
        """
        with self._locks.hold(path, self.lock_timeout):
            records = self.read_all(path)
            yield records
            self._write(path, [record.to_dict() for record in records])

    def upsert(self, path: PathLike, record: R) -> bool:
        """
        Replace the record with the same key in place, or append it.

        Returns:
            True if an existing record was replaced, False if appended
        """
        key = self.key_of(record)
        with self.update(path) as records:
            for index, existing in enumerate(records):
                if self.key_of(existing) == key:
                    records[index] = record
                    return True
            records.append(record)
            return False

    def remove(self, path: PathLike, key: Any) -> bool:
        """
        Remove the record whose key field equals `key`.

        Removing an absent key is a no-op and leaves the file untouched.

        Returns:
            True if a record was removed, False if none matched
        """
        with self._locks.hold(path, self.lock_timeout):
            rows = self._load(path)
            for index, row in enumerate(rows):
                if row.get(self.key_field) == key:
                    del rows[index]
                    self._write(path, rows)
                    return True
            return False

    def _load(self, path: PathLike) -> List[Dict[str, Any]]:
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageIOError(f"Failed to read ledger {path}: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse ledger {path}: {e}")
            raise LedgerCorruptedError(f"Ledger {path} is not valid JSON") from e

        if not isinstance(data, list):
            raise LedgerCorruptedError(f"Ledger {path} does not hold a JSON array")
        return data

    def _write(self, path: PathLike, rows: List[Dict[str, Any]]) -> None:
        """Replace the ledger with `rows` through a temp file and rename."""
        path = Path(path)
        payload = json.dumps(rows, indent=2)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageIOError(f"Failed to write ledger {path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
