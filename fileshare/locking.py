"""Per-ledger-path locks guarding read-modify-write cycles."""

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Union

from common.logging_config import get_logger
from fileshare.exceptions import ConflictingWriteError

logger = get_logger(__name__)


class LedgerLockRegistry:
    """
    Hands out one lock per ledger file.

    Paths are normalized with os.path.abspath so that two spellings of the same
    ledger share a lock. Locks are created lazily and kept for the process
    lifetime. Locks are reentrant so a caller holding a ledger lock can
    run further ledger operations on the same file.
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, path: Union[str, Path]) -> threading.RLock:
        key = os.path.abspath(str(path))
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, path: Union[str, Path], timeout: float) -> Iterator[None]:
        """
        Hold the lock for `path` for the duration of the with block.

        Args:
            path: Ledger file path
            timeout: Maximum seconds to wait for the lock

        Raises:
            ConflictingWriteError: If the lock is not acquired within timeout
        """
        lock = self._lock_for(path)
        if not lock.acquire(timeout=timeout):
            logger.warning(f"Timed out after {timeout}s waiting for ledger lock [path={path}]")
            raise ConflictingWriteError(f"Ledger is busy, try again later: {Path(path).name}")
        try:
            yield
        finally:
            lock.release()


ledger_locks = LedgerLockRegistry()
