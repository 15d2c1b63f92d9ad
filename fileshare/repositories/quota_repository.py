"""Per-origin download quota ledger."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from common.logging_config import get_logger
from fileshare.exceptions import QuotaExceededError, StorageIOError
from fileshare.repositories.ledger import KeyedLedger, PathLike

logger = get_logger(__name__)


@dataclass
class QuotaRecord:
    origin: str
    remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {"origin": self.origin, "remaining": self.remaining}

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "QuotaRecord":
        return cls(origin=row["origin"], remaining=int(row["remaining"]))


class QuotaRepository(KeyedLedger[QuotaRecord]):
    def __init__(self, lock_timeout: Optional[float] = None, locks=None):
        super().__init__(QuotaRecord, "origin", lock_timeout=lock_timeout, locks=locks)

    def check_and_decrement(self, path: PathLike, origin: str, default_limit: int) -> int:
        """
        Consume one download for `origin`.

        The first download seen from an origin seeds its record with
        `default_limit` and is not counted against it. Later downloads
        decrement by one until the record reaches zero.

        Args:
            path: Quota ledger path
            origin: Requester identity, typically a client address
            default_limit: Allowance for an origin seen for the first time

        Returns:
            Downloads remaining for `origin` after this call

        Raises:
            QuotaExceededError: If the origin has no downloads left; nothing is written
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create quota directory {path.parent}: {e}") from e

        with self.update(path) as records:
            for record in records:
                if record.origin != origin:
                    continue
                if record.remaining <= 0:
                    logger.warning(f"Download limit reached [origin={origin}]")
                    raise QuotaExceededError("download limit reached!")
                record.remaining -= 1
                logger.debug(f"Quota decremented [origin={origin}] [remaining={record.remaining}]")
                return record.remaining

            records.append(QuotaRecord(origin=origin, remaining=default_limit))
            logger.info(f"First download from new origin [origin={origin}] [limit={default_limit}]")
            return default_limit

    def get_remaining(self, path: PathLike, origin: str) -> Optional[int]:
        """Return the stored allowance for `origin`, or None if never seen."""
        record = self.find(path, lambda r: r.origin == origin)
        return record.remaining if record else None
