"""File metadata ledger: one FileRecord per uploaded blob, keyed by owner token."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from common.logging_config import get_logger
from fileshare.repositories.ledger import KeyedLedger, PathLike

logger = get_logger(__name__)

OWNER_TOKEN_FIELD = "privateKey"
SHARE_TOKEN_FIELD = "publicKey"


@dataclass
class FileRecord:
    file_name: str
    share_token: str
    owner_token: str
    file_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            SHARE_TOKEN_FIELD: self.share_token,
            OWNER_TOKEN_FIELD: self.owner_token,
            "filePath": self.file_path,
        }

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "FileRecord":
        return cls(
            file_name=row["fileName"],
            share_token=row[SHARE_TOKEN_FIELD],
            owner_token=row[OWNER_TOKEN_FIELD],
            file_path=row["filePath"],
        )


class FileRepository(KeyedLedger[FileRecord]):
    def __init__(self, lock_timeout: Optional[float] = None, locks=None):
        super().__init__(FileRecord, OWNER_TOKEN_FIELD, lock_timeout=lock_timeout, locks=locks)

    def save(self, path: PathLike, record: FileRecord) -> None:
        replaced = self.upsert(path, record)
        logger.info(
            f"{'Replaced' if replaced else 'Stored'} record for {record.file_name} [ledger={Path(path).name}]"
        )

    def delete(self, path: PathLike, owner_token: str) -> bool:
        return self.remove(path, owner_token)

    def find_by_key(self, path: PathLike, key: str) -> Optional[FileRecord]:
        """Return the first record whose owner or share token equals `key`."""
        return self.find(path, lambda r: key in (r.owner_token, r.share_token))

    def find_by_owner_token(self, path: PathLike, owner_token: str) -> Optional[FileRecord]:
        return self.find(path, lambda r: r.owner_token == owner_token)

    def find_by_share_token(self, path: PathLike, share_token: str) -> Optional[FileRecord]:
        return self.find(path, lambda r: r.share_token == share_token)
