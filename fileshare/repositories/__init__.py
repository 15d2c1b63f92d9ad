"""Repository layer for ledger access."""

from fileshare.repositories.ledger import KeyedLedger
from fileshare.repositories.file_repository import FileRecord, FileRepository
from fileshare.repositories.quota_repository import QuotaRecord, QuotaRepository

__all__ = [
    "KeyedLedger",
    "FileRecord",
    "FileRepository",
    "QuotaRecord",
    "QuotaRepository",
]
