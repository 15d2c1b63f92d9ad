"""Shared data type definitions (KeyPair, StoragePaths, DownloadResult)."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class KeyPair:
    """
    Owner and share tokens handed back to the uploader.
    """
    owner_token: str
    share_token: str


@dataclass(frozen=True)
class StoragePaths:
    """
    Locations derived from a stored file name.
    """
    blob_path: Path
    ledger_path: Path
    dir_path: Path


@dataclass
class DownloadResult:
    """
    Everything the transport layer needs to stream a file back.
    """
    file_name: str
    content_type: str
    size: int
    stream: Iterator[bytes]
