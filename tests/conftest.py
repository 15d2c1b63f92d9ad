"""Shared pytest fixtures for all tests."""

import pytest

from fileshare.paths import PathResolver
from fileshare.repositories.file_repository import FileRecord, FileRepository
from fileshare.repositories.quota_repository import QuotaRepository
from fileshare.services.file_service import FileService


@pytest.fixture
def storage_root(tmp_path):
    """
    Create temporary storage root.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to an empty storage root
    """
    root = tmp_path / 'storage'
    root.mkdir()
    return root


@pytest.fixture
def resolver(storage_root):
    return PathResolver(storage_root, 'uploads')


@pytest.fixture
def file_repo():
    return FileRepository(lock_timeout=10.0)


@pytest.fixture
def quota_repo():
    return QuotaRepository(lock_timeout=10.0)


@pytest.fixture
def file_service(storage_root):
    """
    FileService rooted in a temp directory with a download limit of 3.
    """
    return FileService(storage_root=storage_root, folder='uploads', download_limit=3, lock_timeout=10.0)


@pytest.fixture
def make_record():
    """
    Factory for FileRecord instances with distinct tokens.
    """
    def _make(index: int, file_path: str = '/tmp/blob') -> FileRecord:
        return FileRecord(
            file_name=f'file{index}.txt',
            share_token=f'share-{index}',
            owner_token=f'owner-{index}',
            file_path=file_path,
        )
    return _make
