"""Service layer for business logic."""

from fileshare.services.file_service import FileService

__all__ = [
    "FileService",
]
