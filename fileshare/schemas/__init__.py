"""Pydantic schemas for API requests and responses."""

from fileshare.schemas.files import (
    UploadResponse,
    DeleteResponse,
    KeyValidityResponse,
)
from fileshare.schemas.common import ErrorResponse

__all__ = [
    "UploadResponse",
    "DeleteResponse",
    "KeyValidityResponse",
    "ErrorResponse",
]
