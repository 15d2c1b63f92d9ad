"""Pydantic schemas for file sharing endpoints."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response model for file upload."""
    privateKey: str
    publicKey: str


class DeleteResponse(BaseModel):
    """Response model for file deletion."""
    message: str


class KeyValidityResponse(BaseModel):
    """Response model for key validity checks."""
    valid: bool
