"""File sharing API routes."""

from typing import Literal
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from fileshare.schemas.common import ErrorResponse
from fileshare.schemas.files import DeleteResponse, KeyValidityResponse, UploadResponse
from fileshare.services.file_service import FileService

router = APIRouter(prefix="/files", tags=["Files"])

ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def get_file_service() -> FileService:
    """FastAPI dependency building a service from the process configuration."""
    return FileService()


def get_origin(request: Request) -> str:
    """Identify the requester for download quota accounting."""
    return request.client.host if request.client else "unknown"


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def upload_file(
    file: UploadFile = File(...),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a file.

    Parameters:
        - file: File to upload (multipart/form-data)

    Returns:
        - privateKey: Owner token, required to delete the file
        - publicKey: Share token, required to download the file

    Raises:
        - 400: File name is unusable
        - 409: Ledger busy
        - 500: Storage failure
    """
    keys = await file_service.upload(file.filename, file.file)
    return UploadResponse(privateKey=keys.owner_token, publicKey=keys.share_token)


@router.get(
    "/{public_key}",
    responses={status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def download_file(
    public_key: str,
    origin: str = Depends(get_origin),
    file_service: FileService = Depends(get_file_service),
):
    """
    Download a file by its share token.

    Each origin gets a limited number of downloads.

    Returns:
        - StreamingResponse with file data

    Raises:
        - 404: Unknown key or file removed
        - 429: Download limit reached for this origin
    """
    result = await file_service.download(public_key, origin)

    return StreamingResponse(
        result.stream,
        media_type=result.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.file_name)}",
            "Content-Length": str(result.size),
        },
    )


@router.delete(
    "/{private_key}",
    response_model=DeleteResponse,
    responses={status.HTTP_403_FORBIDDEN: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def delete_file(
    private_key: str,
    file_service: FileService = Depends(get_file_service),
):
    """
    Delete a file by its owner token.

    Raises:
        - 403: A share token was supplied
        - 404: Unknown key or file already removed
        - 500: Storage failure, nothing was removed
    """
    await file_service.delete(private_key)
    return DeleteResponse(message="success")


@router.get("/{key}/validity", response_model=KeyValidityResponse, responses=ERROR_RESPONSES)
async def check_key(
    key: str,
    kind: Literal["public", "private"] = Query("public", description="Which token kind to check"),
    file_service: FileService = Depends(get_file_service),
):
    """
    Check whether `key` is a valid token of the given kind.

    Raises:
        - 404: Key unknown or file removed
    """
    if kind == "private":
        valid = await file_service.is_valid_private_key(key)
    else:
        valid = await file_service.is_valid_public_key(key)
    return KeyValidityResponse(valid=valid)
