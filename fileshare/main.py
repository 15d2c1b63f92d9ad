"""Entry point for the file sharing server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from fileshare import config
from fileshare.exceptions import (
    FileShareException,
    FileNotFoundError,
    QuotaExceededError,
    UnauthorizedAccessError,
    InvalidFileNameError,
    StorageIOError,
    ConflictingWriteError,
)
from fileshare.routes.file_routes import router as file_router

logger = setup_logging('fileshare')

app = FastAPI(
    title="KeyDrop Files",
    description="Key-addressed file sharing with per-origin download limits",
    version="1.0.0"
)


def _loggable_path(path: str) -> str:
    """Hide tokens carried in file URLs."""
    parts = path.split("/")
    if len(parts) > 2 and parts[1] == "files" and parts[2]:
        parts[2] = "***"
    return "/".join(parts)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {_loggable_path(request.url.path)} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {_loggable_path(request.url.path)} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    logger.info(
        f"File sharing service starting up [root={config.STORAGE_ROOT}] [folder={config.FOLDER}] "
        f"[download_limit={config.DOWNLOAD_LIMIT}]"
    )


def _error_response(exc: Exception, status_code: int, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
    )


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"File not found error: {exc} [request_id={request_id}] method={request.method}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND, "FILE_NOT_FOUND")


@app.exception_handler(QuotaExceededError)
async def quota_exceeded_handler(request: Request, exc: QuotaExceededError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Quota exceeded error: {exc} [request_id={request_id}] method={request.method}"
    )
    return _error_response(exc, status.HTTP_429_TOO_MANY_REQUESTS, "QUOTA_EXCEEDED")


@app.exception_handler(UnauthorizedAccessError)
async def unauthorized_access_handler(request: Request, exc: UnauthorizedAccessError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Unauthorized access error: {exc} [request_id={request_id}] method={request.method}"
    )
    return _error_response(exc, status.HTTP_403_FORBIDDEN, "UNAUTHORIZED_ACCESS")


@app.exception_handler(InvalidFileNameError)
async def invalid_file_name_handler(request: Request, exc: InvalidFileNameError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid file name error: {exc} [request_id={request_id}]"
    )
    return _error_response(exc, status.HTTP_400_BAD_REQUEST, "INVALID_FILE_NAME")


@app.exception_handler(ConflictingWriteError)
async def conflicting_write_handler(request: Request, exc: ConflictingWriteError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Conflicting write error: {exc} [request_id={request_id}] method={request.method}"
    )
    return _error_response(exc, status.HTTP_409_CONFLICT, "CONFLICTING_WRITE")


@app.exception_handler(StorageIOError)
async def storage_io_handler(request: Request, exc: StorageIOError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage I/O error: {exc} [request_id={request_id}] method={request.method}",
        exc_info=True
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_IO_FAILURE")


@app.exception_handler(FileShareException)
async def file_share_exception_handler(request: Request, exc: FileShareException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled file sharing error: {exc} [request_id={request_id}] method={request.method}",
        exc_info=True
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


app.include_router(file_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "KeyDrop Files API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "fileshare"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "fileshare.main:app",
        host=config.FILESHARE_HOST,
        port=config.FILESHARE_PORT,
    )


if __name__ == "__main__":
    main()
