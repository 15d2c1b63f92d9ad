"""Project-wide constants (storage layout names, defaults, server port)."""

DEFAULT_STORAGE_ROOT: str = "/app/data"
DEFAULT_FOLDER: str = "uploads"
LEDGER_FILE_NAME: str = "data.json"
USERS_DATA_DIR: str = "usersData"
STAGING_DIR: str = ".staging"

DEFAULT_DOWNLOAD_LIMIT: int = 10
DEFAULT_LEDGER_LOCK_TIMEOUT_SECONDS: float = 5.0

TOKEN_BYTES: int = 32
STREAM_PIECE_SIZE: int = 64 * 1024

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
