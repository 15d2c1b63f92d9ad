"""Configuration settings for the file sharing server."""

import os
from common.constants import (
    DEFAULT_STORAGE_ROOT,
    DEFAULT_FOLDER,
    DEFAULT_DOWNLOAD_LIMIT,
    DEFAULT_LEDGER_LOCK_TIMEOUT_SECONDS,
    DEFAULT_HOST,
    DEFAULT_PORT,
)


STORAGE_ROOT = os.environ.get("FILESHARE_STORAGE_ROOT", DEFAULT_STORAGE_ROOT)

FOLDER = os.environ.get("FILESHARE_FOLDER", DEFAULT_FOLDER)

DOWNLOAD_LIMIT = int(os.environ.get("FILESHARE_DOWNLOAD_LIMIT", str(DEFAULT_DOWNLOAD_LIMIT)))

LEDGER_LOCK_TIMEOUT = float(
    os.environ.get("FILESHARE_LEDGER_LOCK_TIMEOUT", str(DEFAULT_LEDGER_LOCK_TIMEOUT_SECONDS))
)

FILESHARE_HOST = os.environ.get("FILESHARE_HOST", DEFAULT_HOST)

FILESHARE_PORT = int(os.environ.get("FILESHARE_PORT", str(DEFAULT_PORT)))
