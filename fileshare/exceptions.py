"""Custom exception classes for the file sharing core."""


class FileShareException(Exception):
    """
    Base exception class for all file sharing errors.
    """
    pass


class FileNotFoundError(FileShareException):
    """
    Raised when a key does not resolve to a record, or the resolved blob is gone.
    """
    pass


class QuotaExceededError(FileShareException):
    """
    Raised when an origin has no downloads left.
    """
    pass


class UnauthorizedAccessError(FileShareException):
    """
    Raised when a token of the wrong kind is used, e.g. a share token for delete.
    """
    pass


class InvalidFileNameError(FileShareException):
    """
    Raised when an uploaded file name has no usable base name.
    """
    pass


class StorageIOError(FileShareException):
    """
    Raised when reading, writing or deleting a blob or ledger fails.
    """
    pass


class LedgerCorruptedError(StorageIOError):
    """
    Raised when a ledger file holds something other than a JSON array.
    """
    pass


class ConflictingWriteError(FileShareException):
    """
    Raised when a ledger lock cannot be acquired within the configured wait.
    """
    pass
