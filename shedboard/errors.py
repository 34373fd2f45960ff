"""
Exceptions raised at the storage, network and import boundaries.
"""


class BoardError(Exception):
    """Base class for all shed board errors."""
    pass


class SchemaError(BoardError, ValueError):
    """Raised when a record dict does not match the expected shape."""
    pass


class CorruptStorageError(BoardError):
    """Raised when a stored collection cannot be parsed or validated."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored data under '{key}' is corrupt: {reason}")
        self.key = key
        self.reason = reason


class InvalidSnapshotError(BoardError):
    """Raised when a fetched shared snapshot has the wrong shape."""
    pass


class InvalidImportError(BoardError):
    """Raised when an imported board file is rejected. The message is user-facing."""
    pass


class ConfigError(BoardError):
    """Raised when configuration is invalid or unreadable."""
    pass
