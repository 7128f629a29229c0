"""Errors raised by the article store."""


class StorageError(Exception):
    """Base class for article store errors."""


class ConfirmationRequiredError(StorageError):
    """A destructive operation was called without explicit confirmation."""


class SchemaVersionError(StorageError):
    """The data directory was written by an unknown schema version."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported storage schema version: {version}")
        self.version = version
