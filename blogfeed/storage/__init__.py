"""File-backed article storage."""

from .errors import ConfirmationRequiredError, SchemaVersionError, StorageError
from .ids import record_id, slugify
from .store import FeedStore

__all__ = [
    "ConfirmationRequiredError",
    "FeedStore",
    "SchemaVersionError",
    "StorageError",
    "record_id",
    "slugify",
]
