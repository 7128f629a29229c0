"""Base model class for all stored documents."""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StoreModel(BaseModel):
    """Base model for everything written to the data directory.

    Fields are snake_case in Python and camelCase on disk.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Dump to a JSON-ready dict using the on-disk field names."""
        return self.model_dump(mode="json", by_alias=True)
