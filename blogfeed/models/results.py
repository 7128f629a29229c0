"""Result models returned by the store."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import StoreModel
from .index import ArchiveEntry


class SaveResult(StoreModel):
    """Outcome of a save batch."""

    saved: int = Field(0, description="Articles newly stored")
    duplicates: int = Field(0, description="Articles skipped as already known")
    total: int = Field(0, description="Articles in the store after the batch")
    rejected: int = Field(0, description="Malformed inputs ignored")


class ArchiveResult(StoreModel):
    """Outcome of a monthly archive run."""

    archived_count: int = Field(..., description="Articles moved out of the current partition")
    month: str = Field(..., description="Month that was archived")
    weeks: List[str] = Field(default_factory=list, description="Week documents written for that month")
    months: List[str] = Field(default_factory=list, description="Every month touched by the run")


class StoreStats(StoreModel):
    """Snapshot of the index statistics."""

    total_articles: int
    current_month_count: int
    by_category: Dict[str, int]
    by_source: Dict[str, int]
    by_month: Dict[str, int]
    last_updated: Optional[datetime] = None
    archives: List[ArchiveEntry] = Field(default_factory=list)


class CategoryInfo(StoreModel):
    name: str
    slug: str
    count: int


class MonthInfo(StoreModel):
    month: str
    article_count: int
    is_archived: bool
    weeks: Optional[int] = None
