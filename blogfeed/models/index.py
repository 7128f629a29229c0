"""Index document: dedup map, statistics and archive catalogue."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import StoreModel

CURRENT_SCHEMA_VERSION = 3


class UrlEntry(StoreModel):
    """Location of one stored link."""

    file_date: str = Field(..., description="Month key of the partition holding the article")
    saved_at: Optional[datetime] = Field(None, description="Save timestamp, absent in some older indexes")


class IndexStats(StoreModel):
    """Article counts per category, source and month."""

    by_category: Dict[str, int] = Field(default_factory=dict)
    by_source: Dict[str, int] = Field(default_factory=dict)
    by_month: Dict[str, int] = Field(default_factory=dict)


class ArchiveEntry(StoreModel):
    """One archived month and its week documents."""

    month: str = Field(..., description="Month key (YYYY-MM)")
    weeks: List[str] = Field(default_factory=list, description="Week document names")
    article_count: int = Field(0, description="Articles stored across the weeks")


class IndexDocument(StoreModel):
    """Global index of the store."""

    schema_version: int = Field(CURRENT_SCHEMA_VERSION, description="On-disk layout version")
    last_updated: Optional[datetime] = Field(None, description="Last write of the index")
    total_articles: int = Field(0, description="Articles across all partitions")
    url_index: Dict[str, UrlEntry] = Field(default_factory=dict)
    stats: IndexStats = Field(default_factory=IndexStats)
    archives: List[ArchiveEntry] = Field(default_factory=list)
