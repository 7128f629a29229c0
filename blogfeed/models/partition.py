"""Partition document shared by the current month and archive weeks."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .article import SavedArticle
from .base import StoreModel


class PartitionDocument(StoreModel):
    """A bounded list of articles for one period."""

    month: str = Field("", description="Month key (YYYY-MM)")
    articles: List[SavedArticle] = Field(default_factory=list)
    last_updated: Optional[datetime] = Field(None, description="Last write of the document")
