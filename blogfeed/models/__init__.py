"""Data models for the article store."""

from .article import ArticleInput, SavedArticle, SavedBy
from .index import ArchiveEntry, IndexDocument, IndexStats, UrlEntry
from .partition import PartitionDocument
from .results import ArchiveResult, CategoryInfo, MonthInfo, SaveResult, StoreStats

__all__ = [
    "ArchiveEntry",
    "ArchiveResult",
    "ArticleInput",
    "CategoryInfo",
    "IndexDocument",
    "IndexStats",
    "MonthInfo",
    "PartitionDocument",
    "SaveResult",
    "SavedArticle",
    "SavedBy",
    "StoreStats",
    "UrlEntry",
]
