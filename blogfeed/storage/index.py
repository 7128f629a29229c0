"""Article index: deduplication map, statistics and archive catalogue."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..models import ArchiveEntry, IndexDocument, IndexStats, UrlEntry
from .documents import load_model, write_document

logger = logging.getLogger(__name__)


def _increment(counts: Dict[str, int], key: str) -> None:
    counts[key] = counts.get(key, 0) + 1


def _decrement(counts: Dict[str, int], key: str) -> None:
    remaining = counts.get(key, 0) - 1
    if remaining > 0:
        counts[key] = remaining
    else:
        counts.pop(key, None)


class ArticleIndex:
    """In-memory view of the index document.

    Every link ever saved (and not deleted since) has exactly one entry in
    ``url_index``; the three stat maps and ``total_articles`` are kept in
    step with it.
    """

    def __init__(self, document: Optional[IndexDocument] = None) -> None:
        self.document = document if document is not None else IndexDocument()

    @classmethod
    def load(cls, path: Path) -> "ArticleIndex":
        """Load the index, starting fresh when the document is missing or corrupt."""
        document = load_model(path, IndexDocument)
        if document is None:
            if path.exists():
                logger.warning("Starting with an empty index in place of %s", path)
            return cls()
        return cls(document)

    def save(self, path: Path, now: datetime) -> None:
        self.document.last_updated = now
        write_document(path, self.document.to_document())

    @property
    def total_articles(self) -> int:
        return self.document.total_articles

    @property
    def stats(self) -> IndexStats:
        return self.document.stats

    @property
    def last_updated(self) -> Optional[datetime]:
        return self.document.last_updated

    def exists(self, link: str) -> bool:
        return link in self.document.url_index

    def record_save(
        self,
        link: str,
        month: str,
        saved_at: datetime,
        category: str,
        source: str,
    ) -> None:
        """Register a newly stored article."""
        self.document.url_index[link] = UrlEntry(file_date=month, saved_at=saved_at)
        _increment(self.stats.by_category, category)
        _increment(self.stats.by_source, source)
        _increment(self.stats.by_month, month)
        self.document.total_articles += 1

    def record_delete(self, link: str, category: str, source: str, month: str) -> None:
        """Forget a deleted article; counts are clamped at zero."""
        self.document.url_index.pop(link, None)
        _decrement(self.stats.by_category, category)
        _decrement(self.stats.by_source, source)
        _decrement(self.stats.by_month, month)
        self.document.total_articles = max(0, self.document.total_articles - 1)

    def list_archives(self) -> List[ArchiveEntry]:
        return list(self.document.archives)

    def get_archive(self, month: str) -> Optional[ArchiveEntry]:
        for entry in self.document.archives:
            if entry.month == month:
                return entry
        return None

    def upsert_archive(self, month: str, weeks: List[str], count: int) -> ArchiveEntry:
        """Register an archived month, replacing any previous entry for it."""
        entry = self.get_archive(month)
        if entry is None:
            entry = ArchiveEntry(month=month)
            self.document.archives.append(entry)
        entry.weeks = sorted(weeks)
        entry.article_count = count
        self.document.archives.sort(key=lambda a: a.month, reverse=True)
        return entry
