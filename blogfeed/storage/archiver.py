"""Monthly archiver: moves stale articles out of the current partition."""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..models import ArchiveResult, SavedArticle
from .ids import month_key, previous_month_key, week_file_name, week_of_month
from .index import ArticleIndex
from .partitions import ArchiveStore, CurrentPartition

logger = logging.getLogger(__name__)


def group_by_week(articles: List[SavedArticle]) -> Dict[str, List[SavedArticle]]:
    """Group articles of one month by week document name."""
    weeks: Dict[str, List[SavedArticle]] = defaultdict(list)
    for article in articles:
        weeks[week_file_name(week_of_month(article.saved_at))].append(article)
    return dict(weeks)


def archive_month(
    archives: ArchiveStore,
    index: ArticleIndex,
    month: str,
    articles: List[SavedArticle],
    now: datetime,
) -> List[str]:
    """Write ``articles`` into the week documents of ``month`` and catalogue them.

    Articles already present in a week document (same link) are not written
    twice, so an interrupted run can be repeated. Returns the week documents
    touched.
    """
    groups = group_by_week(articles)
    for week_file, week_articles in sorted(groups.items()):
        existing = archives.load_week(month, week_file).articles
        known = {a.link for a in existing}
        merged = existing + [a for a in week_articles if a.link not in known]
        merged.sort(key=lambda a: a.saved_at, reverse=True)
        archives.write_week(month, week_file, merged, now)

    previous = index.get_archive(month)
    weeks = set(groups)
    if previous is not None:
        weeks.update(previous.weeks)
    count = len(archives.load_month(month))
    index.upsert_archive(month, sorted(weeks), count)
    return sorted(groups)


class Archiver:
    """Relocates articles of past months from the current partition to archives."""

    def __init__(self, current: CurrentPartition, archives: ArchiveStore, index_path: Path) -> None:
        self.current = current
        self.archives = archives
        self.index_path = index_path

    def archive_previous_month(self, now: datetime) -> Optional[ArchiveResult]:
        """Archive everything saved before the current month.

        Normally that is only the previous month; older leftovers (a missed
        run) are archived into their own months too. Returns None when the
        current partition holds nothing stale.
        """
        current_month = month_key(now)
        previous_month = previous_month_key(now)

        document = self.current.load()
        keep: List[SavedArticle] = []
        stale: Dict[str, List[SavedArticle]] = defaultdict(list)
        for article in document.articles:
            article_month = month_key(article.saved_at)
            if article_month < current_month:
                stale[article_month].append(article)
            else:
                keep.append(article)

        if not stale:
            logger.info("Nothing to archive for %s", previous_month)
            return None

        index = ArticleIndex.load(self.index_path)
        weeks_by_month: Dict[str, List[str]] = {}
        for month in sorted(stale):
            weeks_by_month[month] = archive_month(self.archives, index, month, stale[month], now)
            logger.info(
                "Archived %d articles of %s into %d week documents",
                len(stale[month]),
                month,
                len(weeks_by_month[month]),
            )
        index.save(self.index_path, now)

        document.articles = keep
        document.month = current_month
        self.current.save(document, now)

        month = previous_month if previous_month in stale else max(stale)
        return ArchiveResult(
            archived_count=sum(len(v) for v in stale.values()),
            month=month,
            weeks=weeks_by_month[month],
            months=sorted(stale),
        )
