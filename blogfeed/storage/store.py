"""Article store facade used by the feed, scheduler and CLI layers."""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from dateutil import tz
from pydantic import ValidationError

from ..config import StorageConfig
from ..models import (
    ArchiveResult,
    ArticleInput,
    CategoryInfo,
    MonthInfo,
    PartitionDocument,
    SavedArticle,
    SaveResult,
    StoreStats,
)
from ..models.base import ensure_utc
from .archiver import Archiver
from .errors import ConfirmationRequiredError
from .ids import is_month_key, month_key, months_between, previous_month_key, record_id, slugify
from .index import ArticleIndex
from .migrations import run_migrations
from .partitions import ArchiveStore, CurrentPartition

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ArticleLike = Union[ArticleInput, Dict[str, Any]]

SAVED_BY_VALUES = ("manual", "auto")


def _utc_now() -> datetime:
    return datetime.now(tz.UTC)


class FeedStore:
    """Deduplicating, month-partitioned article store on plain JSON files.

    Layout under ``config.data_dir``::

        index.json
        current/articles.json
        archives/<YYYY-MM>/week-NN.json

    Every public method runs its whole read-modify-write cycle under one
    re-entrant lock, so a single instance can be shared between threads.
    Two instances pointed at the same directory are not coordinated.
    """

    def __init__(self, config: Optional[StorageConfig] = None, clock: Optional[Clock] = None) -> None:
        self.config = config if config is not None else StorageConfig()
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._ready = False
        self.current = CurrentPartition(self.config.current_path)
        self.archives = ArchiveStore(self.config.archives_path)
        self.archiver = Archiver(self.current, self.archives, self.config.index_path)

    def now(self) -> datetime:
        return ensure_utc(self._clock())

    def _ensure_ready(self) -> None:
        if self._ready:
            return
        self.config.data_path.mkdir(parents=True, exist_ok=True)
        run_migrations(self.config, self.now())
        self._ready = True

    def initialize(self) -> None:
        """Create the data directory and run pending migrations."""
        with self._lock:
            self._ensure_ready()

    def _load_index(self) -> ArticleIndex:
        self._ensure_ready()
        return ArticleIndex.load(self.config.index_path)

    def exists(self, link: str) -> bool:
        """Whether ``link`` has already been stored."""
        with self._lock:
            return self._load_index().exists(link)

    def save(self, articles: Iterable[ArticleLike], saved_by: str = "manual") -> SaveResult:
        """Store new articles, skipping links the store already knows.

        Inputs without a title or link are rejected and counted in
        ``rejected``. A link repeated inside the batch is saved once and
        counted as a duplicate afterwards.
        """
        if saved_by not in SAVED_BY_VALUES:
            raise ValueError(f"saved_by must be one of {SAVED_BY_VALUES}, got {saved_by!r}")

        with self._lock:
            index = self._load_index()
            document = self.current.load()
            now = self.now()
            current_month = month_key(now)

            result = SaveResult()
            for candidate in articles:
                article_input = self._coerce_input(candidate)
                if article_input is None:
                    result.rejected += 1
                    continue
                if index.exists(article_input.link):
                    result.duplicates += 1
                    continue

                # Stored fields of a re-saved SavedArticle are reassigned below.
                article = SavedArticle(
                    **article_input.model_dump(include=set(ArticleInput.model_fields)),
                    id=record_id(article_input.link),
                    saved_at=now,
                    saved_by=saved_by,
                )
                index.record_save(article.link, current_month, now, article.category, article.source)
                document.articles.append(article)
                result.saved += 1

            if result.saved:
                document.articles.sort(key=lambda a: a.saved_at, reverse=True)
                document.month = current_month
                self.current.save(document, now)
                index.save(self.config.index_path, now)

            result.total = index.total_articles
            logger.info(
                "Saved %d new articles, skipped %d duplicates, rejected %d",
                result.saved,
                result.duplicates,
                result.rejected,
            )
            return result

    @staticmethod
    def _coerce_input(candidate: ArticleLike) -> Optional[ArticleInput]:
        if isinstance(candidate, ArticleInput):
            return candidate
        try:
            return ArticleInput.model_validate(candidate)
        except ValidationError as e:
            logger.warning("Rejected malformed article: %s", e.errors()[0].get("msg", e))
            return None

    def query(
        self,
        category: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        month: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SavedArticle]:
        """Return stored articles, newest first.

        Without ``month`` only the current partition is read, plus the
        archives reaching back to ``since`` when it lies in an earlier
        month. With ``month`` the current partition and that month's archive
        are read and only articles saved in that month are kept.
        """
        with self._lock:
            self._ensure_ready()
            now = self.now()
            current_month = month_key(now)
            since = ensure_utc(since) if since is not None else None
            until = ensure_utc(until) if until is not None else None

            if month:
                if not is_month_key(month):
                    return []
                candidates = self.current.load().articles + self.archives.load_month(month)
                articles = [a for a in candidates if month_key(a.saved_at) == month]
            else:
                articles = list(self.current.load().articles)
                if since is not None and month_key(since) < current_month:
                    for archived in months_between(month_key(since), previous_month_key(now)):
                        articles.extend(self.archives.load_month(archived))

        if category:
            wanted = category.lower()
            articles = [a for a in articles if slugify(a.category) == wanted]
        if since is not None:
            articles = [a for a in articles if a.saved_at >= since]
        if until is not None:
            articles = [a for a in articles if a.saved_at <= until]

        articles.sort(key=lambda a: a.saved_at, reverse=True)
        if limit is not None and limit > 0:
            articles = articles[:limit]
        return articles

    def stats(self) -> StoreStats:
        with self._lock:
            index = self._load_index()
            current_month = month_key(self.now())
        stats = index.stats
        return StoreStats(
            total_articles=index.total_articles,
            current_month_count=stats.by_month.get(current_month, 0),
            by_category=dict(stats.by_category),
            by_source=dict(stats.by_source),
            by_month=dict(stats.by_month),
            last_updated=index.last_updated,
            archives=index.list_archives(),
        )

    def categories(self) -> List[CategoryInfo]:
        """Known categories with their slug, most used first."""
        with self._lock:
            by_category = self._load_index().stats.by_category
        categories = [
            CategoryInfo(name=name, slug=slugify(name), count=count)
            for name, count in by_category.items()
        ]
        categories.sort(key=lambda c: c.count, reverse=True)
        return categories

    def category_from_slug(self, slug: str) -> Optional[str]:
        """Category name whose slug is ``slug``, if the index knows one."""
        for category in self.categories():
            if category.slug == slug:
                return category.name
        return None

    def available_months(self) -> List[MonthInfo]:
        """Current month (when it has articles) followed by archived months."""
        with self._lock:
            index = self._load_index()
            current_month = month_key(self.now())

        months: List[MonthInfo] = []
        current_count = index.stats.by_month.get(current_month, 0)
        if current_count > 0:
            months.append(MonthInfo(month=current_month, article_count=current_count, is_archived=False))
        for archive in index.list_archives():
            months.append(
                MonthInfo(
                    month=archive.month,
                    article_count=archive.article_count,
                    is_archived=True,
                    weeks=len(archive.weeks),
                )
            )
        return months

    def delete(self, article_id: str) -> bool:
        """Delete one article of the current partition.

        Archived articles cannot be deleted individually. The link is
        released, so the same article may be saved again later.
        """
        with self._lock:
            index = self._load_index()
            document = self.current.load()
            article = next((a for a in document.articles if a.id == article_id), None)
            if article is None:
                return False

            now = self.now()
            document.articles = [a for a in document.articles if a is not article]
            self.current.save(document, now)
            index.record_delete(article.link, article.category, article.source, month_key(article.saved_at))
            index.save(self.config.index_path, now)
            logger.info("Deleted article %s (%s)", article_id, article.link)
            return True

    def clear(self, confirm: bool = False) -> None:
        """Remove every article, archives included. Requires ``confirm=True``."""
        if confirm is not True:
            raise ConfirmationRequiredError("clear() destroys every stored article; pass confirm=True")

        with self._lock:
            self._ensure_ready()
            now = self.now()
            self.current.remove()
            self.archives.clear()
            ArticleIndex().save(self.config.index_path, now)
            self.current.save(PartitionDocument(month=month_key(now)), now)
            logger.warning("Cleared every article in %s", self.config.data_path)

    def archive_previous_month(self) -> Optional[ArchiveResult]:
        """Move last month's articles into week archives; None when nothing is stale."""
        with self._lock:
            self._ensure_ready()
            return self.archiver.archive_previous_month(self.now())
