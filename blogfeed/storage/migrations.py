"""Schema versions of the data directory and the migrations between them.

Versions:

0. empty data directory
1. single ``saved-articles.json`` file holding every article
2. index + current + archives layout without a ``schemaVersion`` field
3. same layout, index stamped with ``schemaVersion``
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser
from pydantic import ValidationError

from ..config import StorageConfig
from ..models import IndexDocument, PartitionDocument, SavedArticle
from ..models.base import ensure_utc
from ..models.index import CURRENT_SCHEMA_VERSION
from .archiver import archive_month
from .documents import read_document, write_document
from .errors import SchemaVersionError, StorageError
from .ids import month_key, record_id
from .index import ArticleIndex
from .partitions import ArchiveStore, CurrentPartition

logger = logging.getLogger(__name__)

LEGACY_BACKUP_SUFFIX = ".backup"

Migration = Callable[[StorageConfig, datetime], int]


def detect_schema_version(config: StorageConfig) -> int:
    """Inspect the data directory and report its layout version."""
    if config.index_path.exists():
        raw = read_document(config.index_path)
        if raw is None:
            # Corrupt index: left to ArticleIndex.load, which starts fresh.
            return CURRENT_SCHEMA_VERSION
        version = raw.get("schemaVersion")
        if version is None:
            return 2
        try:
            return int(version)
        except (TypeError, ValueError):
            raise SchemaVersionError(version)
    if config.legacy_path.exists():
        return 1
    return 0


def create_empty(config: StorageConfig, now: datetime) -> int:
    """Initialise an empty index and current partition."""
    ArticleIndex().save(config.index_path, now)
    current = CurrentPartition(config.current_path)
    if not current.path.exists():
        current.save(PartitionDocument(month=month_key(now)), now)
    config.archives_path.mkdir(parents=True, exist_ok=True)
    logger.info("Initialised article store in %s", config.data_path)
    return CURRENT_SCHEMA_VERSION


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return ensure_utc(date_parser.parse(value))
    except (ValueError, OverflowError):
        return None


def _legacy_article(entry: Any, now: datetime) -> Optional[SavedArticle]:
    if not isinstance(entry, dict):
        return None
    link = entry.get("link")
    if not isinstance(link, str) or not link.strip() or not entry.get("title"):
        return None

    saved_at = _parse_timestamp(entry.get("savedAt")) or _parse_timestamp(entry.get("pubDate")) or now
    saved_by = entry.get("savedBy") if entry.get("savedBy") in ("manual", "auto") else "manual"
    try:
        return SavedArticle.model_validate(
            {
                **entry,
                "id": entry.get("id") or record_id(link.strip()),
                "savedAt": saved_at,
                "savedBy": saved_by,
            }
        )
    except ValidationError:
        return None


def import_legacy(config: StorageConfig, now: datetime) -> int:
    """Import the single-file store into the partitioned layout.

    Each article keeps its own ``savedAt`` (falling back to ``pubDate``,
    then now): current-month articles go to the current partition, older
    ones straight into their archive month.
    """
    raw = read_document(config.legacy_path)
    if raw is None or not isinstance(raw.get("articles", []), list):
        logger.error("Cannot read legacy store %s, starting empty", config.legacy_path)
        return create_empty(config, now)

    index = ArticleIndex()
    archives = ArchiveStore(config.archives_path)
    current_month = month_key(now)
    current_articles: List[SavedArticle] = []
    older: Dict[str, List[SavedArticle]] = defaultdict(list)
    skipped = 0

    for entry in raw.get("articles", []):
        article = _legacy_article(entry, now)
        if article is None or index.exists(article.link):
            skipped += 1
            continue
        article_month = month_key(article.saved_at)
        index.record_save(article.link, article_month, article.saved_at, article.category, article.source)
        if article_month >= current_month:
            current_articles.append(article)
        else:
            older[article_month].append(article)

    for month in sorted(older):
        archive_month(archives, index, month, older[month], now)

    current_articles.sort(key=lambda a: a.saved_at, reverse=True)
    CurrentPartition(config.current_path).save(
        PartitionDocument(month=current_month, articles=current_articles), now
    )
    config.archives_path.mkdir(parents=True, exist_ok=True)
    index.save(config.index_path, now)

    backup = config.legacy_path.with_name(config.legacy_path.name + LEGACY_BACKUP_SUFFIX)
    config.legacy_path.replace(backup)
    logger.info(
        "Migrated %d legacy articles (%d skipped, %d archived months); original kept as %s",
        index.total_articles,
        skipped,
        len(older),
        backup.name,
    )
    return CURRENT_SCHEMA_VERSION


def _repair_partition(path: Path, now: datetime) -> None:
    """Fill in ``id`` and ``savedAt`` on unversioned partition records."""
    raw = read_document(path)
    if raw is None or not isinstance(raw.get("articles"), list):
        return

    articles = [a for a in (_legacy_article(entry, now) for entry in raw["articles"]) if a is not None]
    dropped = len(raw["articles"]) - len(articles)
    month = raw.get("month") if isinstance(raw.get("month"), str) else ""
    document = PartitionDocument(month=month, articles=articles, last_updated=now)
    write_document(path, document.to_document())
    if dropped:
        logger.warning("Dropped %d unreadable articles from %s", dropped, path)


def stamp_schema_version(config: StorageConfig, now: datetime) -> int:
    """Adopt an index written before versioning.

    The layout is unchanged, but partition records written without ``id``
    or ``savedAt`` are completed so they validate. An index that still
    fails validation is left untouched and the migration stops.
    """
    raw = read_document(config.index_path)
    try:
        document = IndexDocument.model_validate(raw or {})
    except ValidationError as e:
        logger.error("Cannot upgrade %s, leaving it unchanged: %s", config.index_path, e)
        raise StorageError(f"Unversioned index {config.index_path} is invalid: {e}") from e

    _repair_partition(config.current_path, now)
    archives = ArchiveStore(config.archives_path)
    for month in archives.months():
        for week_file in archives.week_files(month):
            _repair_partition(archives.month_dir(month) / week_file, now)

    index = ArticleIndex(document)
    index.document.schema_version = CURRENT_SCHEMA_VERSION
    index.save(config.index_path, now)
    logger.info("Stamped %s with schema version %d", config.index_path, CURRENT_SCHEMA_VERSION)
    return CURRENT_SCHEMA_VERSION


MIGRATIONS: Dict[int, Migration] = {
    0: create_empty,
    1: import_legacy,
    2: stamp_schema_version,
}


def run_migrations(config: StorageConfig, now: datetime) -> int:
    """Bring the data directory up to the current schema version."""
    version = detect_schema_version(config)
    if version > CURRENT_SCHEMA_VERSION or version < 0:
        raise SchemaVersionError(version)

    while version < CURRENT_SCHEMA_VERSION:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise SchemaVersionError(version)
        logger.debug("Running storage migration from version %d", version)
        version = migration(config, now)
    return version
