"""Current-month partition and archived week partitions."""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List

from ..models import PartitionDocument, SavedArticle
from .documents import load_model, write_document
from .ids import is_month_key

logger = logging.getLogger(__name__)


class CurrentPartition:
    """The hot partition: every article saved since the last archive run."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> PartitionDocument:
        document = load_model(self.path, PartitionDocument)
        if document is None:
            return PartitionDocument()
        return document

    def save(self, document: PartitionDocument, now: datetime) -> None:
        document.last_updated = now
        write_document(self.path, document.to_document())

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


class ArchiveStore:
    """Cold partitions: ``<root>/<YYYY-MM>/week-NN.json``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def month_dir(self, month: str) -> Path:
        if not is_month_key(month):
            raise ValueError(f"Invalid month key: {month!r}")
        return self.root / month

    def months(self) -> List[str]:
        """Archived month keys on disk, newest first."""
        if not self.root.exists():
            return []
        return sorted(
            (d.name for d in self.root.iterdir() if d.is_dir() and is_month_key(d.name)),
            reverse=True,
        )

    def week_files(self, month: str) -> List[str]:
        if not is_month_key(month):
            return []
        month_dir = self.root / month
        if not month_dir.exists():
            return []
        return sorted(p.name for p in month_dir.glob("*.json"))

    def load_week(self, month: str, week_file: str) -> PartitionDocument:
        document = load_model(self.month_dir(month) / week_file, PartitionDocument)
        if document is None:
            return PartitionDocument(month=month)
        return document

    def load_month(self, month: str) -> List[SavedArticle]:
        """All archived articles of ``month``; empty for unknown months."""
        articles: List[SavedArticle] = []
        for week_file in self.week_files(month):
            articles.extend(self.load_week(month, week_file).articles)
        return articles

    def write_week(
        self,
        month: str,
        week_file: str,
        articles: List[SavedArticle],
        now: datetime,
    ) -> None:
        document = PartitionDocument(month=month, articles=articles, last_updated=now)
        write_document(self.month_dir(month) / week_file, document.to_document())

    def clear(self) -> None:
        if self.root.exists():
            shutil.rmtree(self.root)
            logger.info("Removed archives under %s", self.root)
        self.root.mkdir(parents=True, exist_ok=True)
