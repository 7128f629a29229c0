"""Shared fixtures: isolated data directories and a controllable clock."""

from datetime import datetime, timezone
from typing import Any, Dict

import pytest

from blogfeed.config import StorageConfig
from blogfeed.storage import FeedStore


class FakeClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args: int) -> None:
        self.now = datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage_config(tmp_path) -> StorageConfig:
    return StorageConfig(data_dir=str(tmp_path / "data"))


@pytest.fixture
def store(storage_config, clock) -> FeedStore:
    return FeedStore(storage_config, clock=clock)


@pytest.fixture
def make_article():
    def _make(link: str, category: str = "Hardware", source: str = "The Verge", **extra: Any) -> Dict[str, Any]:
        article = {
            "title": f"Title for {link}",
            "link": link,
            "description": "An article",
            "source": source,
            "pubDate": "2026-10-14T08:00:00Z",
            "category": category,
        }
        article.update(extra)
        return article

    return _make
