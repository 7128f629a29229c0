"""Schema detection and migrations of the data directory."""

import json
from datetime import datetime, timezone

import pytest

from blogfeed.models.index import CURRENT_SCHEMA_VERSION
from blogfeed.storage import FeedStore, SchemaVersionError, StorageError, record_id
from blogfeed.storage.migrations import detect_schema_version, run_migrations

LEGACY_ARTICLES = [
    {
        "id": "art_legacy1",
        "title": "Current month",
        "link": "https://cur",
        "description": "",
        "source": "Verge",
        "pubDate": "2026-10-04T07:00:00.000Z",
        "category": "Hardware",
        "savedAt": "2026-10-05T08:00:00.000Z",
        "savedBy": "auto",
    },
    {
        "title": "August",
        "link": "https://old",
        "source": "Wired",
        "category": "IA & Data",
        "keyPoints": ["a", "b"],
        "savedAt": "2026-08-12T08:00:00.000Z",
    },
    {
        "title": "Only a feed date",
        "link": "https://rfc",
        "source": "Wired",
        "category": "IA & Data",
        "pubDate": "Mon, 07 Sep 2026 10:00:00 GMT",
    },
    {"title": "Duplicate", "link": "https://cur", "category": "Hardware"},
    {"title": "No link"},
    {"title": "Undated", "link": "https://undated", "category": "Hardware", "savedBy": "robot"},
]


def write_legacy(storage_config, articles):
    storage_config.data_path.mkdir(parents=True, exist_ok=True)
    storage_config.legacy_path.write_text(
        json.dumps({"articles": articles, "stats": {"byCategory": {"stale": 99}}}),
        encoding="utf-8",
    )


def test_fresh_directory_is_initialised(store, storage_config):
    assert detect_schema_version(storage_config) == 0

    store.initialize()

    assert detect_schema_version(storage_config) == CURRENT_SCHEMA_VERSION
    assert storage_config.current_path.exists()
    assert storage_config.archives_path.is_dir()
    index = json.loads(storage_config.index_path.read_text(encoding="utf-8"))
    assert index["totalArticles"] == 0


def test_legacy_file_is_detected(storage_config):
    write_legacy(storage_config, LEGACY_ARTICLES)
    assert detect_schema_version(storage_config) == 1


def test_legacy_import_partitions_by_saved_month(store, storage_config):
    write_legacy(storage_config, LEGACY_ARTICLES)

    stats = store.stats()

    assert stats.total_articles == 4
    assert stats.by_category == {"Hardware": 2, "IA & Data": 2}
    assert stats.by_month == {"2026-10": 2, "2026-09": 1, "2026-08": 1}
    assert [a.month for a in stats.archives] == ["2026-09", "2026-08"]

    assert {a.link for a in store.query()} == {"https://cur", "https://undated"}
    [august] = store.query(month="2026-08")
    assert august.id == record_id("https://old")
    assert august.key_points == ["a", "b"]
    [september] = store.query(month="2026-09")
    assert september.link == "https://rfc"
    assert september.saved_at.isoformat() == "2026-09-07T10:00:00+00:00"

    current = {a.link: a for a in store.query()}
    assert current["https://cur"].id == "art_legacy1"
    assert current["https://cur"].saved_by == "auto"
    assert current["https://undated"].saved_by == "manual"
    assert current["https://undated"].saved_at == store.now()


def test_legacy_file_is_renamed_and_not_reimported(store, storage_config, clock):
    write_legacy(storage_config, LEGACY_ARTICLES)
    store.initialize()

    backup = storage_config.legacy_path.with_name("saved-articles.json.backup")
    assert backup.exists()
    assert not storage_config.legacy_path.exists()

    write_legacy(storage_config, LEGACY_ARTICLES)
    reopened = FeedStore(storage_config, clock=clock)
    assert reopened.stats().total_articles == 4


def test_legacy_articles_are_deduplicated_against_new_saves(store, storage_config, make_article):
    write_legacy(storage_config, LEGACY_ARTICLES)

    result = store.save([make_article("https://old"), make_article("https://fresh")])

    assert result.saved == 1
    assert result.duplicates == 1
    assert result.total == 5


def test_unreadable_legacy_file_starts_empty(store, storage_config):
    storage_config.data_path.mkdir(parents=True, exist_ok=True)
    storage_config.legacy_path.write_text("not json", encoding="utf-8")

    assert store.stats().total_articles == 0
    assert storage_config.legacy_path.exists()
    assert detect_schema_version(storage_config) == CURRENT_SCHEMA_VERSION


def test_unversioned_index_is_stamped(storage_config, clock):
    storage_config.data_path.mkdir(parents=True, exist_ok=True)
    storage_config.index_path.write_text(
        json.dumps(
            {
                "version": "2.0",
                "lastUpdated": "2026-10-01T00:00:00.000Z",
                "totalArticles": 1,
                "urlIndex": {"https://a": {"fileDate": "2026-10", "savedAt": "2026-10-01T00:00:00.000Z"}},
                "stats": {"byCategory": {"Hardware": 1}, "bySource": {"Verge": 1}, "byMonth": {"2026-10": 1}},
                "archives": [],
            }
        ),
        encoding="utf-8",
    )
    assert detect_schema_version(storage_config) == 2

    assert run_migrations(storage_config, clock.now) == CURRENT_SCHEMA_VERSION

    raw = json.loads(storage_config.index_path.read_text(encoding="utf-8"))
    assert raw["schemaVersion"] == CURRENT_SCHEMA_VERSION
    assert raw["totalArticles"] == 1
    assert FeedStore(storage_config, clock=clock).exists("https://a")


def write_unversioned_store(storage_config, url_index):
    storage_config.data_path.mkdir(parents=True, exist_ok=True)
    storage_config.index_path.write_text(
        json.dumps(
            {
                "version": "2.0",
                "lastUpdated": "2026-10-05T00:00:00.000Z",
                "totalArticles": 3,
                "urlIndex": url_index,
                "stats": {
                    "byCategory": {"Hardware": 3},
                    "bySource": {"Verge": 3},
                    "byMonth": {"2026-10": 2, "2026-09": 1},
                },
                "archives": [{"month": "2026-09", "weeks": ["week-02.json"], "articleCount": 1}],
            }
        ),
        encoding="utf-8",
    )
    storage_config.current_path.parent.mkdir(parents=True, exist_ok=True)
    storage_config.current_path.write_text(
        json.dumps(
            {
                "month": "2026-10",
                "articles": [
                    {
                        "id": "art_a",
                        "title": "Saved",
                        "link": "https://a",
                        "source": "Verge",
                        "category": "Hardware",
                        "savedAt": "2026-10-04T08:00:00.000Z",
                        "savedBy": "auto",
                    },
                    {
                        "title": "Feed date only",
                        "link": "https://b",
                        "source": "Verge",
                        "category": "Hardware",
                        "pubDate": "2026-10-03T06:00:00.000Z",
                    },
                ],
                "lastUpdated": "2026-10-05T00:00:00.000Z",
            }
        ),
        encoding="utf-8",
    )
    week = storage_config.archives_path / "2026-09" / "week-02.json"
    week.parent.mkdir(parents=True, exist_ok=True)
    week.write_text(
        json.dumps(
            {
                "month": "2026-09",
                "articles": [
                    {
                        "title": "September",
                        "link": "https://sep",
                        "source": "Verge",
                        "category": "Hardware",
                        "savedAt": "2026-09-08T10:00:00.000Z",
                    }
                ],
            }
        ),
        encoding="utf-8",
    )


def test_unversioned_store_with_incomplete_records_keeps_its_data(storage_config, clock, make_article):
    write_unversioned_store(
        storage_config,
        {
            "https://a": {"fileDate": "2026-10", "savedAt": "2026-10-04T08:00:00.000Z"},
            "https://b": {"fileDate": "2026-10"},
            "https://sep": {"fileDate": "2026-09", "savedAt": "2026-09-08T10:00:00.000Z"},
        },
    )

    assert run_migrations(storage_config, clock.now) == CURRENT_SCHEMA_VERSION

    raw = json.loads(storage_config.index_path.read_text(encoding="utf-8"))
    assert raw["schemaVersion"] == CURRENT_SCHEMA_VERSION
    assert raw["totalArticles"] == 3
    assert set(raw["urlIndex"]) == {"https://a", "https://b", "https://sep"}

    store = FeedStore(storage_config, clock=clock)
    current = {a.link: a for a in store.query()}
    assert set(current) == {"https://a", "https://b"}
    assert current["https://a"].id == "art_a"
    assert current["https://b"].id == record_id("https://b")
    assert current["https://b"].saved_at == datetime(2026, 10, 3, 6, 0, tzinfo=timezone.utc)

    september = store.query(month="2026-09")
    assert [a.id for a in september] == [record_id("https://sep")]

    result = store.save([make_article("https://b"), make_article("https://new")])
    assert result.duplicates == 1
    assert result.total == 4
    assert len(store.query()) == 3


def test_invalid_unversioned_index_is_left_untouched(storage_config, clock):
    write_unversioned_store(storage_config, {"https://a": {"savedAt": "2026-10-04T08:00:00.000Z"}})
    before = storage_config.index_path.read_text(encoding="utf-8")

    with pytest.raises(StorageError):
        FeedStore(storage_config, clock=clock).stats()

    assert storage_config.index_path.read_text(encoding="utf-8") == before
    assert detect_schema_version(storage_config) == 2


def test_newer_schema_is_refused(storage_config, clock):
    storage_config.data_path.mkdir(parents=True, exist_ok=True)
    storage_config.index_path.write_text(json.dumps({"schemaVersion": 99}), encoding="utf-8")

    with pytest.raises(SchemaVersionError):
        FeedStore(storage_config, clock=clock).stats()


def test_corrupt_index_starts_empty(store, storage_config, clock, make_article):
    store.save([make_article("https://a")])
    storage_config.index_path.write_text("{{{", encoding="utf-8")

    reopened = FeedStore(storage_config, clock=clock)
    assert reopened.stats().total_articles == 0
    assert not reopened.exists("https://a")
