"""Deduplication reconciler tests."""

from datetime import datetime

import pytest

from readlater.errors import NotFound
from readlater.maintenance import DeduplicationReconciler, select_survivor
from readlater.models import Article


def save(store, url, created, contents="body", archived=False, title=None):
    store.insert_with_timestamp(
        Article(url=url, title=title or url, contents=contents, archived=archived), created
    )


@pytest.fixture
def duplicates(store):
    save(store, "https://example.com/a?x=1", datetime(2023, 1, 1), archived=True, title="archived")
    save(store, "https://example.com/a?x=2", datetime(2023, 1, 2), contents="", title="empty")
    save(store, "https://example.com/a?x=3", datetime(2023, 1, 3), title="good")
    return store


class TestSelectSurvivor:
    """Survivor priority."""

    def test_prefers_unarchived(self):
        group = [
            Article(url="a", archived=True, contents="x", created=datetime(2024, 1, 1)),
            Article(url="b", archived=False, contents="x", created=datetime(2020, 1, 1)),
        ]
        assert select_survivor(group) == 1

    def test_prefers_contents(self):
        group = [
            Article(url="a", contents="   ", created=datetime(2024, 1, 1)),
            Article(url="b", contents="text", created=datetime(2020, 1, 1)),
        ]
        assert select_survivor(group) == 1

    def test_prefers_newest(self):
        group = [
            Article(url="a", contents="x", created=datetime(2020, 1, 1)),
            Article(url="b", contents="x", created=datetime(2024, 1, 1)),
        ]
        assert select_survivor(group) == 1

    def test_ties_keep_first(self):
        created = datetime(2022, 6, 1)
        group = [
            Article(url="a", contents="x", created=created),
            Article(url="b", contents="x", created=created),
        ]
        assert select_survivor(group) == 0


class TestReconcile:
    """Full-store runs."""

    def test_merges_duplicate_group(self, duplicates):
        stats = DeduplicationReconciler(duplicates).run()

        assert stats.total == 3
        assert stats.duplicates_found == 2
        assert stats.duplicates_removed == 2
        assert stats.canonicalized == 1
        assert stats.errors == 0

        articles = duplicates.all_articles()
        assert [a.url for a in articles] == ["https://example.com/a"]
        assert articles[0].title == "good"
        assert duplicates.indexed_urls() == ["https://example.com/a"]
        assert [r.url for r in duplicates.search("good")] == ["https://example.com/a"]

    def test_dry_run_counts_without_writing(self, duplicates):
        before = [a.url for a in duplicates.all_articles()]

        stats = DeduplicationReconciler(duplicates, dry_run=True).run()

        assert stats.duplicates_found == 2
        assert stats.duplicates_removed == 2
        assert stats.canonicalized == 1
        assert [a.url for a in duplicates.all_articles()] == before

    def test_singleton_is_renamed(self, store):
        save(store, "https://example.com/b#frag", datetime(2023, 1, 1))
        save(store, "https://example.com/c", datetime(2023, 1, 2))

        stats = DeduplicationReconciler(store).run()

        assert stats.canonicalized == 1
        assert stats.duplicates_found == 0
        assert sorted(a.url for a in store.all_articles()) == [
            "https://example.com/b",
            "https://example.com/c",
        ]

    def test_canonical_member_can_lose(self, store):
        save(store, "https://example.com/a", datetime(2023, 1, 1), contents=None, title="empty")
        save(store, "https://example.com/a?ref=1", datetime(2023, 1, 2), title="full")

        stats = DeduplicationReconciler(store).run()

        assert stats.duplicates_removed == 1
        assert stats.canonicalized == 1
        article = store.get_plain("https://example.com/a")
        assert article.title == "full"
        assert store.count() == 1

    def test_canonical_survivor_needs_no_rename(self, store):
        save(store, "https://example.com/a", datetime(2023, 1, 2), title="kept")
        save(store, "https://example.com/a?ref=1", datetime(2023, 1, 1))

        stats = DeduplicationReconciler(store).run()

        assert stats.canonicalized == 0
        assert store.get_plain("https://example.com/a").title == "kept"

    def test_invalid_url_counts_error(self, store):
        save(store, "not-a-url", datetime(2023, 1, 1))
        save(store, "https://example.com/a", datetime(2023, 1, 2))

        stats = DeduplicationReconciler(store).run()

        assert stats.total == 2
        assert stats.errors == 1
        assert store.get_plain("not-a-url") is not None

    def test_delete_failure_continues(self, duplicates, monkeypatch):
        def failing_delete(url):
            raise NotFound(url)

        monkeypatch.setattr(duplicates, "delete", failing_delete)

        stats = DeduplicationReconciler(duplicates).run()

        assert stats.duplicates_found == 2
        assert stats.duplicates_removed == 0
        assert stats.errors >= 2

    def test_rebuilds_stale_index(self, store):
        save(store, "https://example.com/a", datetime(2023, 1, 1))
        with store.conn:
            store.conn.execute("DELETE FROM articles_fts")

        DeduplicationReconciler(store).run()

        assert store.indexed_urls() == ["https://example.com/a"]
