"""ArticleStore tests: persistence, listings and index synchronization."""

import sqlite3
from datetime import datetime

import pytest

from readlater.db import ArticleStore
from readlater.errors import NotFound, StoreConflict
from readlater.models import Article, UsageRecord


def _set_last_access(store: ArticleStore, url: str, value: str) -> None:
    with store.conn:
        store.conn.execute("UPDATE articles SET lastAccess = ? WHERE url = ?", (value, url))


def _stored_urls(store: ArticleStore):
    return sorted(a.url for a in store.all_articles())


class TestInsertGet:
    """Insert and read back."""

    def test_insert_then_get_plain_round_trips(self, store):
        store.insert(Article(url="https://example.com/a", title="Title", contents="Body"))

        article = store.get_plain("https://example.com/a")

        assert article is not None
        assert article.url == "https://example.com/a"
        assert article.title == "Title"
        assert article.contents == "Body"
        assert article.unread is True
        assert article.archived is False
        assert article.created is not None
        assert article.last_access is not None

    def test_missing_article_returns_none(self, store):
        assert store.get_plain("https://example.com/missing") is None
        assert store.get_touch("https://example.com/missing") is None

    def test_duplicate_insert_conflicts(self, store):
        store.insert(Article(url="https://example.com/a", title="first"))

        with pytest.raises(StoreConflict):
            store.insert(Article(url="https://example.com/a", title="second"))

        assert store.get_plain("https://example.com/a").title == "first"
        assert store.count() == 1

    def test_get_plain_has_no_side_effects(self, store):
        store.insert(Article(url="https://example.com/a", title="a"))
        _set_last_access(store, "https://example.com/a", "2016-03-29T00:00:00.000000")

        store.get_plain("https://example.com/a")
        article = store.get_plain("https://example.com/a")

        assert article.unread is True
        assert article.last_access == datetime(2016, 3, 29)

    def test_get_touch_marks_read_and_refreshes_access(self, store):
        store.insert(Article(url="https://example.com/a", title="a"))
        _set_last_access(store, "https://example.com/a", "2016-03-29T00:00:00.000000")

        article = store.get_touch("https://example.com/a")

        assert article.unread is False
        assert article.last_access > datetime(2016, 3, 29)

    def test_insert_with_timestamp_keeps_created(self, store):
        created = datetime(2019, 5, 4, 12, 30, 0)
        store.insert_with_timestamp(Article(url="https://example.com/old", title="old"), created)

        assert store.get_plain("https://example.com/old").created == created

    def test_insert_with_timestamp_conflicts(self, store):
        store.insert(Article(url="https://example.com/a"))

        with pytest.raises(StoreConflict):
            store.insert_with_timestamp(Article(url="https://example.com/a"), datetime(2019, 1, 1))

    def test_persists_across_reopen(self, tmp_path):
        path = tmp_path / "persist.db"
        with ArticleStore(path) as first:
            first.insert(Article(url="https://example.com/a", title="kept one"))

        with ArticleStore(path) as second:
            assert second.get_plain("https://example.com/a").title == "kept one"
            assert len(second.search("kept")) == 1


class TestListings:
    """Recent and archive feed listings."""

    def test_recent_excludes_archived(self, store):
        for i in range(1, 5):
            store.insert(Article(url=f"https://example{i}.com", title=f"article{i}"))
        store.set_archived("https://example4.com", True)

        recents = store.list_recent(5)

        assert len(recents) == 3
        assert "https://example4.com" not in [r.url for r in recents]

    def test_recent_orders_by_last_access(self, store):
        store.insert(Article(url="https://example.com", title="article"))
        store.insert(Article(url="https://example2.com", title="article2"))
        _set_last_access(store, "https://example.com", "2016-03-29T00:00:00.000000")
        _set_last_access(store, "https://example2.com", "2016-03-30T00:00:00.000000")

        recents = store.list_recent(1)
        assert [r.url for r in recents] == ["https://example2.com"]
        assert recents[0].title == "article2"

        store.get_touch("https://example.com")

        recents = store.list_recent(1)
        assert [r.url for r in recents] == ["https://example.com"]

    def test_recent_respects_count(self, store):
        for i in range(10):
            store.insert(Article(url=f"https://example.com/{i}"))

        assert len(store.list_recent(5)) == 5

    def test_archive_feed_includes_archived(self, store):
        store.insert(Article(url="https://example.com", title="article"))
        store.insert(Article(url="https://example2.com", title="article2"))
        store.set_archived("https://example.com", True)

        feed = store.list_archive_feed(5)

        assert len(feed) == 2
        assert {f.url for f in feed if f.archived} == {"https://example.com"}
        assert "https://example.com" not in [r.url for r in store.list_recent(5)]

    def test_archive_feed_orders_by_created(self, store):
        store.insert_with_timestamp(Article(url="https://example.com/old"), datetime(2018, 1, 1))
        store.insert_with_timestamp(Article(url="https://example.com/new"), datetime(2020, 1, 1))
        store.insert_with_timestamp(Article(url="https://example.com/mid"), datetime(2019, 1, 1))

        feed = store.list_archive_feed(5)

        assert [f.url for f in feed] == [
            "https://example.com/new",
            "https://example.com/mid",
            "https://example.com/old",
        ]

    def test_summary_has_body(self, store):
        store.insert(Article(url="https://example.com/body", contents="text"))
        store.insert(Article(url="https://example.com/empty"))

        by_url = {s.url: s for s in store.list_archive_feed(5)}

        assert by_url["https://example.com/body"].has_body is True
        assert by_url["https://example.com/empty"].has_body is False


class TestMutations:
    """Archive, read, rename, delete and content updates."""

    def test_set_archived_toggles(self, store):
        store.insert(Article(url="https://example.com/a"))

        store.set_archived("https://example.com/a", True)
        assert store.get_plain("https://example.com/a").archived is True

        store.set_archived("https://example.com/a", False)
        assert store.get_plain("https://example.com/a").archived is False

    def test_set_archived_missing(self, store):
        with pytest.raises(NotFound):
            store.set_archived("https://example.com/missing", True)

    def test_mark_read(self, store):
        store.insert(Article(url="https://example.com/a"))

        store.mark_read("https://example.com/a")

        assert store.get_plain("https://example.com/a").unread is False

    def test_mark_read_missing(self, store):
        with pytest.raises(NotFound):
            store.mark_read("https://example.com/missing")

    def test_rename_moves_article_and_index(self, store):
        store.insert(Article(url="https://example.com/a?x=1", title="moving target"))

        store.rename("https://example.com/a?x=1", "https://example.com/a")

        assert store.get_plain("https://example.com/a?x=1") is None
        assert store.get_plain("https://example.com/a").title == "moving target"
        assert store.indexed_urls() == ["https://example.com/a"]
        assert [r.url for r in store.search("moving")] == ["https://example.com/a"]

    def test_rename_conflict_leaves_store_unchanged(self, store):
        store.insert(Article(url="https://example.com/a", title="one"))
        store.insert(Article(url="https://example.com/a?x=1", title="two"))

        with pytest.raises(StoreConflict):
            store.rename("https://example.com/a?x=1", "https://example.com/a")

        assert _stored_urls(store) == ["https://example.com/a", "https://example.com/a?x=1"]
        assert store.indexed_urls() == _stored_urls(store)

    def test_rename_missing(self, store):
        with pytest.raises(NotFound):
            store.rename("https://example.com/missing", "https://example.com/other")

    def test_delete_removes_index_entry(self, store):
        store.insert(Article(url="https://example.com/a", title="doomed"))

        store.delete("https://example.com/a")

        assert store.get_plain("https://example.com/a") is None
        assert store.indexed_urls() == []
        assert store.search("doomed") == []

    def test_delete_missing(self, store):
        with pytest.raises(NotFound):
            store.delete("https://example.com/missing")

    def test_update_contents_reindexes(self, store):
        store.insert(Article(url="https://example.com/a", title="t", contents="original words"))

        store.update_contents("https://example.com/a", "replacement text")

        assert store.get_plain("https://example.com/a").contents == "replacement text"
        assert store.search("original") == []
        assert len(store.search("replacement")) == 1

    def test_update_contents_missing(self, store):
        with pytest.raises(NotFound):
            store.update_contents("https://example.com/missing", "text")


class TestIndexSync:
    """The index tracks the articles table."""

    def test_index_matches_articles_after_writes(self, store):
        store.insert(Article(url="https://example.com/1", title="one"))
        store.insert(Article(url="https://example.com/2?x", title="two"))
        store.insert(Article(url="https://example.com/3", title="three"))
        store.rename("https://example.com/2?x", "https://example.com/2")
        store.delete("https://example.com/3")
        store.update_contents("https://example.com/1", "new")

        assert store.indexed_urls() == _stored_urls(store)

    def test_missing_index_is_rebuilt_on_open(self, tmp_path):
        path = tmp_path / "bootstrap.db"
        with ArticleStore(path) as s:
            s.insert(Article(url="https://example.com/a", title="bootstrap me"))
            with s.conn:
                s.conn.execute("DROP TABLE articles_fts")

        with ArticleStore(path) as reopened:
            assert reopened.indexed_urls() == ["https://example.com/a"]
            assert len(reopened.search("bootstrap")) == 1

    def test_upgrades_first_schema(self, tmp_path):
        path = tmp_path / "v1.db"
        conn = sqlite3.connect(path)
        conn.executescript(
            """
            CREATE TABLE articles (
              url text primary key,
              contents text,
              archived boolean default false,
              created datetime default current_timestamp,
              lastAccess datetime default current_timestamp
            );
            CREATE VIRTUAL TABLE fts USING fts5(
              url UNINDEXED, contents, content='articles', tokenize='porter unicode61'
            );
            CREATE TRIGGER articles_ai AFTER INSERT ON articles BEGIN
              INSERT INTO fts(rowid, url, contents) VALUES (new.rowid, new.url, new.contents);
            END;
            INSERT INTO articles (url, contents, created, lastAccess)
            VALUES ('https://example.com/legacy', 'legacy body', '2016-03-29T00:00:00.000000',
                    '2016-03-29T00:00:00.000000');
            """
        )
        conn.commit()
        conn.close()

        with ArticleStore(path) as s:
            article = s.get_plain("https://example.com/legacy")
            assert article.title is None
            assert article.unread is True
            assert len(s.search("legacy")) == 1

            s.insert(Article(url="https://example.com/new", title="fresh"))
            assert s.indexed_urls() == ["https://example.com/legacy", "https://example.com/new"]


class TestUsage:
    """Usage records are appended."""

    def test_record_usage(self, store):
        store.record_usage(UsageRecord(url="https://example.com/a", length_in=100, length_out=20))
        store.record_usage(UsageRecord(url="https://example.com/b", tokens_in=7, tokens_out=3))

        records = store.usage_records()

        assert [r.url for r in records] == ["https://example.com/a", "https://example.com/b"]
        assert records[0].length_in == 100
        assert records[1].tokens_out == 3
        assert records[0].timestamp is not None
