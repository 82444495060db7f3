"""Tests for the alias store against a file-backed SQLite database."""

import hashlib
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine

from shortlinks import codec
from shortlinks.errors import StorageError
from shortlinks.models import AliasRecord
from shortlinks.store import AliasStore


class TestCreate:
    def test_short_code_is_encoded_id(self, store):
        link = store.create("https://example.com/very/long/path")

        assert link.id > 0
        assert link.short_code == codec.encode(link.id)
        assert codec.decode(link.short_code) == link.id
        assert link.long_url == "https://example.com/very/long/path"
        assert link.click_count == 0
        assert link.created_at is not None
        assert link.updated_at is not None

    def test_same_url_returns_same_record(self, store):
        first = store.create("https://example.com/a")
        second = store.create("https://example.com/a")

        assert (second.id, second.short_code) == (first.id, first.short_code)
        assert store.count() == 1

    def test_distinct_urls_get_distinct_codes(self, store, sample_urls):
        links = [store.create(url) for url in sample_urls]

        assert len({link.short_code for link in links}) == len(sample_urls)
        ids = [link.id for link in links]
        assert ids == sorted(ids)

    def test_no_url_normalization(self, store):
        plain = store.create("https://example.com/a")
        slashed = store.create("https://example.com/a/")

        assert plain.id != slashed.id
        assert store.count() == 2

    def test_stores_url_digest(self, store):
        link = store.create("https://example.com/a")

        assert link.long_url_hash == hashlib.sha256(b"https://example.com/a").hexdigest()

    def test_long_multibyte_url_dedups(self, store):
        url = "https://example.com/" + "é" * 2020
        first = store.create(url)
        second = store.create(url)

        assert second.id == first.id
        assert store.find_by_long_url(url).long_url == url
        assert store.count() == 1

    def test_uniqueness_is_on_digest_not_raw_url(self):
        columns = AliasRecord.__table__.c

        assert columns.long_url_hash.unique is True
        assert not columns.long_url.unique
        assert not columns.long_url.index

    def test_concurrent_submissions_create_one_row(self, store):
        url = "https://example.com/contended"
        with ThreadPoolExecutor(max_workers=10) as pool:
            links = list(pool.map(store.create, [url] * 10))

        assert len({link.id for link in links}) == 1
        assert len({link.short_code for link in links}) == 1
        assert store.count() == 1
        assert links[0].short_code == codec.encode(links[0].id)


class TestFind:
    def test_unknown_code(self, store):
        store.create("https://example.com/a")
        assert store.find_by_short_code("zzzzzz") is None

    def test_fresh_alias(self, store):
        created = store.create("https://example.com/a")
        found = store.find_by_short_code(created.short_code)

        assert found.id == created.id
        assert found.short_code == codec.encode(found.id)

    def test_by_long_url(self, store):
        created = store.create("https://example.com/a")

        assert store.find_by_long_url("https://example.com/a").id == created.id
        assert store.find_by_long_url("https://example.com/b") is None

    def test_no_placeholder_codes_left_behind(self, store, sample_urls):
        for url in sample_urls:
            store.create(url)

        with store._sessions() as db:
            codes = [row.short_code for row in db.query(AliasRecord).all()]
        assert all(codec.is_valid_alphabet(code) for code in codes)


class TestIncrementClick:
    def test_unknown_code(self, store):
        assert store.increment_click("nope") is None

    def test_returns_updated_record(self, store):
        link = store.create("https://example.com/a")
        updated = store.increment_click(link.short_code)

        assert updated.id == link.id
        assert updated.click_count == 1
        assert updated.updated_at >= link.created_at

    @pytest.mark.parametrize("clicks", [1, 10, 100])
    def test_concurrent_clicks_are_not_lost(self, store, clicks):
        link = store.create("https://example.com/popular")
        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(pool.map(store.increment_click, [link.short_code] * clicks))

        assert all(result is not None for result in results)
        assert store.find_by_short_code(link.short_code).click_count == clicks


class TestList:
    def test_first_page(self, store, sample_urls):
        for url in sample_urls:
            store.create(url)

        items, total = store.list(limit=10, offset=0)

        assert total == 15
        assert len(items) == 10
        keys = [(item.created_at, item.id) for item in items]
        assert keys == sorted(keys, reverse=True)
        # newest first
        assert items[0].long_url == sample_urls[-1]

    def test_pages_do_not_overlap(self, store, sample_urls):
        for url in sample_urls:
            store.create(url)

        first, _ = store.list(limit=10, offset=0)
        second, total = store.list(limit=10, offset=10)

        assert total == 15
        assert len(second) == 5
        assert {i.id for i in first}.isdisjoint({i.id for i in second})

    def test_empty(self, store):
        assert store.list(limit=10, offset=0) == ([], 0)


class TestDelete:
    def test_delete(self, store):
        link = store.create("https://example.com/a")

        deleted = store.delete(link.short_code)

        assert deleted.id == link.id
        assert store.find_by_short_code(link.short_code) is None
        assert store.count() == 0

    def test_delete_unknown(self, store):
        assert store.delete("nope") is None


@pytest.fixture
def broken_store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}")
    store = AliasStore(engine)
    yield store
    store.close()


class TestHealth:
    def test_healthy(self, store):
        health = store.health_check()
        assert health["status"] == "healthy"
        assert health["timestamp"] is not None

    def test_unhealthy_does_not_raise(self, broken_store):
        assert broken_store.health_check() == {"status": "unhealthy"}

    def test_storage_failures_are_wrapped(self, broken_store):
        with pytest.raises(StorageError) as excinfo:
            broken_store.create("https://example.com/a")
        assert excinfo.value.__cause__ is not None
        assert excinfo.value.status_code == 500
