"""
Tests for the message store adapter against a temporary SQLite database.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from bulletin.core.exceptions import StoreError
from bulletin.db.store import MessageStore, MessageFilter, PageRequest
from bulletin.models.database import MessageRecord


BASE_TIME = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(message_id, minutes=0, target="t@example.com", sender="s@example.com", urgent=False):
    return MessageRecord(
        id=message_id,
        target=target,
        sender=sender,
        title=f"title-{message_id}",
        publication_timestamp=BASE_TIME + timedelta(minutes=minutes),
        urgent=urgent,
        extra_attributes={"id": message_id},
    )


async def fetch(store, message_filter=MessageFilter(), page=0, size=10):
    return [r.id async for r in store.find_page(message_filter, PageRequest(page, size))]


@pytest.mark.asyncio
class TestMessageStore:

    async def test_save_and_find_by_id(self, store):
        await store.save(make_record("m1"))

        record = await store.find_by_id("m1")

        assert record is not None
        assert record.title == "title-m1"
        assert record.extra_attributes == {"id": "m1"}

    async def test_find_by_id_missing(self, store):
        assert await store.find_by_id("nope") is None

    async def test_sort_newest_first_then_id(self, store):
        await store.save(make_record("b", minutes=0))
        await store.save(make_record("c", minutes=5))
        await store.save(make_record("a", minutes=0))
        await store.save(make_record("d", minutes=5))

        assert await fetch(store) == ["c", "d", "a", "b"]

    async def test_paging_is_disjoint_and_complete(self, store):
        for i in range(7):
            await store.save(make_record(f"id-{i}", minutes=i % 3))

        full = await fetch(store, size=100)
        pages = [await fetch(store, page=p, size=3) for p in range(3)]

        assert [len(p) for p in pages] == [3, 3, 1]
        assert sum(pages, []) == full
        assert await fetch(store, page=3, size=3) == []

    async def test_filters(self, store):
        await store.save(make_record("1", target="a@x.io", sender="p@x.io", urgent=True))
        await store.save(make_record("2", target="a@x.io", sender="q@x.io", urgent=False))
        await store.save(make_record("3", target="b@x.io", sender="p@x.io", urgent=True))

        assert set(await fetch(store, MessageFilter(target="a@x.io"))) == {"1", "2"}
        assert set(await fetch(store, MessageFilter(sender="p@x.io"))) == {"1", "3"}
        assert set(await fetch(store, MessageFilter(urgent_only=True))) == {"1", "3"}
        assert await fetch(store, MessageFilter(target="a@x.io", urgent_only=True)) == ["1"]
        assert await fetch(store, MessageFilter(sender="q@x.io", urgent_only=True)) == []

    async def test_delete_all(self, store):
        await store.save(make_record("1"))
        await store.save(make_record("2"))

        assert await store.delete_all() == 2
        assert await fetch(store) == []

    async def test_early_close_stops_fetching(self, store):
        for i in range(5):
            await store.save(make_record(f"id-{i}", minutes=i))

        records = store.find_page(MessageFilter(), PageRequest(0, 5))
        first = await records.__anext__()
        await records.aclose()

        assert first.id == "id-4"
        with pytest.raises(StopAsyncIteration):
            await records.__anext__()

    async def test_store_errors_are_wrapped(self):
        factory = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
        store = MessageStore(factory)

        with pytest.raises(StoreError) as exc_info:
            await store.find_by_id("x")
        assert exc_info.value.operation == "find_by_id"
        assert isinstance(exc_info.value.__cause__, OperationalError)

        with pytest.raises(StoreError):
            await store.save(make_record("x"))

        with pytest.raises(StoreError):
            await store.delete_all()

        with pytest.raises(StoreError):
            await fetch(store)


def test_page_query_shape():
    stmt = MessageStore.build_page_query(
        MessageFilter(target="a@x.io", urgent_only=True), PageRequest(2, 5)
    )
    sql = str(stmt.compile(compile_kwargs={"literal_binds": True}))

    assert "ORDER BY messages.publication_timestamp DESC, messages.id ASC" in sql
    assert "LIMIT 5" in sql
    assert "OFFSET 10" in sql
    assert "messages.target = 'a@x.io'" in sql
