"""Unit tests for the draft cache, debouncer and key-value stores."""
import asyncio

import pytest

from conftest import FailingKeyValueStore
from dmprompt.config import DRAFT_CACHE_KEY
from dmprompt.drafts import (
    Debouncer,
    DraftCache,
    KeyValueStore,
    OnceInitializer,
    create_key_value_store,
)
from dmprompt.drafts.in_memory import InMemoryKeyValueStore
from dmprompt.drafts.sqlite import SQLiteKeyValueStore
from dmprompt.errors import StorageError
from dmprompt.fragments import STRUCTURED_FIELDS, TEXT_FIELDS, FragmentSet, StructuredFragment


class TestDebouncer:
    """Tests for the Debouncer primitive."""

    @pytest.mark.asyncio
    async def test_burst_collapses_to_last_value(self):
        calls = []

        async def record(value):
            calls.append(value)

        debouncer = Debouncer(record, delay=0.05)
        for i in range(5):
            debouncer.schedule(i)
        assert debouncer.pending

        await asyncio.sleep(0.15)

        assert calls == [4]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_flush_runs_pending_immediately(self):
        calls = []

        async def record(value):
            calls.append(value)

        debouncer = Debouncer(record, delay=10)
        debouncer.schedule("a")
        debouncer.schedule("b")
        await debouncer.flush()

        assert calls == ["b"]

    @pytest.mark.asyncio
    async def test_cancel_drops_pending(self):
        calls = []

        async def record(value):
            calls.append(value)

        debouncer = Debouncer(record, delay=0.01)
        debouncer.schedule("a")
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert calls == []

    @pytest.mark.asyncio
    async def test_write_in_flight_is_not_cancelled(self):
        started = asyncio.Event()
        release = asyncio.Event()
        calls = []

        async def slow(value):
            started.set()
            await release.wait()
            calls.append(value)

        debouncer = Debouncer(slow, delay=0)
        debouncer.schedule("first")
        await started.wait()

        debouncer.schedule("second")
        release.set()
        await debouncer.flush()

        # Both writes complete; the first was already running when "second" arrived
        assert sorted(calls) == ["first", "second"]

    @pytest.mark.asyncio
    async def test_callback_errors_are_contained(self):
        async def boom(value):
            raise RuntimeError("nope")

        debouncer = Debouncer(boom, delay=0)
        debouncer.schedule(1)
        await debouncer.flush()

    def test_negative_delay_rejected(self):
        async def noop(value):
            pass

        with pytest.raises(ValueError):
            Debouncer(noop, delay=-1)


class TestOnceInitializer:
    """Tests for OnceInitializer."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_initialize_once(self):
        count = 0

        async def init():
            nonlocal count
            await asyncio.sleep(0.01)
            count += 1

        once = OnceInitializer(init)
        await asyncio.gather(*(once.ensure() for _ in range(5)))

        assert count == 1
        assert once.done

    @pytest.mark.asyncio
    async def test_failed_initialization_is_retried(self):
        attempts = 0

        async def flaky():
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise StorageError("first try fails")

        once = OnceInitializer(flaky)
        with pytest.raises(StorageError):
            await once.ensure()
        await once.ensure()

        assert attempts == 2
        assert once.done


class TestDraftCache:
    """Tests for DraftCache."""

    @pytest.mark.asyncio
    async def test_rapid_saves_write_once_with_last_value(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=0.5)

        for i in range(5):
            cache.save(FragmentSet(current_prompt=f"draft {i}"))
            await asyncio.sleep(0.02)

        await asyncio.sleep(0.7)

        assert len(recording_store.puts) == 1
        key, value = recording_store.puts[0]
        assert key == DRAFT_CACHE_KEY
        assert value["current_blocks"]["current_prompt"] == "draft 4"
        assert (await cache.load()).current_prompt == "draft 4"

    @pytest.mark.asyncio
    async def test_save_does_not_block(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=10)
        cache.save(FragmentSet(current_prompt="x"))

        assert cache.pending
        assert recording_store.puts == []
        await cache.flush()
        assert len(recording_store.puts) == 1

    @pytest.mark.asyncio
    async def test_load_from_empty_store_returns_defaults(self):
        cache = DraftCache(InMemoryKeyValueStore())

        blocks = await cache.load()

        for name in TEXT_FIELDS:
            assert getattr(blocks, name) == ""
        for name in STRUCTURED_FIELDS:
            assert getattr(blocks, name) == StructuredFragment()
            assert getattr(blocks, name).data == {}

    @pytest.mark.asyncio
    async def test_round_trip(self, recording_store, full_blocks):
        cache = DraftCache(recording_store, debounce_seconds=0, clock=lambda: 1234)
        cache.save(full_blocks)
        await cache.flush()

        assert await cache.load() == full_blocks
        assert recording_store.puts[0][1]["last_updated"] == 1234

    @pytest.mark.asyncio
    async def test_store_connected_lazily_once(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=0)
        assert recording_store.connects == 0

        await cache.load()
        cache.save(FragmentSet(current_prompt="a"))
        await cache.flush()
        await cache.has()

        assert recording_store.connects == 1

    @pytest.mark.asyncio
    async def test_has_and_clear(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=0)
        assert await cache.has() is False

        cache.save(FragmentSet(current_prompt="a"))
        await cache.flush()
        assert await cache.has() is True

        await cache.clear()
        assert await cache.has() is False

    @pytest.mark.asyncio
    async def test_clear_drops_pending_save(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=10)
        cache.save(FragmentSet(current_prompt="a"))

        await cache.clear()
        await cache.flush()

        assert recording_store.puts == []

    @pytest.mark.asyncio
    async def test_storage_failures_are_swallowed(self, caplog):
        cache = DraftCache(FailingKeyValueStore(), debounce_seconds=0)

        cache.save(FragmentSet(current_prompt="lost"))
        await cache.flush()
        blocks = await cache.load()

        assert blocks == FragmentSet.empty()
        assert "Failed to save draft cache" in caplog.text
        assert "Failed to load draft cache" in caplog.text

    @pytest.mark.asyncio
    async def test_unreadable_entry_loads_empty(self):
        store = InMemoryKeyValueStore()
        await store.put(DRAFT_CACHE_KEY, {"current_blocks": "garbage"})

        blocks = await DraftCache(store).load()

        assert blocks == FragmentSet.empty()

    @pytest.mark.asyncio
    async def test_close_flushes_pending(self, recording_store):
        cache = DraftCache(recording_store, debounce_seconds=10)
        cache.save(FragmentSet(current_prompt="keep me"))

        await cache.close()

        assert recording_store.puts[0][1]["current_blocks"]["current_prompt"] == "keep me"

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path, full_blocks):
        path = tmp_path / "drafts.db"

        first = DraftCache(SQLiteKeyValueStore(path), debounce_seconds=0)
        first.save(full_blocks)
        await first.close()

        second = DraftCache(SQLiteKeyValueStore(path))
        try:
            assert await second.load() == full_blocks
        finally:
            await second.close()


class TestKeyValueStores:
    """Tests for key-value backends."""

    def test_store_is_abstract(self):
        with pytest.raises(TypeError):
            KeyValueStore()  # type: ignore

    @pytest.mark.asyncio
    async def test_sqlite_put_get_delete(self, tmp_path):
        store = SQLiteKeyValueStore(tmp_path / "kv.db")
        await store.connect()
        try:
            assert await store.get("k") is None
            await store.put("k", {"a": 1})
            await store.put("k", {"a": 2})
            assert await store.get("k") == {"a": 2}
            await store.delete("k")
            assert await store.get("k") is None
        finally:
            await store.disconnect()

    @pytest.mark.asyncio
    async def test_sqlite_requires_connect(self, tmp_path):
        store = SQLiteKeyValueStore(tmp_path / "kv.db")
        with pytest.raises(StorageError):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_memory_store_copies_values(self):
        store = InMemoryKeyValueStore()
        value = {"nested": {"a": 1}}
        await store.put("k", value)
        value["nested"]["a"] = 2

        assert await store.get("k") == {"nested": {"a": 1}}

    def test_sqlite_rejects_bad_table_name(self, tmp_path):
        with pytest.raises(ValueError):
            SQLiteKeyValueStore(tmp_path / "kv.db", table="cache; DROP TABLE x")

    def test_factory(self, tmp_path):
        assert isinstance(create_key_value_store("memory"), InMemoryKeyValueStore)
        assert isinstance(create_key_value_store("sqlite", path=tmp_path / "kv.db"), SQLiteKeyValueStore)
        with pytest.raises(ValueError, match="Unsupported draft store backend"):
            create_key_value_store("indexeddb")

    def test_factory_passes_settings_through(self, tmp_path):
        assert isinstance(create_key_value_store("MEMORY", path=tmp_path / "kv.db"), InMemoryKeyValueStore)
        with pytest.raises(ValueError, match="Invalid table name"):
            create_key_value_store("sqlite", path=tmp_path / "kv.db", table="1bad")
