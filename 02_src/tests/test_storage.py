"""Tests for Storage and StateStore."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from pairspace.models import ChatTurn, ConversationState, DiagnosticAnswers, Mode, TraceEvent
from pairspace.storage import StateStore, Storage, load_state, state_key


class TestStorageInit:
    """Tests for Storage initialization."""

    async def test_init_creates_tables(self, storage):
        """Test that init creates all tables."""
        async with storage._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ) as cursor:
            tables = [row[0] for row in await cursor.fetchall()]
            assert "kv_store" in tables
            assert "trace_events" in tables

    async def test_operations_before_init_raise(self):
        """Test that using storage before init raises."""
        st = Storage(":memory:")
        with pytest.raises(RuntimeError, match="not initialized"):
            await st.get("user:U1")


class TestStorageKeyValue:
    """Tests for the key-value namespace."""

    async def test_get_missing_key(self, storage):
        """Test that a missing key returns None."""
        assert await storage.get("user:nobody") is None

    async def test_put_and_get(self, storage):
        """Test storing and retrieving a value."""
        await storage.put("user:U1", '{"mode": "chat"}')
        assert await storage.get("user:U1") == '{"mode": "chat"}'

    async def test_put_overwrites(self, storage):
        """Test that put replaces the previous value."""
        await storage.put("user:U1", "first")
        await storage.put("user:U1", "second")
        assert await storage.get("user:U1") == "second"

    async def test_clear(self, storage):
        """Test that clear removes all data."""
        await storage.put("user:U1", "value")
        await storage.clear()
        assert await storage.get("user:U1") is None


class TestStorageTraceEvents:
    """Tests for TraceEvent storage."""

    async def test_save_and_filter(self, storage):
        """Test filtering trace events by type and actor."""
        ts = datetime.now(timezone.utc)
        await storage.save_trace_event(
            TraceEvent(id="t1", event_type="fallback_sent", actor="dispatcher", data={"a": 1}, timestamp=ts)
        )
        await storage.save_trace_event(
            TraceEvent(id="t2", event_type="event_processed", actor="dispatcher", data={}, timestamp=ts)
        )

        events = await storage.get_trace_events(event_types=["fallback_sent"])
        assert [e.id for e in events] == ["t1"]
        assert events[0].data == {"a": 1}
        assert events[0].timestamp == ts

        assert len(await storage.get_trace_events(actor="dispatcher")) == 2
        assert await storage.get_trace_events(actor="someone_else") == []

    async def test_newest_first_and_after(self, storage):
        """Test ordering and after filter."""
        ts1 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        ts2 = datetime(2024, 1, 1, 13, 0, 0, tzinfo=timezone.utc)
        await storage.save_trace_event(TraceEvent("t1", "x", "a", {}, ts1))
        await storage.save_trace_event(TraceEvent("t2", "x", "a", {}, ts2))

        events = await storage.get_trace_events()
        assert [e.id for e in events] == ["t2", "t1"]

        events = await storage.get_trace_events(after=ts1)
        assert [e.id for e in events] == ["t2"]

    async def test_count(self, storage):
        """Test counting trace events by type."""
        ts = datetime.now(timezone.utc)
        await storage.save_trace_event(TraceEvent("t1", "fallback_sent", "a", {}, ts))
        await storage.save_trace_event(TraceEvent("t2", "fallback_sent", "a", {}, ts))

        assert await storage.count_trace_events("fallback_sent") == 2
        assert await storage.count_trace_events("reply_failed") == 0


class TestStateStore:
    """Tests for StateStore."""

    async def test_key_format(self):
        """Test that state keys are prefixed with user:."""
        assert state_key("U123") == "user:U123"

    async def test_get_unknown_user(self, state_store):
        """Test that an unseen user has no stored state."""
        assert await state_store.get("U1") is None

    async def test_put_and_get_round_trip(self, state_store, storage):
        """Test that a saved state is stored as camelCase JSON and read back."""
        state = ConversationState(
            mode=Mode.CHAT,
            diagnostic_step=99,
            diagnostic_answers=DiagnosticAnswers(subsidy=True, subsidy_amount=50000, rent="rent_high"),
            chat_history=[ChatTurn("user", "hi"), ChatTurn("assistant", "hello")],
        )
        await state_store.put("U1", state)

        raw = json.loads(await storage.get("user:U1"))
        assert raw["mode"] == "chat"
        assert raw["diagnosticStep"] == 99
        assert raw["diagnosticAnswers"] == {"subsidy": True, "subsidyAmount": 50000, "rent": "rent_high"}
        assert raw["chatHistory"][0] == {"role": "user", "content": "hi"}

        loaded = await state_store.get("U1")
        assert loaded.mode == Mode.CHAT
        assert loaded.diagnostic_answers.subsidy_amount == 50000
        assert loaded.chat_history == state.chat_history

    async def test_put_updates_last_activity(self, state_store):
        """Test that every write stamps last_activity."""
        state = ConversationState(last_activity="2000-01-01T00:00:00+00:00")
        await state_store.put("U1", state)

        loaded = await state_store.get("U1")
        assert loaded.last_activity != "2000-01-01T00:00:00+00:00"

    async def test_put_caps_history(self, state_store):
        """Test that a persisted state never holds more than 10 turns."""
        state = ConversationState(
            chat_history=[ChatTurn("user", f"m{i}") for i in range(15)]
        )
        await state_store.put("U1", state)

        loaded = await state_store.get("U1")
        assert len(loaded.chat_history) == 10
        assert loaded.chat_history[0].content == "m5"


class TestLoadState:
    """Tests for load_state()."""

    async def test_default_for_unknown_user(self, state_store):
        """Test that an unseen user gets the default state."""
        state = await load_state(state_store, "new_user")
        assert state.mode == Mode.DIAGNOSTIC
        assert state.diagnostic_step == 0
        assert state.diagnostic_answers == DiagnosticAnswers()
        assert state.chat_history == []

    async def test_default_on_read_error(self):
        """Test that a store read failure degrades to the default state."""
        store = Mock()
        store.get = AsyncMock(side_effect=RuntimeError("kv down"))

        state = await load_state(store, "U1")
        assert state.mode == Mode.DIAGNOSTIC
        assert state.diagnostic_step == 0

    async def test_default_on_corrupt_record(self, storage, state_store):
        """Test that an unparseable record degrades to the default state."""
        await storage.put("user:U1", "not json")

        state = await load_state(state_store, "U1")
        assert state.mode == Mode.DIAGNOSTIC

    async def test_put_errors_propagate(self):
        """Test that write failures are raised to the caller."""
        storage = Mock()
        storage.put = AsyncMock(side_effect=RuntimeError("kv down"))
        store = StateStore(storage)

        with pytest.raises(RuntimeError, match="kv down"):
            await store.put("U1", ConversationState())
