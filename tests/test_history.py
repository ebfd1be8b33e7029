"""
Tests for the history store.
"""
import json
import logging

import pytest
from pydantic import ValidationError

from backend.history import HistoryItem, HistoryStore, decode_history, encode_history
from backend.storage import MemoryStore, StorageError

KEY = "calc.history.v1"


class BrokenStore(MemoryStore):
    """Store whose reads and writes always fail."""

    def get(self, key):
        raise StorageError("disk on fire")

    def set(self, key, value):
        raise StorageError("disk on fire")


def filled(store, count=3):
    history = HistoryStore(store)
    for n in range(count):
        history.append(f"{n} + {n}", str(n * 2))
    return history


class TestHistoryItem:
    """Tests for the HistoryItem model."""

    def test_defaults(self):
        """Test that id and timestamp are generated."""
        a = HistoryItem(expression="1 + 1", result="2")
        b = HistoryItem(expression="1 + 1", result="2")
        assert a.id != b.id
        assert a.timestamp is not None

    def test_immutable(self):
        """Test that items cannot be modified."""
        item = HistoryItem(expression="1 + 1", result="2")
        with pytest.raises(ValidationError):
            item.result = "3"

    def test_encode_decode(self):
        """Test the JSON encoding of a list of items."""
        items = [HistoryItem(expression="2 × 3", result="6")]
        raw = encode_history(items)
        assert json.loads(raw)[0]["expression"] == "2 × 3"
        assert [i.model_dump() for i in decode_history(raw)] == [i.model_dump() for i in items]


class TestHistoryStore:
    """Tests for HistoryStore."""

    def test_starts_empty(self, history):
        """Test a store with nothing persisted."""
        assert len(history) == 0
        assert history.items == ()

    def test_append_newest_first(self, history):
        """Test that new items go to the front."""
        first = history.append("1 + 1", "2")
        second = history.append("2 + 2", "4")
        assert history.items == (second, first)
        assert history[0] is second

    def test_append_persists(self, store, history):
        """Test that appending writes the whole list."""
        history.append("1 + 1", "2")
        data = json.loads(store.get(KEY))
        assert len(data) == 1
        assert data[0]["result"] == "2"

    def test_reload(self, store):
        """Test that history survives a reload through the same store."""
        history = filled(store)
        reloaded = HistoryStore(store)
        assert [i.id for i in reloaded] == [i.id for i in history]
        assert [i.expression for i in reloaded] == ["2 + 2", "1 + 1", "0 + 0"]

    def test_delete_removes_exactly_targets(self, store):
        """Test deleting selected offsets."""
        history = filled(store, 4)
        kept = [history[1], history[3]]
        history.delete([0, 2])
        assert list(history) == kept
        assert [i.id for i in HistoryStore(store)] == [i.id for i in kept]

    def test_delete_out_of_range(self, store):
        """Test that bad offsets raise and leave the list alone."""
        history = filled(store, 2)
        before = history.items
        with pytest.raises(IndexError):
            history.delete([0, 5])
        assert history.items == before

    def test_delete_nothing(self, store):
        """Test deleting an empty selection."""
        history = filled(store, 2)
        history.delete([])
        assert len(history) == 2

    def test_remove_by_id(self, store):
        """Test removing a single item by id."""
        history = filled(store, 3)
        target = history[1]
        assert history.remove(target.id) is True
        assert target not in history.items
        assert len(history) == 2
        assert history.remove(target.id) is False

    def test_clear(self, store):
        """Test that clear empties and persists."""
        history = filled(store)
        history.clear()
        assert len(history) == 0
        assert json.loads(store.get(KEY)) == []
        assert len(HistoryStore(store)) == 0

    def test_custom_key(self, store):
        """Test persisting under a different key."""
        history = HistoryStore(store, key="other")
        history.append("1 + 2", "3")
        assert store.get(KEY) is None
        assert store.get("other") is not None


class TestHistoryPersistenceFailures:
    """Tests for malformed data and failing storage."""

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"expression": "1 + 1"}',
        '[{"expression": "1 + 1"}]',
        '[{"id": "nope", "expression": "1", "result": "1", "timestamp": "2024-01-01T00:00:00"}]',
    ])
    def test_malformed_data_loads_empty(self, raw, caplog):
        """Test that undecodable history is discarded."""
        store = MemoryStore({KEY: raw})
        with caplog.at_level(logging.WARNING):
            history = HistoryStore(store)
        assert len(history) == 0
        assert "unreadable history" in caplog.text

    def test_non_string_value_loads_empty(self):
        """Test a stored value of the wrong type."""
        store = MemoryStore({KEY: 42})
        assert len(HistoryStore(store)) == 0

    def test_malformed_data_is_replaced_on_save(self):
        """Test that the next write overwrites corrupt data."""
        store = MemoryStore({KEY: "garbage"})
        history = HistoryStore(store)
        history.append("1 + 1", "2")
        assert len(json.loads(store.get(KEY))) == 1

    def test_read_failure_loads_empty(self):
        """Test that a failing read gives an empty history."""
        history = HistoryStore(BrokenStore())
        assert len(history) == 0

    def test_write_failure_is_swallowed(self, caplog):
        """Test that failing writes do not raise."""
        history = HistoryStore(BrokenStore())
        with caplog.at_level(logging.WARNING):
            item = history.append("1 + 1", "2")
            history.delete([0])
            history.clear()
        assert item.result == "2"
        assert "Could not save history" in caplog.text
