"""
Calculation history, newest first, persisted to a key-value store.
"""
import logging
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import HISTORY_KEY
from .storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class HistoryItem(BaseModel):
    """A finished calculation shown in the history list."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    expression: str
    result: str
    timestamp: datetime = Field(default_factory=datetime.now)


_HISTORY_ADAPTER = TypeAdapter(List[HistoryItem])


def encode_history(items: Iterable[HistoryItem]) -> str:
    return _HISTORY_ADAPTER.dump_json(list(items)).decode("utf-8")


def decode_history(raw: str) -> List[HistoryItem]:
    """Decode a stored history entry. Raises ValidationError on bad data."""
    return _HISTORY_ADAPTER.validate_json(raw)


class HistoryStore:
    """
    Ordered list of past calculations backed by a KeyValueStore.

    Every mutation rewrites the whole list under ``key``. Saving is
    best-effort: storage failures are logged and the in-memory list stays
    authoritative for the rest of the session.
    """

    def __init__(self, store: KeyValueStore, key: str = HISTORY_KEY):
        self.store = store
        self.key = key
        self._items: List[HistoryItem] = []
        self.load()

    # -------------------------
    # Read access
    # -------------------------
    @property
    def items(self) -> Tuple[HistoryItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(tuple(self._items))

    def __getitem__(self, index: int) -> HistoryItem:
        return self._items[index]

    # -------------------------
    # Mutations
    # -------------------------
    def append(self, expression: str, result: str) -> HistoryItem:
        """Record a calculation at the front of the list."""
        item = HistoryItem(expression=expression, result=result)
        self._items.insert(0, item)
        self.save()
        return item

    def delete(self, offsets: Iterable[int]) -> None:
        """Remove the items at the given positions."""
        targets = set(offsets)
        size = len(self._items)
        bad = sorted(i for i in targets if not 0 <= i < size)
        if bad:
            raise IndexError(f"History offsets out of range: {bad}")
        if not targets:
            return
        self._items = [item for i, item in enumerate(self._items) if i not in targets]
        self.save()

    def remove(self, item_id: UUID) -> bool:
        """Remove one item by id. Returns False if no item matched."""
        for i, item in enumerate(self._items):
            if item.id == item_id:
                del self._items[i]
                self.save()
                return True
        return False

    def clear(self) -> None:
        self._items = []
        self.save()

    # -------------------------
    # Persistence
    # -------------------------
    def load(self) -> None:
        try:
            raw: Optional[str] = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Could not read history: {e}")
            self._items = []
            return
        if raw is None:
            self._items = []
            return
        if not isinstance(raw, (str, bytes)):
            logger.warning(f"Discarding history under '{self.key}': unexpected {type(raw).__name__} value")
            self._items = []
            return
        try:
            self._items = decode_history(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable history under '{self.key}': {e.error_count()} error(s)")
            self._items = []
            return
        logger.info(f"Loaded {len(self._items)} history item(s)")

    def save(self) -> None:
        try:
            self.store.set(self.key, encode_history(self._items))
        except StorageError as e:
            logger.warning(f"Could not save history: {e}")
