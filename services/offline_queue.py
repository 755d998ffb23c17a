# services/offline_queue.py
import json
import logging
from typing import Iterable

from models.pending_item import PendingItem

logger = logging.getLogger(__name__)

QUEUE_KEY = "offlinePendingSync"
ID_PREFIX = "pending_"


class SyncQueue:
    """
    FIFO of PendingItem backed by a client_storage-like store.
    On a device the store is page.client_storage (localStorage on web), so
    the queue survives restarts without a connection.
    """

    def __init__(self, storage):
        self.storage = storage
        self._items: list[PendingItem] = []
        self._last_id_ms = 0

    # ---------- persistence ----------
    def load(self) -> list[PendingItem]:
        raw = self.storage.get(QUEUE_KEY) or "[]"
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
            if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
                raise ValueError(f"expected a list of items, got {type(data).__name__}")
            items = [PendingItem.from_dict(d) for d in data]
        except (ValueError, TypeError, KeyError) as e:
            logger.error("Error loading pending sync data: %s", e)
            items = []
        self._items = items
        for item in items:
            self._seen_id(item.id)
        return list(items)

    def save(self):
        """Raises whatever the store raises (e.g. StorageQuotaExceeded)."""
        self.storage.set(QUEUE_KEY, json.dumps([i.to_dict() for i in self._items]))

    # ---------- ids ----------
    def _seen_id(self, item_id: str):
        if item_id.startswith(ID_PREFIX):
            try:
                self._last_id_ms = max(self._last_id_ms, int(item_id[len(ID_PREFIX):]))
            except ValueError:
                pass

    def new_id(self, now_ms: int) -> str:
        ms = max(now_ms, self._last_id_ms + 1)
        self._last_id_ms = ms
        return f"{ID_PREFIX}{ms}"

    # ---------- mutations ----------
    def append(self, payload: dict, now_ms: int) -> PendingItem:
        item = PendingItem(id=self.new_id(now_ms), payload=payload, enqueued_at=now_ms)
        self._items.append(item)
        return item

    def remove_ids(self, ids: Iterable[str]) -> int:
        drop = set(ids)
        before = len(self._items)
        self._items = [i for i in self._items if i.id not in drop]
        return before - len(self._items)

    # ---------- reads ----------
    def peek_all(self) -> list[PendingItem]:
        return list(self._items)

    def has_pending(self) -> bool:
        return len(self._items) > 0

    def __len__(self):
        return len(self._items)
