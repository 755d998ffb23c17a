# services/sync_offline.py
import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Callable, Optional

import settings
from models.pending_item import PendingItem, SyncStatus
from services.local_cache import LocalCache, now_ms
from services.offline_queue import SyncQueue

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "lastSyncTime"


class Connectivity(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class OfflineSyncManager:
    """
    Buffers logbook writes that could not reach Firestore and replays them
    when the device is back online.

    Built once in main.py and handed to the views that save entries. Every
    queued entry gets up to ``max_retries`` retries after its first failed
    delivery; after that it is dropped and logged.

    Sync passes are single-flight: a pass requested while one is running
    is folded into a single follow-up pass. Nothing raised by the remote
    store or the local storage leaves this class; local storage failures
    are reported through ``on_warning`` and the in-memory queue stays
    authoritative.
    """

    def __init__(
        self,
        storage,
        remote_store,
        *,
        online: bool = False,
        max_retries: int = settings.MAX_RETRIES,
        clock: Callable[[], int] = now_ms,
        run_task: Optional[Callable] = None,
        on_notify: Optional[Callable[[str], None]] = None,
        on_warning: Optional[Callable[[str], None]] = None,
    ):
        self.storage = storage
        self.remote_store = remote_store
        self.connectivity = Connectivity.ONLINE if online else Connectivity.OFFLINE
        self.max_retries = max_retries
        self.clock = clock
        self.run_task = run_task
        self.on_notify = on_notify
        self.on_warning = on_warning

        self.queue = SyncQueue(storage)
        self.cache = LocalCache(storage, clock)
        self._state_lock = threading.RLock()
        self._sync_lock = threading.Lock()
        self._tasks: set = set()
        self._threads: set = set()
        self._rerun_requested = False

        self.queue.load()
        self.last_sync_time = self._load_last_sync()
        if len(self.queue):
            logger.info("Rehydrated %d pending items", len(self.queue))

    # ---------- state ----------
    @property
    def online(self) -> bool:
        return self.connectivity == Connectivity.ONLINE

    @property
    def is_syncing(self) -> bool:
        return self._sync_lock.locked()

    def _load_last_sync(self) -> Optional[int]:
        raw = self.storage.get(LAST_SYNC_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.error("Ignoring corrupt %s value: %r", LAST_SYNC_KEY, raw)
            return None

    def _persist(self):
        with self._state_lock:
            try:
                self.queue.save()
            except Exception as e:
                self._warn(f"Could not save pending entries locally: {e}")

    def _warn(self, msg: str):
        logger.warning(msg)
        if self.on_warning:
            try:
                self.on_warning(msg)
            except Exception:
                logger.exception("on_warning callback failed")

    def _notify(self, msg: str):
        logger.info(msg)
        if self.on_notify:
            try:
                self.on_notify(msg)
            except Exception:
                logger.exception("on_notify callback failed")

    # ---------- producers ----------
    def enqueue(self, payload: Any) -> PendingItem:
        with self._state_lock:
            item = self.queue.append(payload, self.clock())
        self._persist()
        kind = payload.get("entryType", "entry") if isinstance(payload, dict) else "entry"
        logger.info("Queued %s (%s), %d pending", item.id, kind, len(self.queue))
        if self.online:
            self._schedule_sync()
        return item

    def notify_connectivity_changed(self, new_state):
        if isinstance(new_state, bool):
            new_state = Connectivity.ONLINE if new_state else Connectivity.OFFLINE
        new_state = Connectivity(new_state)
        if new_state == self.connectivity:
            return
        self.connectivity = new_state
        if new_state == Connectivity.ONLINE:
            self._notify("Online - Syncing data...")
            self._schedule_sync()
        else:
            self._notify("Offline - Data will be cached locally")

    # ---------- sync ----------
    def _schedule_sync(self):
        if self.run_task:
            try:
                self.run_task(self.sync_pass)
            except Exception:
                logger.exception("Could not schedule sync pass")
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop:
            task = loop.create_task(self.sync_pass())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            t = threading.Thread(target=lambda: asyncio.run(self.sync_pass()), daemon=True)
            self._threads.add(t)
            t.start()

    async def wait_for_pending_syncs(self):
        """Waits for passes started by enqueue/connectivity changes, threaded ones included."""
        while self._tasks or self._threads:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for t in list(self._threads):
                await asyncio.to_thread(t.join)
                self._threads.discard(t)

    async def sync_pass(self) -> bool:
        """
        Tries every entry queued when the pass starts, oldest first.
        Returns False when nothing ran (offline, empty queue, no backend,
        or another pass in flight).

        A request that arrives while a pass is running is not run on its
        own; once the running pass ends, one more pass follows if entries
        were queued in the meantime.
        """
        if not self.online or not self.queue.has_pending():
            return False
        if not getattr(self.remote_store, "available", True):
            logger.debug("No remote store; keeping %d entries local", len(self.queue))
            return False
        if not self._sync_lock.acquire(blocking=False):
            self._rerun_requested = True
            logger.info("Sync pass already running, will follow up with new entries")
            return False

        try:
            attempted = await self._deliver_all()
        finally:
            self._sync_lock.release()

        if self._rerun_requested:
            self._rerun_requested = False
            if self.online and any(i.id not in attempted for i in self.queue.peek_all()):
                await self.sync_pass()
        return True

    async def _deliver_all(self) -> set:
        snapshot = self.queue.peek_all()
        synced, dropped = [], []

        for item in snapshot:
            try:
                ok = await self.remote_store.write(item.payload)
            except Exception as e:
                logger.warning("Error syncing %s: %s", item.id, e)
                ok = False

            if ok:
                synced.append(item.id)
                continue

            item.retry_count += 1
            if item.retry_count > self.max_retries:
                logger.error(
                    "Failed to sync %s after %d retries, discarding: %r",
                    item.id, self.max_retries, item.payload,
                )
                dropped.append(item.id)
            else:
                logger.warning("Sync of %s failed (attempt %d)", item.id, item.retry_count)

        with self._state_lock:
            self.queue.remove_ids(synced + dropped)
        self._persist()

        if synced:
            self.last_sync_time = self.clock()
            try:
                self.storage.set(LAST_SYNC_KEY, str(self.last_sync_time))
            except Exception as e:
                self._warn(f"Could not save last sync time: {e}")
            self._notify(f"Synced {len(synced)} cached items")

        logger.info(
            "Sync pass done: %d synced, %d dropped, %d pending",
            len(synced), len(dropped), len(self.queue),
        )
        return {i.id for i in snapshot}

    # ---------- reads ----------
    def get_status(self) -> SyncStatus:
        return SyncStatus(
            online=self.online,
            pending_count=len(self.queue),
            last_sync_time=self.last_sync_time,
        )

    # ---------- cache ----------
    def cache_get(self, key: str, max_age_ms: int = settings.CACHE_TTL_MS):
        return self.cache.get(key, max_age_ms)

    def cache_set(self, key: str, value) -> bool:
        return self.cache.set(key, value)

    def clear_cache(self) -> int:
        return self.cache.clear()
