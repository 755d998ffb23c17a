# services/local_cache.py
import json
import logging
import time

import settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "cache_"


def now_ms() -> int:
    return int(time.time() * 1000)


class LocalCache:
    """
    Small TTL cache on top of the same client storage the queue uses.

    Values are stored as JSON, so only JSON-native values come back
    unchanged (dict with str keys, list, str, number, bool, None). Tuples
    come back as lists; values JSON cannot encode are refused by set().
    """

    def __init__(self, storage, clock=now_ms):
        self.storage = storage
        self.clock = clock

    def set(self, key: str, value) -> bool:
        entry = {"value": value, "timestamp": self.clock()}
        try:
            self.storage.set(CACHE_PREFIX + key, json.dumps(entry))
            return True
        except Exception as e:
            logger.warning("Error saving %r to cache: %s", key, e)
            return False

    def get(self, key: str, max_age_ms: int = settings.CACHE_TTL_MS):
        full_key = CACHE_PREFIX + key
        raw = self.storage.get(full_key)
        if raw is None:
            return None
        try:
            entry = json.loads(raw) if isinstance(raw, str) else raw
            age = self.clock() - int(entry["timestamp"])
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Error loading %r from cache: %s", key, e)
            return None
        if age < max_age_ms:
            return entry.get("value")
        # expired
        try:
            self.storage.remove(full_key)
        except Exception as e:
            logger.warning("Could not evict expired cache entry %r: %s", key, e)
        return None

    def clear(self) -> int:
        keys = list(self.storage.get_keys(CACHE_PREFIX) or [])
        for k in keys:
            self.storage.remove(k)
        return len(keys)
