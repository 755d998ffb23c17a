# services/remote_store.py
import asyncio
import logging
from typing import Any, Dict, Optional

import settings
from services.firebase_service import FirebaseService

logger = logging.getLogger(__name__)


class RemoteStore:
    """
    Where queued logbook entries end up. Picked once in main.py:
    FirestoreRemoteStore when Firebase is configured, LocalOnlyRemoteStore
    otherwise.
    """

    available = True

    async def write(self, payload: Dict[str, Any]) -> bool:
        raise NotImplementedError


class FirestoreRemoteStore(RemoteStore):
    def __init__(self, fb, timeout: float = settings.REMOTE_TIMEOUT):
        self.fb = fb
        self.timeout = timeout

    async def write(self, payload: Dict[str, Any]) -> bool:
        try:
            # the Admin SDK blocks; keep it off the UI loop and cap the wait
            doc_id = await asyncio.wait_for(
                asyncio.to_thread(self.fb.save_logbook_entry, payload),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Firestore write timed out after %.1fs", self.timeout)
            return False
        except Exception as e:
            logger.warning("Firestore write failed: %s", e)
            return False
        return bool(doc_id)


class LocalOnlyRemoteStore(RemoteStore):
    """No backend configured: entries stay in the local queue."""

    available = False

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason

    async def write(self, payload: Dict[str, Any]) -> bool:
        return False


def build_remote_store(config_path: Optional[str] = None) -> RemoteStore:
    try:
        fb = FirebaseService(config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.warning("Firestore unavailable, running local-only: %s", e)
        return LocalOnlyRemoteStore(str(e))
    return FirestoreRemoteStore(fb)
