import os
import json
import time
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
import firebase_admin
from firebase_admin import credentials, firestore

import settings

logger = logging.getLogger(__name__)

# entryType -> collection
COLLECTIONS = {
    "trip_counters": "trip_counters",
    "component_status": "component_status",
    "biometric_signature": "biometric_signatures",
    "complete_shift_data": "shifts",
    "emergency_log": "emergency_logs",
    "maintenance_status": "maintenance_records",
}
DEFAULT_COLLECTION = "logbook_entries"


def collection_for(entry: Dict[str, Any]) -> str:
    return COLLECTIONS.get(entry.get("entryType"), DEFAULT_COLLECTION)


class FirebaseService:
    def __init__(self, config_path: Optional[str] = None, timezone: str = settings.TIMEZONE):
        """
        keys.json expected:
        {
          "firebase_project_id": "winder-logbook",
          "firebase_admin_creds_path": "serviceAccount.json"
        }
        """
        candidates = [p for p in (config_path, settings.KEYS_PATH, "keys.json", "keys/keys.json") if p]
        cfg_path = next((p for p in candidates if os.path.exists(p)), None)
        if not cfg_path:
            raise FileNotFoundError(f"keys.json not found. Tried: {', '.join(candidates)}")

        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)

        required = ["firebase_project_id", "firebase_admin_creds_path"]
        missing = [k for k in required if not cfg.get(k)]
        if missing:
            raise ValueError(f"Missing keys in {cfg_path}: {', '.join(missing)}")

        self.project_id: str = cfg["firebase_project_id"]
        self.creds_path: str = cfg["firebase_admin_creds_path"]
        self.tz = pytz.timezone(timezone)

        if not os.path.exists(self.creds_path):
            raise FileNotFoundError(f"Service account not found at: {self.creds_path}")

        # Admin SDK is initialised once per process
        if not firebase_admin._apps:
            cred = credentials.Certificate(self.creds_path)
            firebase_admin.initialize_app(cred, {"projectId": self.project_id})

        self.db = firestore.client()

    def _stamp(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **entry,
            "timestamp": int(time.time() * 1000),
            "date": datetime.now(self.tz).strftime("%Y-%m-%d"),
        }

    # ---------- LOGBOOK ----------
    def save_logbook_entry(self, entry: Dict[str, Any]) -> str:
        """Stores one entry in the collection for its entryType and returns the doc id."""
        name = collection_for(entry)
        ref = self.db.collection(name).add(self._stamp(entry))[1]
        logger.info("Saved %s entry %s", name, ref.id)
        return ref.id

    def list_entries(self, collection: str = DEFAULT_COLLECTION, limit: int = 50) -> List[dict]:
        q = (self.db.collection(collection)
             .order_by("timestamp", direction=firestore.Query.DESCENDING)
             .limit(limit))
        return [{**doc.to_dict(), "id": doc.id} for doc in q.stream()]
