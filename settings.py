# settings.py
import os
from dotenv import load_dotenv

load_dotenv()

# Sync
MAX_RETRIES = int(os.getenv("LOGBOOK_MAX_RETRIES", "3"))
CACHE_TTL_MS = int(os.getenv("LOGBOOK_CACHE_TTL_MS", str(24 * 60 * 60 * 1000)))
REMOTE_TIMEOUT = float(os.getenv("LOGBOOK_REMOTE_TIMEOUT", "8.0"))

# Connectivity
PROBE_URL = os.getenv("LOGBOOK_PROBE_URL", "https://firestore.googleapis.com/")
PROBE_INTERVAL = float(os.getenv("LOGBOOK_PROBE_INTERVAL", "30.0"))

# Local storage (headless / desktop runs without page.client_storage)
STORAGE_PATH = os.getenv("LOGBOOK_STORAGE_PATH", "logbook_storage.json")

# Firestore
KEYS_PATH = os.getenv("LOGBOOK_KEYS_PATH", "keys.json")
TIMEZONE = os.getenv("LOGBOOK_TIMEZONE", "Africa/Johannesburg")

LOG_FILE = os.getenv("LOGBOOK_LOG_FILE", "logbook.log")
