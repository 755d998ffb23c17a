from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class PendingItem:
    id: str
    payload: Any
    enqueued_at: int
    retry_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payload": self.payload,
            "enqueuedAt": self.enqueued_at,
            "retryCount": self.retry_count,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PendingItem":
        # older browser builds stored {"data", "timestamp"}
        payload = d["payload"] if "payload" in d else d.get("data") or {}
        enqueued_at = d.get("enqueuedAt", d.get("timestamp", 0))
        return cls(
            id=str(d["id"]),
            payload=payload,
            enqueued_at=int(enqueued_at),
            retry_count=int(d.get("retryCount", 0)),
        )


@dataclass
class SyncStatus:
    online: bool
    pending_count: int
    last_sync_time: Optional[int] = None
