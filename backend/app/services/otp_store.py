# backend/app/services/otp_store.py
"""
Storage backends for one-time codes.

Records are keyed by "<email>:<purpose>". The in-memory store suits a single
process and loses codes on restart; the Redis store shares codes between
instances and lets Redis expire them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import threading
from typing import Dict, Optional

from redis import Redis

logger = logging.getLogger(__name__)


@dataclass
class OTPRecord:
    code: str
    expires_at: datetime
    verified: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_json(self) -> str:
        return json.dumps(
            {
                "code": self.code,
                "expires_at": self.expires_at.isoformat(),
                "verified": self.verified,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "OTPRecord":
        data = json.loads(raw)
        expires_at = datetime.fromisoformat(data["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(code=data["code"], expires_at=expires_at, verified=bool(data.get("verified", False)))


def otp_key(email: str, purpose: str) -> str:
    return f"{email.strip().lower()}:{purpose}"


class OTPStore(ABC):
    """Key/value store for OTP records."""

    @abstractmethod
    def get(self, key: str) -> Optional[OTPRecord]:
        """Return the record for key, or None."""

    @abstractmethod
    def set(self, key: str, record: OTPRecord) -> None:
        """Insert or overwrite the record for key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def sweep(self, now: datetime) -> int:
        """Drop expired records. Returns how many were removed."""


class InMemoryOTPStore(OTPStore):
    """Process-local store guarded by a lock."""

    def __init__(self) -> None:
        self._records: Dict[str, OTPRecord] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[OTPRecord]:
        with self._lock:
            return self._records.get(key)

    def set(self, key: str, record: OTPRecord) -> None:
        with self._lock:
            self._records[key] = record

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def sweep(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, record in self._records.items() if record.is_expired(now)]
            for key in expired:
                del self._records[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisOTPStore(OTPStore):
    """Shared store; each record is a JSON string with a Redis TTL matching its expiry."""

    def __init__(self, client: Redis, prefix: str = "otp:"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[OTPRecord]:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return OTPRecord.from_json(raw)

    def set(self, key: str, record: OTPRecord) -> None:
        ttl = int((record.expires_at - datetime.now(timezone.utc)).total_seconds())
        # Keep at least a second so an already-expired record is still seen and deleted by its reader
        self.client.set(self._key(key), record.to_json(), ex=max(ttl, 1))

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))

    def sweep(self, now: datetime) -> int:
        # Redis expires keys on its own
        return 0
