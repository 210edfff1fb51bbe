# vendoriq/services/otp_store.py
"""Backing stores for one-time passcodes.

``FallbackPasscodeStore`` composes a primary store (Redis) with a
process-local ``MemoryPasscodeStore``. Writes go to the primary while it is
reachable and to memory otherwise; reads check the primary first and then
memory; deletes always hit both.
"""
import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from vendoriq.core.redis import RedisClient

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PasscodeRecord:
    identifier: str
    code: str
    issued_at: datetime
    expires_at: datetime
    subject_hint: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_json(self) -> str:
        return json.dumps({
            "code": self.code,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "subject_hint": self.subject_hint,
        })

    @classmethod
    def from_json(cls, identifier: str, raw: str) -> "PasscodeRecord":
        data = json.loads(raw)
        return cls(
            identifier=identifier,
            code=data["code"],
            issued_at=datetime.fromisoformat(data["issued_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            subject_hint=data.get("subject_hint"),
        )


class PasscodeStore:
    """Interface shared by every passcode backend."""

    name = "base"

    @property
    def reachable(self) -> bool:
        return True

    def save(self, record: PasscodeRecord, ttl_seconds: int) -> bool:
        raise NotImplementedError

    def load(self, identifier: str) -> Optional[PasscodeRecord]:
        raise NotImplementedError

    def delete(self, identifier: str) -> int:
        raise NotImplementedError

    def close(self):
        pass


class RedisPasscodeStore(PasscodeStore):
    name = "redis"

    def __init__(self, client: RedisClient, prefix: str = "otp"):
        self.client = client
        self.prefix = prefix

    def _key(self, identifier: str) -> str:
        return f"{self.prefix}:{identifier}"

    @property
    def reachable(self) -> bool:
        return self.client.refresh()

    def save(self, record: PasscodeRecord, ttl_seconds: int) -> bool:
        return self.client.setex(self._key(record.identifier), ttl_seconds, record.to_json())

    def load(self, identifier: str) -> Optional[PasscodeRecord]:
        raw = self.client.get(self._key(identifier))
        if not raw:
            return None
        try:
            return PasscodeRecord.from_json(identifier, raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Discarding unreadable OTP record for {identifier}: {e}")
            return None

    def delete(self, identifier: str) -> int:
        return self.client.delete(self._key(identifier))


class MemoryPasscodeStore(PasscodeStore):
    """In-process passcode map with a best-effort purge job per entry.

    Purges run on one APScheduler background scheduler per store, started on
    the first save. Each entry owns at most one job (keyed by identifier), so
    overwriting an entry replaces its job, and a job only removes the exact
    record it was scheduled for.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock
        self._records: Dict[str, PasscodeRecord] = {}
        self._scheduler = BackgroundScheduler(daemon=True, timezone=timezone.utc)
        self._lock = threading.Lock()
        self._closed = False

    def save(self, record: PasscodeRecord, ttl_seconds: int) -> bool:
        delay = max((record.expires_at - self.clock()).total_seconds(), 0)
        with self._lock:
            self._records[record.identifier] = record
            if not self._closed:
                if not self._scheduler.running:
                    self._scheduler.start()
                self._scheduler.add_job(
                    self._purge,
                    "date",
                    run_date=utcnow() + timedelta(seconds=delay),
                    args=[record.identifier, record],
                    id=record.identifier,
                    replace_existing=True,
                    misfire_grace_time=None,
                )
        return True

    def _purge(self, identifier: str, record: PasscodeRecord):
        with self._lock:
            if self._records.get(identifier) is record:
                del self._records[identifier]
                logger.debug(f"Purged expired in-memory OTP for {identifier}")

    def _cancel_purge(self, identifier: str):
        if not self._scheduler.running:
            return
        try:
            self._scheduler.remove_job(identifier)
        except JobLookupError:
            pass

    def load(self, identifier: str) -> Optional[PasscodeRecord]:
        with self._lock:
            return self._records.get(identifier)

    def delete(self, identifier: str) -> int:
        with self._lock:
            self._cancel_purge(identifier)
            return 1 if self._records.pop(identifier, None) is not None else 0

    def __len__(self):
        with self._lock:
            return len(self._records)

    def close(self):
        with self._lock:
            self._closed = True
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._records.clear()


class FallbackPasscodeStore(PasscodeStore):
    name = "fallback"

    def __init__(self, primary: Optional[PasscodeStore], fallback: MemoryPasscodeStore):
        self.primary = primary
        self.fallback = fallback

    @property
    def degraded(self) -> bool:
        return self.primary is None or not self.primary.reachable

    @property
    def active_backend(self) -> str:
        return self.fallback.name if self.degraded else self.primary.name

    def save(self, record: PasscodeRecord, ttl_seconds: int) -> bool:
        if not self.degraded and self.primary.save(record, ttl_seconds):
            return True
        if self.primary is not None:
            logger.warning(f"⚠️ Cache unavailable, storing OTP for {record.identifier} in memory")
        return self.fallback.save(record, ttl_seconds)

    def load(self, identifier: str) -> Optional[PasscodeRecord]:
        if not self.degraded:
            record = self.primary.load(identifier)
            if record is not None:
                return record
        return self.fallback.load(identifier)

    def delete(self, identifier: str) -> int:
        deleted = 0
        if not self.degraded:
            deleted += self.primary.delete(identifier)
        deleted += self.fallback.delete(identifier)
        return deleted

    def close(self):
        self.fallback.close()
