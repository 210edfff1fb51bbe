# vendoriq/services/otp_service.py
import enum
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from vendoriq.core.config import settings
from vendoriq.core.redis import RedisClient
from vendoriq.services.notifier import Notifier
from vendoriq.services.otp_store import (
    FallbackPasscodeStore,
    MemoryPasscodeStore,
    PasscodeRecord,
    PasscodeStore,
    RedisPasscodeStore,
    utcnow,
)

logger = logging.getLogger(__name__)

OTP_LIFETIME = timedelta(minutes=settings.OTP_EXPIRY_MINUTES)


class VerifyReason(str, enum.Enum):
    OK = "ok"
    NO_ACTIVE_CODE = "no-active-code"
    MISMATCH = "mismatch"
    EXPIRED = "expired"


@dataclass
class VerifyResult:
    ok: bool
    reason: VerifyReason
    subject_hint: Optional[str] = None


@dataclass
class IssuedPasscode:
    code: str
    expires_at: datetime


def generate_otp_code() -> str:
    """Generate a 6 digit code, uniform over 100000-999999"""
    return str(100000 + secrets.randbelow(900000))


class OTPManager:
    """Issues and verifies one-time passcodes keyed by email or phone.

    Storage goes through a single ``PasscodeStore``; the cache-or-memory
    decision lives in ``FallbackPasscodeStore``. Wrong codes do not consume
    the record and attempts are not counted here.
    """

    def __init__(
        self,
        store: PasscodeStore,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utcnow,
        lifetime: timedelta = OTP_LIFETIME,
        log_codes: bool = False,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.lifetime = lifetime
        self.log_codes = log_codes

    def issue(
        self,
        identifier: str,
        notifier: Optional[Notifier] = None,
        subject_hint: Optional[str] = None,
    ) -> IssuedPasscode:
        now = self.clock()
        record = PasscodeRecord(
            identifier=identifier,
            code=generate_otp_code(),
            issued_at=now,
            expires_at=now + self.lifetime,
            subject_hint=subject_hint,
        )
        self.store.save(record, int(self.lifetime.total_seconds()))

        if self.log_codes:
            logger.info(f"📧 OTP generated for {identifier}: {record.code}")

        channel = notifier or self.notifier
        if channel is not None:
            try:
                channel.send(identifier, record.code)
            except Exception as e:
                logger.error(f"❌ Failed to deliver OTP to {identifier}: {e}")

        return IssuedPasscode(code=record.code, expires_at=record.expires_at)

    def verify(self, identifier: str, submitted_code: str) -> VerifyResult:
        record = self.store.load(identifier)
        if record is None:
            return VerifyResult(ok=False, reason=VerifyReason.NO_ACTIVE_CODE)

        if submitted_code != record.code:
            return VerifyResult(ok=False, reason=VerifyReason.MISMATCH)

        if record.is_expired(self.clock()):
            return VerifyResult(ok=False, reason=VerifyReason.EXPIRED)

        self.store.delete(identifier)
        return VerifyResult(ok=True, reason=VerifyReason.OK, subject_hint=record.subject_hint)

    @property
    def backend(self) -> str:
        if isinstance(self.store, FallbackPasscodeStore):
            return self.store.active_backend
        return self.store.name

    def close(self):
        self.store.close()


def build_otp_manager(cache: Optional[RedisClient] = None, notifier: Optional[Notifier] = None) -> OTPManager:
    primary = RedisPasscodeStore(cache) if cache is not None and cache.configured else None
    store = FallbackPasscodeStore(primary, MemoryPasscodeStore())
    return OTPManager(store, notifier=notifier, log_codes=settings.OTP_LOG_CODES)
