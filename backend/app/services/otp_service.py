# backend/app/services/otp_service.py
"""
One-time code service.

Six-digit codes are issued per (email, purpose) and live for
settings.otp_ttl_minutes. Two ways to consume a code:

- check_otp: non-destructive. A match marks the record verified and extends
  its life, so a multi-step form can confirm the code first and submit later.
- verify_otp: destructive. A match deletes the record.

A missing record is always a plain False; codes are never logged.
"""

from datetime import datetime, timedelta
import logging
import secrets
import threading
from typing import Callable, Optional

from ..core.config import settings
from ..core.constants import OTP_CODE_LENGTH, OTP_PURPOSES
from ..core.exceptions import ValidationException
from ..core.timezone_utils import utc_now
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService
from .otp_store import OTPRecord, OTPStore, otp_key

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class OTPService(BaseService):
    """Issue and validate one-time codes against an injected store."""

    def __init__(self, store: OTPStore, clock: Optional[Clock] = None):
        super().__init__(None)
        self.store = store
        self.clock = clock or utc_now

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=settings.otp_ttl_minutes)

    @staticmethod
    def _validate_purpose(purpose: str) -> None:
        if purpose not in OTP_PURPOSES:
            raise ValidationException(
                f"Invalid OTP purpose '{purpose}'",
                details={"allowed": list(OTP_PURPOSES)},
            )

    @staticmethod
    def _new_code() -> str:
        return "".join(secrets.choice("0123456789") for _ in range(OTP_CODE_LENGTH))

    @staticmethod
    def _matches(record: OTPRecord, code: str) -> bool:
        # compare_digest rejects non-ASCII str, so compare encoded bytes
        return isinstance(code, str) and secrets.compare_digest(record.code.encode(), code.encode())

    def _load_live(self, key: str, purpose: str, now: datetime) -> Optional[OTPRecord]:
        record = self.store.get(key)
        if record is None:
            return None
        if record.is_expired(now):
            self.store.delete(key)
            prometheus_metrics.record_otp_event(purpose, "expired")
            return None
        return record

    @BaseService.measure_operation("generate_otp")
    def generate_otp(self, email: str, purpose: str) -> str:
        """Issue a fresh code, replacing any outstanding one for the same email and purpose."""
        self._validate_purpose(purpose)
        code = self._new_code()
        self.store.set(otp_key(email, purpose), OTPRecord(code=code, expires_at=self.clock() + self.ttl))

        prometheus_metrics.record_otp_event(purpose, "issued")
        self.log_operation("generate_otp", email=email, purpose=purpose)
        return code

    @BaseService.measure_operation("check_otp")
    def check_otp(self, email: str, code: str, purpose: str) -> bool:
        """Confirm a code without consuming it."""
        self._validate_purpose(purpose)
        key = otp_key(email, purpose)
        now = self.clock()

        record = self._load_live(key, purpose, now)
        if record is None or not self._matches(record, code):
            prometheus_metrics.record_otp_event(purpose, "rejected")
            return False

        record.verified = True
        record.expires_at = now + self.ttl
        self.store.set(key, record)
        prometheus_metrics.record_otp_event(purpose, "checked")
        return True

    @BaseService.measure_operation("verify_otp")
    def verify_otp(self, email: str, code: str, purpose: str) -> bool:
        """Consume a code. Works whether or not it was checked first."""
        self._validate_purpose(purpose)
        key = otp_key(email, purpose)

        record = self._load_live(key, purpose, self.clock())
        if record is None or not self._matches(record, code):
            prometheus_metrics.record_otp_event(purpose, "rejected")
            return False

        self.store.delete(key)
        prometheus_metrics.record_otp_event(purpose, "verified")
        self.log_operation("verify_otp", email=email, purpose=purpose)
        return True


class OTPSweeper:
    """Background thread that periodically drops expired codes from the store."""

    def __init__(self, store: OTPStore, interval_seconds: float, clock: Optional[Clock] = None):
        self.store = store
        self.interval_seconds = interval_seconds
        self.clock = clock or utc_now
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def sweep_once(self) -> int:
        removed = self.store.sweep(self.clock())
        if removed:
            logger.debug(f"Swept {removed} expired one-time codes")
        return removed

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.sweep_once()
            except Exception:
                # Keep sweeping; a store hiccup shouldn't kill the thread
                logger.exception("OTP sweep failed")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="otp-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
