# backend/app/services/login_rate_limiter.py
"""
Per-account, per-origin daily login throttling.

Every credential login attempt is recorded. Once an (email, ip) pair has
settings.max_login_attempts failures since local midnight it is locked out
until the next local midnight. "Local" is settings.rate_limit_timezone, never
the host timezone. Successful logins are recorded but neither count toward
the limit nor reset it.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Callable, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.timezone_utils import start_of_day, start_of_next_day, utc_now
from ..repositories import RepositoryFactory
from ..repositories.login_attempt_repository import LoginAttemptRepository
from .base import BaseService

logger = logging.getLogger(__name__)

UNKNOWN_IP = "0.0.0.0"


def get_ip_address(request: Request) -> str:
    """Originating client IP: first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IP


@dataclass(frozen=True)
class AttemptsInfo:
    attempts_remaining: int
    next_reset_time: datetime


class LoginRateLimiter(BaseService):
    """Records login attempts and answers whether a pair is locked out today."""

    def __init__(
        self,
        db: Session,
        repository: Optional[LoginAttemptRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_login_attempt_repository(db)
        self.clock = clock or utc_now
        self.max_attempts = settings.max_login_attempts
        self.tz_name = settings.rate_limit_timezone

    def _failures_today(self, email: str, ip_address: str) -> int:
        since = start_of_day(self.clock(), self.tz_name)
        return self.repository.count_failed_since(email.lower(), ip_address, since)

    @BaseService.measure_operation("record_login_attempt")
    def record_login_attempt(self, email: str, ip_address: str, successful: bool) -> None:
        with self.transaction():
            self.repository.create(
                email=email.lower(),
                ip_address=ip_address,
                timestamp=self.clock(),
                successful=successful,
            )

    @BaseService.measure_operation("has_exceeded_max_attempts")
    def has_exceeded_max_attempts(self, email: str, ip_address: str) -> bool:
        return self._failures_today(email, ip_address) >= self.max_attempts

    @BaseService.measure_operation("get_attempts_info")
    def get_attempts_info(self, email: str, ip_address: str) -> AttemptsInfo:
        failures = self._failures_today(email, ip_address)
        return AttemptsInfo(
            attempts_remaining=max(0, self.max_attempts - failures),
            next_reset_time=start_of_next_day(self.clock(), self.tz_name),
        )
