# backend/app/models/login_attempt.py

from sqlalchemy import Boolean, Column, DateTime, Index, String
import ulid

from ..database import Base


class LoginAttempt(Base):
    """One row per credential login attempt. Append-only."""

    __tablename__ = "login_attempts"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    email = Column(String, nullable=False, index=True)
    ip_address = Column(String(64), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    successful = Column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("idx_login_attempts_email_ip_ts", "email", "ip_address", "timestamp"),)

    def __repr__(self):
        outcome = "ok" if self.successful else "failed"
        return f"<LoginAttempt {self.email} from {self.ip_address} {outcome}>"
