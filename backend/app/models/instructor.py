# backend/app/models/instructor.py
from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Instructor(Base):
    """Instructor profile: where they teach and which licence classes."""

    __tablename__ = "instructors"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    locations = Column(JSON, nullable=False, default=list)
    class_types = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="instructor_profile")
    bookings = relationship("Booking", back_populates="instructor")

    def teaches_at(self, location: str) -> bool:
        return location in (self.locations or [])

    def teaches_class(self, class_type: str) -> bool:
        return class_type in (self.class_types or [])

    def __repr__(self) -> str:
        return f"<Instructor {self.id} user={self.user_id}>"
