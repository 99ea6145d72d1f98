# backend/app/repositories/availability_repository.py
"""
Availability Repository for the booking platform

Data access for the weekly template (global_availability) and its
date-ranged overrides (special_availability). Both tables are upserted by
their natural key: day + start_date + end_date.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional, Type, Union

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import GlobalAvailability, SpecialAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

AvailabilityRow = Union[GlobalAvailability, SpecialAvailability]


class AvailabilityRepository(BaseRepository[GlobalAvailability]):
    """Repository for global and special availability."""

    def __init__(self, db: Session):
        super().__init__(db, GlobalAvailability)
        self.logger = logging.getLogger(__name__)

    # Global availability

    def list_global(self) -> List[GlobalAvailability]:
        try:
            return (
                self.db.query(GlobalAvailability)
                .order_by(GlobalAvailability.day, GlobalAvailability.start_date)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing global availability: {str(e)}")
            raise RepositoryException(f"Failed to list global availability: {str(e)}")

    def get_global_for_date(self, day: str, target_date: date) -> List[GlobalAvailability]:
        """Global rows for the weekday whose validity window (if any) contains the date."""
        try:
            return (
                self.db.query(GlobalAvailability)
                .filter(
                    GlobalAvailability.day == day,
                    or_(
                        GlobalAvailability.start_date.is_(None),
                        GlobalAvailability.start_date <= target_date,
                    ),
                    or_(
                        GlobalAvailability.end_date.is_(None),
                        GlobalAvailability.end_date >= target_date,
                    ),
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting global availability for {target_date}: {str(e)}")
            raise RepositoryException(f"Failed to get global availability: {str(e)}")

    def upsert_global(self, data: Dict[str, Any]) -> GlobalAvailability:
        return self._upsert(GlobalAvailability, data)

    def delete_global(self, availability_id: str) -> bool:
        return self.delete(availability_id)

    # Special availability

    def list_special(self, check_date: Optional[date] = None) -> List[SpecialAvailability]:
        try:
            query = self.db.query(SpecialAvailability)
            if check_date is not None:
                query = query.filter(
                    SpecialAvailability.start_date <= check_date,
                    SpecialAvailability.end_date >= check_date,
                )
            return query.order_by(SpecialAvailability.start_date, SpecialAvailability.day).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing special availability: {str(e)}")
            raise RepositoryException(f"Failed to list special availability: {str(e)}")

    def get_special_for_date(self, day: str, target_date: date) -> List[SpecialAvailability]:
        """Special rows for the weekday whose [start_date, end_date] contains the date."""
        try:
            return (
                self.db.query(SpecialAvailability)
                .filter(
                    SpecialAvailability.day == day,
                    SpecialAvailability.start_date <= target_date,
                    SpecialAvailability.end_date >= target_date,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting special availability for {target_date}: {str(e)}")
            raise RepositoryException(f"Failed to get special availability: {str(e)}")

    def upsert_special(self, data: Dict[str, Any]) -> SpecialAvailability:
        return self._upsert(SpecialAvailability, data)

    def delete_special(self, availability_id: str) -> bool:
        try:
            entity = self.db.query(SpecialAvailability).filter(SpecialAvailability.id == availability_id).first()
            if not entity:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting special availability {availability_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete special availability: {str(e)}")

    # Helpers

    def _upsert(self, model: Type[AvailabilityRow], data: Dict[str, Any]) -> AvailabilityRow:
        """Update the row matching day+start_date+end_date, or create it."""
        try:
            query = self.db.query(model).filter(model.day == data["day"])
            for field in ("start_date", "end_date"):
                value = data.get(field)
                column = getattr(model, field)
                query = query.filter(column.is_(None) if value is None else column == value)

            entity = query.first()
            if entity is None:
                entity = model(**data)
                self.db.add(entity)
            else:
                for key, value in data.items():
                    setattr(entity, key, value)

            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error upserting {model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to save {model.__name__}: {str(e)}")
