# backend/app/repositories/base_repository.py
"""
Base repository for the booking platform.

Repositories own all SQLAlchemy access for one model and never commit;
services decide the transaction boundary (see BaseService.transaction).
Every SQLAlchemyError leaves here as a RepositoryException.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """Minimal data-access contract shared by all repositories."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Entity with this primary key, or None."""

    @abstractmethod
    def create(self, **kwargs: Any) -> T:
        """Add and flush a new entity."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Delete by primary key. False if nothing matched."""


class BaseRepository(IRepository[T]):
    """
    Generic repository bound to one model class.

    Attributes:
        db: Session owned by the calling service
        model: Mapped class this repository reads and writes
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def _name(self) -> str:
        return self.model.__name__

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {self._name} {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self._name}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Add a new entity and flush so its id and defaults are populated.

        Does not commit.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as e:
            self.logger.error(f"Integrity error creating {self._name}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated for {self._name}: {str(e)}") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self._name}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self._name}: {str(e)}") from e

    def delete(self, id: str) -> bool:
        try:
            entity = self.get_by_id(id)
            if entity is None:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self._name} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self._name}: {str(e)}") from e
