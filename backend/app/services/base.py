# backend/app/services/base.py
"""
Base service for the booking platform.

Services own business rules and the transaction boundary. Subclasses get:
- transaction(): commit on success, rollback on any error
- measure_operation(): Prometheus timing plus a warning for slow calls
- log_operation(): one structured INFO line per state change
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    db may be None for services that only talk to other backends
    (email, one-time codes); transaction() is unavailable to those.
    """

    def __init__(self, db: Optional[Session]):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit everything done inside the block, or roll it all back.

        Usage:
            with self.transaction():
                self.repository.create(...)

        Raises:
            ServiceException: the commit (or a statement inside) hit a database error
        """
        if self.db is None:
            raise ServiceException(f"{self.__class__.__name__} has no database session")
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator recording duration and outcome of a service call.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start = time.perf_counter()
                failed = False
                try:
                    return func(self, *args, **kwargs)
                except Exception:
                    failed = True
                    raise
                finally:
                    elapsed = time.perf_counter() - start
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(f"Slow operation detected: {operation_name} took {elapsed:.2f}s")
                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="error" if failed else "success",
                    )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a completed operation; context goes to the record's extra fields."""
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})
