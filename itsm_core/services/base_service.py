"""
Base service implementation with common functionality for all services.

Services own a SQLAlchemy session unless one is handed in. An owned session
is committed or rolled back by ``transaction()``; a borrowed session is left
to whoever created it.
"""

from contextlib import contextmanager
from typing import NoReturn, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.db_config import get_db_manager
from ..exceptions import BaseError, ErrorCode, ServiceError
from ..utils.logger import ContextAwareLogger, get_logger


class SessionManagedService:
    """
    Service that owns and manages its own database session.

    Each request builds its own services, so sessions are never shared
    between requests.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Initialize service with its own session.

        Args:
            session: Optional existing session (for testing or coordination)
            logger: Optional logger instance
        """
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = self._create_session()
            self._owns_session = True
        self.logger = logger or get_logger()

    def _create_session(self) -> Session:
        """Create a new session from the global database manager."""
        return get_db_manager().new_session()

    @contextmanager
    def transaction(self):
        """
        Context manager for transactional operations.

        Usage:
            with service.transaction():
                service.session.add(...)
                # Auto-commits on success, rollback on exception

        A borrowed session is only flushed; committing or rolling it back is
        left to its owner.
        """
        try:
            yield self.session
            if self._owns_session:
                self.session.commit()
            else:
                self.session.flush()
        except Exception:
            if self._owns_session:
                self.session.rollback()
            raise

    def commit(self):
        """Manually commit the current transaction."""
        if self._owns_session:
            self.session.commit()

    def rollback(self):
        """Manually rollback the current transaction."""
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        """Support for 'with' statement."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Auto-close session on exit."""
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[str] = None
    ) -> NoReturn:
        """
        Re-raise domain errors untouched and wrap everything else.

        Args:
            operation: Operation being performed
            exception: Exception that occurred
            entity_id: Optional ID of the entity involved

        Raises:
            BaseError: The original error, or a ServiceError wrapping it
        """
        if isinstance(exception, BaseError):
            raise exception

        error_code = (
            ErrorCode.DATABASE_ERROR
            if isinstance(exception, SQLAlchemyError)
            else ErrorCode.INTERNAL_ERROR
        )
        self.logger.error(
            f"Error in {operation}: {str(exception)}",
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
            },
        )
        raise ServiceError(
            f"Error in {operation}",
            error_code=error_code,
            operation=operation,
            entity_id=entity_id,
            cause=exception,
        ) from exception
