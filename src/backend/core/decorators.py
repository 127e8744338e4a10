"""
Error handling and logging decorators for service-layer database operations.

Services hold their session as `self.db`; the transaction decorator finds
it there (or among the call arguments), commits on success and rolls back
when anything raises.
"""
import functools
import inspect
import logging
import traceback
from typing import Any, Callable, Optional

from fastapi import HTTPException
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class DatabaseErrorHandler:
    """Classifies and logs database errors."""

    DATABASE_EXCEPTIONS = (SQLAlchemyError, ConnectionError)

    @staticmethod
    def handle_database_error(
        exc: Exception, operation: str, context: Optional[dict] = None
    ) -> tuple[bool, str]:
        """
        Log a database error and report whether retrying could help.

        Returns:
            Tuple of (is_recoverable, error_message)
        """
        context_str = f" | Context: {context}" if context else ""

        if isinstance(exc, IntegrityError):
            error_msg = f"Database integrity error during {operation}: {exc}{context_str}"
            logger.warning(error_msg)
            return False, error_msg

        if isinstance(exc, (ConnectionError, DisconnectionError, TimeoutError, OperationalError)):
            error_msg = f"Database availability error during {operation}: {exc}{context_str}"
            logger.error(error_msg)
            return True, error_msg

        if isinstance(exc, StatementError):
            error_msg = f"Database statement error during {operation}: {exc}{context_str}"
            logger.warning(error_msg)
            return False, error_msg

        error_msg = (
            f"Unexpected database error during {operation}: "
            f"{type(exc).__name__}: {exc}{context_str}"
        )
        logger.error(f"{error_msg}\nTraceback: {traceback.format_exc()}")
        return False, error_msg


def _find_session(args: tuple, kwargs: dict) -> Optional[AsyncSession]:
    for value in (*args, *kwargs.values()):
        if isinstance(value, AsyncSession):
            return value
        session = getattr(value, "db", None)
        if isinstance(session, AsyncSession):
            return session
    return None


def log_database_operation(operation: str, level: str = "debug") -> Callable:
    """
    Decorator to log the start and outcome of an async database operation.

    Args:
        operation: Description of the operation
        level: Logging level ('debug', 'info', 'warning', 'error')
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            logger_method = getattr(logger, level)
            func_name = getattr(func, "__name__", "unknown")
            logger_method(f"Starting {operation} via {func_name}")

            try:
                result = await func(*args, **kwargs)
                logger_method(f"Completed {operation} via {func_name}")
                return result
            except Exception as exc:
                logger_method(f"Failed {operation} via {func_name}: {exc}")
                raise

        return async_wrapper

    return decorator


def transactional_database_operation(
    func=None, operation_name: Optional[str] = None
) -> Callable:
    """
    Run an async operation inside a commit-or-rollback unit of work.

    Can be used with or without parentheses:
        @transactional_database_operation
        @transactional_database_operation("assign technician")
    """

    def decorator(f: Callable) -> Callable:
        if not inspect.iscoroutinefunction(f):
            raise TypeError(
                f"transactional_database_operation requires an async function, got {f.__name__}"
            )

        @functools.wraps(f)
        async def async_wrapper(*args, **kwargs) -> Any:
            operation = operation_name or f.__name__
            db_session = _find_session(args, kwargs)

            if db_session is None:
                logger.warning(f"No AsyncSession found for transaction operation {operation}")
                return await f(*args, **kwargs)

            try:
                logger.debug(f"Starting database transaction for {operation}")
                result = await f(*args, **kwargs)
                await db_session.commit()
                logger.debug(f"Transaction committed for {operation}")
                return result

            except HTTPException:
                # Business-rule rejections: undo partial work, no error log
                await db_session.rollback()
                raise

            except DatabaseErrorHandler.DATABASE_EXCEPTIONS as exc:
                await db_session.rollback()
                DatabaseErrorHandler.handle_database_error(
                    exc, operation, {"function": f.__name__}
                )
                raise

            except Exception as exc:
                await db_session.rollback()
                logger.error(
                    f"Unexpected error in {operation}: {type(exc).__name__}: {exc}\n"
                    f"Traceback: {traceback.format_exc()}"
                )
                raise

        return async_wrapper

    if func is None:
        return decorator
    if callable(func):
        return decorator(func)
    # Called with the operation name as first positional argument
    return transactional_database_operation(operation_name=func)
