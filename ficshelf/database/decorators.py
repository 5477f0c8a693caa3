#!/usr/bin/env python3
"""
decorators.py
--------------------
Decorators shared by the managers and database services.

    @handle_db_errors            SQLAlchemy failures become DatabaseError
    @log_database_operation(op)  timing and outcome go to ``self.logger``
    @validate_metadata([...])    required metadata keys are checked first
"""
import time
from functools import wraps
from typing import Callable, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ficshelf.core.exceptions import DatabaseError
from ficshelf.core.logging_manager import safe_logger
from ficshelf.core.validators import DataValidator


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def log_database_operation(operation_name: str):
    """
    Time a manager method and log how it ended.

    The method's ``self.logger`` gets a debug line on entry, then either
    ``<operation_name>_completed`` or the raised exception, each with the
    elapsed milliseconds. Objects without a logger run unlogged.
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            logger = safe_logger(getattr(self, "logger", None))
            logger.log_debug(
                f"{operation_name} started",
                {"positional": len(args), "keywords": sorted(kwargs)},
            )
            started = time.perf_counter()
            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e, {"operation": operation_name, "elapsed_ms": _elapsed_ms(started)}
                )
                raise
            logger.log_operation(
                f"{operation_name}_completed", {"elapsed_ms": _elapsed_ms(started)}
            )
            return result

        return wrapper

    return decorator


def validate_metadata(required_fields: List[str]):
    """
    Check ``required_fields`` in the metadata dict before the method runs.

    The dict is the ``metadata`` keyword if given, else the last
    positional argument.
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            if "metadata" in kwargs:
                metadata = kwargs["metadata"]
            else:
                metadata = args[-1] if args else {}
            DataValidator.validate_required_fields(metadata, required_fields)
            return function(self, *args, **kwargs)

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """Re-raise SQLAlchemy failures as DatabaseError; other errors pass through."""

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            if isinstance(e, IntegrityError):
                problem = "Data integrity violation"
            else:
                problem = "Database operation failed"
            raise DatabaseError(f"{problem} in {function.__name__}: {e}") from e

    return wrapper
