#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common utilities for all entity managers.

Key Features:
    - Retry logic for database lock handling
    - Conflict-safe get-or-create against a unique key
    - Object resolution helpers (instance or id)
    - Scalar field update helper driven by normalizers
    - Literal substring matching for searches

Usage:
    Subclass BaseManager for each entity type:

    class ShelfManager(BaseManager):
        def create(self, user, metadata) -> Shelf:
            DataValidator.validate_required_fields(metadata, ["title"])
            ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar, Union

# --- Third party imports ---
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from ficshelf.core.exceptions import DatabaseError, ValidationError
from ficshelf.core.logging_manager import FicShelfLogger, safe_logger


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager providing common operations and utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[FicShelfLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Get an existing row by its unique key or create it.

        The insert runs inside a SAVEPOINT. If a concurrent writer created
        the same key between the lookup and the insert, the unique
        constraint rejects ours; only the savepoint is rolled back (earlier
        work in the session survives) and the row is queried once more.

        Args:
            model_class: ORM model class to query or create
            lookup_fields: Unique-key field values to filter/create by
            extra_fields: Additional fields for new object creation only

        Returns:
            ORM instance of the model class

        Raises:
            DatabaseError: If the insert failed and no row can be found
        """
        obj = self.session.scalars(
            select(model_class).filter_by(**lookup_fields).limit(1)
        ).first()
        if obj is not None:
            return obj

        fields = dict(lookup_fields)
        if extra_fields:
            fields.update(extra_fields)

        try:
            with self.session.begin_nested():
                obj = model_class(**fields)
                self.session.add(obj)
            return obj
        except IntegrityError as e:
            safe_logger(self.logger).log_debug(
                f"{model_class.__name__} insert conflicted, re-querying",
                {"lookup": lookup_fields},
            )
            obj = self.session.scalars(
                select(model_class).filter_by(**lookup_fields).limit(1)
            ).first()
            if obj is not None:
                return obj
            raise DatabaseError(
                f"Failed to create {model_class.__name__} for {lookup_fields}: {e}"
            ) from e

    def _resolve_object(self, item: Union[T, int], model_class: Type[T]) -> T:
        """
        Resolve an item to a persisted ORM object.

        Args:
            item: Object instance or ID
            model_class: Target model class

        Returns:
            Resolved ORM object

        Raises:
            ValidationError: If the object is not persisted or not found
            TypeError: If item type is invalid
        """
        if isinstance(item, model_class):
            if item.id is None:
                raise ValidationError(f"{model_class.__name__} instance must be persisted")
            return item
        if isinstance(item, int) and not isinstance(item, bool):
            obj = self.session.get(model_class, item)
            if obj is None:
                raise ValidationError(f"No {model_class.__name__} found with id: {item}")
            return obj
        raise TypeError(
            f"Expected {model_class.__name__} instance or int, got {type(item)}"
        )

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        """Count rows of ``model_class`` matching equality filters."""
        stmt = select(func.count()).select_from(model_class)
        if filters:
            stmt = stmt.filter_by(**filters)
        return self.session.scalar(stmt) or 0

    def _update_scalar_fields(
        self,
        entity: Any,
        metadata: Dict[str, Any],
        field_configs: List[tuple],
    ) -> None:
        """
        Update multiple scalar fields from metadata using normalizers.

        Args:
            entity: Entity to update
            metadata: Dictionary containing field values
            field_configs: List of tuples:
                - (field_name, normalizer) for required fields
                - (field_name, normalizer, allow_none) for optional fields

        Example:
            self._update_scalar_fields(fic, metadata, [
                ("title", DataValidator.normalize_string),
                ("words", DataValidator.normalize_int, True),
            ])
        """
        for config in field_configs:
            field_name = config[0]
            normalizer = config[1]
            allow_none = config[2] if len(config) > 2 else False

            if field_name not in metadata:
                continue

            value = normalizer(metadata[field_name])
            if value is not None or allow_none:
                setattr(entity, field_name, value)

    @staticmethod
    def _contains(column: Any, fragment: str) -> Any:
        """
        ``column LIKE %fragment%`` with LIKE wildcards in ``fragment``
        matched literally.
        """
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return column.like(f"%{escaped}%", escape="\\")
