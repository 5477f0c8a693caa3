#!/usr/bin/env python3
"""
taggable_manager.py
-------------------
Config-driven manager for the shared label entities: Fandom, Relationship,
Character and Tag.

All four categories have the same shape, so one class serves them all;
each category is described by a TaggableConfig.

The central operation is ``resolve``: the get-or-create pipeline that turns
user-supplied labels into stable entity ids. Lookups are case-insensitive
(through the ``name_key`` column), so "Harry Potter" and "harry potter"
always resolve to one row.

Usage:
    fandoms = TaggableManager.for_fandoms(session, logger)
    ids = fandoms.resolve(["Harry Potter", {"id": 3, "label": "Naruto"}])

    tags = TaggableManager.for_category(session, "tag", logger)
    tag = tags.get_or_create("Fluff")
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.orm import Session

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.logging_manager import FicShelfLogger, safe_logger
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import handle_db_errors, log_database_operation
from ficshelf.database.models import Character, Fandom, Relationship, Tag
from .base_manager import BaseManager


@dataclass(frozen=True)
class TaggableConfig:
    """
    Configuration for one taggable category.

    Attributes:
        category: Category key ('fandom', 'relationship', 'character', 'tag')
        model_class: SQLAlchemy model class
        display_name: Human-readable name for messages
        plural: Metadata key / relationship attribute name (e.g. 'fandoms')
    """

    category: str
    model_class: Type
    display_name: str
    plural: str


FANDOM_CONFIG = TaggableConfig("fandom", Fandom, "fandom", "fandoms")
RELATIONSHIP_CONFIG = TaggableConfig(
    "relationship", Relationship, "relationship", "relationships"
)
CHARACTER_CONFIG = TaggableConfig("character", Character, "character", "characters")
TAG_CONFIG = TaggableConfig("tag", Tag, "tag", "tags")

CATEGORY_CONFIGS: Dict[str, TaggableConfig] = {
    config.category: config
    for config in (FANDOM_CONFIG, RELATIONSHIP_CONFIG, CHARACTER_CONFIG, TAG_CONFIG)
}


def label_text(label: Any) -> Optional[str]:
    """
    Extract the display text of a label.

    Raw labels are strings. Labels picked from autocomplete arrive already
    resolved, as ``{"id": .., "label": ..}`` mappings or objects with a
    ``label`` attribute; their ``label`` is the display text.

    Returns:
        Whitespace-normalized text, or None when empty
    """
    if isinstance(label, dict):
        label = label.get("label")
    elif not isinstance(label, str) and hasattr(label, "label"):
        label = label.label
    return DataValidator.normalize_string(label)


class TaggableManager(BaseManager):
    """Get-or-create and lookup operations for one taggable category."""

    def __init__(
        self,
        session: Session,
        logger: Optional[FicShelfLogger],
        config: TaggableConfig,
    ):
        """
        Initialize the taggable manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
            config: Category configuration
        """
        super().__init__(session, logger)
        self.config = config

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def for_category(
        cls, session: Session, category: str, logger: Optional[FicShelfLogger] = None
    ) -> "TaggableManager":
        """
        Create a manager for a category by key.

        Raises:
            ValidationError: If the category is unknown
        """
        config = CATEGORY_CONFIGS.get(category)
        if config is None:
            raise ValidationError(
                f"Unknown category '{category}'; "
                f"expected one of {', '.join(CATEGORY_CONFIGS)}"
            )
        return cls(session, logger, config)

    @classmethod
    def for_fandoms(
        cls, session: Session, logger: Optional[FicShelfLogger] = None
    ) -> "TaggableManager":
        """Create a manager for Fandom entities."""
        return cls(session, logger, FANDOM_CONFIG)

    @classmethod
    def for_relationships(
        cls, session: Session, logger: Optional[FicShelfLogger] = None
    ) -> "TaggableManager":
        """Create a manager for Relationship entities."""
        return cls(session, logger, RELATIONSHIP_CONFIG)

    @classmethod
    def for_characters(
        cls, session: Session, logger: Optional[FicShelfLogger] = None
    ) -> "TaggableManager":
        """Create a manager for Character entities."""
        return cls(session, logger, CHARACTER_CONFIG)

    @classmethod
    def for_tags(
        cls, session: Session, logger: Optional[FicShelfLogger] = None
    ) -> "TaggableManager":
        """Create a manager for Tag entities."""
        return cls(session, logger, TAG_CONFIG)

    @property
    def model_class(self) -> Type:
        return self.config.model_class

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @handle_db_errors
    def get(self, name: Any = None, entity_id: Optional[int] = None) -> Optional[Any]:
        """
        Retrieve an entity by case-insensitive name or by id.

        Args:
            name: Name to match (any casing)
            entity_id: Primary key

        Returns:
            The entity if found, None otherwise
        """
        if entity_id is not None:
            return self.session.get(self.model_class, entity_id)

        key = DataValidator.normalize_key(label_text(name))
        if key is None:
            return None
        return self.session.scalars(
            select(self.model_class).where(self.model_class.name_key == key)
        ).first()

    def exists(self, name: Any) -> bool:
        """Check whether an entity with this name exists (case-insensitive)."""
        return self.get(name) is not None

    @handle_db_errors
    def get_all(self) -> List[Any]:
        """All entities of the category, alphabetically."""
        return list(
            self.session.scalars(
                select(self.model_class).order_by(self.model_class.name_key)
            )
        )

    @handle_db_errors
    def search(self, fragment: str, limit: int = 20) -> List[Any]:
        """
        Case-insensitive substring search, for autocomplete.

        Args:
            fragment: Text the name must contain
            limit: Maximum number of results

        Returns:
            Matching entities ordered by name; empty for an empty fragment
        """
        key = DataValidator.normalize_key(fragment)
        if key is None:
            return []
        stmt = (
            select(self.model_class)
            .where(self._contains(self.model_class.name_key, key))
            .order_by(self.model_class.name_key)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    # -------------------------------------------------------------------------
    # Get-or-create
    # -------------------------------------------------------------------------

    @handle_db_errors
    def get_or_create(self, name: Any) -> Any:
        """
        Return the entity matching ``name`` (case-insensitive), creating it
        with ``name`` as display text when absent.

        Raises:
            ValidationError: If the name is empty after trimming
            DatabaseError: If the insert fails and no row can be re-found
        """
        text = label_text(name)
        if text is None:
            raise ValidationError(f"{self.config.display_name.capitalize()} name cannot be empty")
        return self._get_or_create(
            self.model_class,
            {"name_key": DataValidator.normalize_key(text)},
            {"name": text},
        )

    @handle_db_errors
    @log_database_operation("resolve_labels")
    def resolve(self, labels: Optional[Iterable[Any]]) -> List[int]:
        """
        Resolve labels to entity ids, creating missing entities.

        Labels are processed in input order. Labels empty after trimming
        are skipped. Repeated labels (in any casing) map to the same id
        and keep their positions in the output.

        Args:
            labels: Strings and/or already-resolved ``{id, label}`` pairs

        Returns:
            One id per non-empty label

        Raises:
            DatabaseError: On the first failing lookup or insert; entities
                created earlier in the batch are left to the caller's
                transaction
        """
        ids: List[int] = []
        created = 0
        for label in labels or []:
            text = label_text(label)
            if text is None:
                continue
            existing = self.get(text)
            entity = existing if existing is not None else self.get_or_create(text)
            if existing is None:
                created += 1
            ids.append(entity.id)

        safe_logger(self.logger).log_debug(
            f"Resolved {self.config.plural}",
            {"resolved": len(ids), "created": created},
        )
        return ids
