"""
Taggable Entity Models
-----------------------

Shared label entities attached to fics and shelves.

Models:
    - Fandom: Source work a fic is written for
    - Relationship: Pairing or relationship a fic focuses on
    - Character: Character appearing in a fic
    - Tag: Free-form additional tag

All four share one shape (``TaggableMixin``): an id, the display ``name``
as first entered, and ``name_key``, the case-folded name that carries the
uniqueness constraint. Two rows of one category can therefore never differ
only by case. Taggables are owned by no single user and are never deleted
by the resolution pipeline.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, List

# --- Third party imports ---
from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

# --- Local imports ---
from .associations import (
    fic_characters,
    fic_fandoms,
    fic_relationships,
    fic_tags,
    shelf_fandoms,
    shelf_relationships,
    shelf_tags,
)
from .base import Base

if TYPE_CHECKING:
    from .library import Fic, Shelf


class TaggableMixin:
    """
    Columns shared by every taggable category.

    Attributes:
        id: Primary key
        name: Display name, whitespace-normalized, original casing kept
        name_key: Case-insensitive comparison key (unique per category)
    """

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    @declared_attr.directive
    def __table_args__(cls):
        return (
            CheckConstraint("name != ''", name=f"ck_{cls.__tablename__}_non_empty_name"),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        return self.name


class Fandom(TaggableMixin, Base):
    """Fandom label, linked to fics and shelves."""

    __tablename__ = "fandoms"

    fics: Mapped[List["Fic"]] = relationship(
        "Fic", secondary=fic_fandoms, back_populates="fandoms"
    )
    shelves: Mapped[List["Shelf"]] = relationship(
        "Shelf", secondary=shelf_fandoms, back_populates="fandoms"
    )


class Relationship(TaggableMixin, Base):
    """Relationship (pairing) label, linked to fics and shelves."""

    __tablename__ = "relationships"

    fics: Mapped[List["Fic"]] = relationship(
        "Fic", secondary=fic_relationships, back_populates="relationships"
    )
    shelves: Mapped[List["Shelf"]] = relationship(
        "Shelf", secondary=shelf_relationships, back_populates="relationships"
    )


class Character(TaggableMixin, Base):
    """Character label, linked to fics only."""

    __tablename__ = "characters"

    fics: Mapped[List["Fic"]] = relationship(
        "Fic", secondary=fic_characters, back_populates="characters"
    )


class Tag(TaggableMixin, Base):
    """Additional tag label, linked to fics and shelves."""

    __tablename__ = "tags"

    fics: Mapped[List["Fic"]] = relationship(
        "Fic", secondary=fic_tags, back_populates="tags"
    )
    shelves: Mapped[List["Shelf"]] = relationship(
        "Shelf", secondary=shelf_tags, back_populates="tags"
    )
