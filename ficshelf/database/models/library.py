"""
Library Models
---------------

The reading-side models of The Fic Shelf.

Models:
    - Fic: A fan-fiction work (metadata and external link only)
    - Shelf: A user-curated, optionally private collection of fics
    - ShelfFic: Placement of a fic on a shelf, with its position
    - ReadingLog: A user's reading sessions of one fic

Reading ranges are stored as interval strings such as
``[2025-06-01,2025-06-05)``; see ``ficshelf.analytics.intervals``.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

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
from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .social import Profile
    from .taggables import Character, Fandom, Relationship, Tag


DEFAULT_SHELF_COLOR = "#a7b89e"
DEFAULT_SORT_ORDER = 9999


class Fic(TimestampMixin, Base):
    """
    A fan-fiction work.

    The content itself is never stored, only its metadata and a link.
    Fics are shared: any user may log or edit them.

    Attributes:
        id: Primary key
        link: Normalized URL (no scheme, no ``www.``, lowercase), unique
        title: Work title
        author: Author name
        summary: Work summary
        rating: Content rating
        archive_warning: List of archive warnings
        category: Relationship category (F/M, M/M, Gen, ...)
        words: Word count (None when unknown)
        chapters: Chapter count as displayed (e.g. "3/10")
        hits: Hit count
        kudos: Kudos count

    Relationships:
        fandoms, relationships, characters, tags: Many-to-many taggables
        shelf_links: Placements on shelves
        reading_logs: Reading logs of this fic
    """

    __tablename__ = "fics"
    __table_args__ = (
        CheckConstraint("link != ''", name="ck_fic_non_empty_link"),
        CheckConstraint("words IS NULL OR words >= 0", name="ck_fic_positive_words"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    link: Mapped[str] = mapped_column(String(500), unique=True, nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(500))
    author: Mapped[Optional[str]] = mapped_column(String(255))
    summary: Mapped[Optional[str]] = mapped_column(Text)
    rating: Mapped[Optional[str]] = mapped_column(String(100))
    archive_warning: Mapped[List[str]] = mapped_column(JSON, default=list)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    words: Mapped[Optional[int]] = mapped_column(Integer)
    chapters: Mapped[Optional[str]] = mapped_column(String(50))
    hits: Mapped[Optional[int]] = mapped_column(Integer)
    kudos: Mapped[Optional[int]] = mapped_column(Integer)

    # ---- Relationships ----
    fandoms: Mapped[List["Fandom"]] = relationship(
        "Fandom", secondary=fic_fandoms, back_populates="fics"
    )
    relationships: Mapped[List["Relationship"]] = relationship(
        "Relationship", secondary=fic_relationships, back_populates="fics"
    )
    characters: Mapped[List["Character"]] = relationship(
        "Character", secondary=fic_characters, back_populates="fics"
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary=fic_tags, back_populates="fics"
    )
    shelf_links: Mapped[List["ShelfFic"]] = relationship(
        "ShelfFic", back_populates="fic", cascade="all, delete-orphan"
    )
    reading_logs: Mapped[List["ReadingLog"]] = relationship(
        "ReadingLog", back_populates="fic", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Fic(id={self.id}, link='{self.link}')>"

    def __str__(self) -> str:
        return self.title or self.link


class Shelf(Base):
    """
    A named collection of fics owned by one user.

    Attributes:
        id: Primary key
        user_id: Owning profile
        title: Shelf title
        color: Display color (hex)
        is_private: Hidden from other users when True
        sort_order: Position among the owner's shelves
        created_at: Creation time

    Relationships:
        owner: The owning Profile
        fandoms, relationships, tags: Many-to-many taggables
        fic_links: Ordered placements of fics on this shelf
    """

    __tablename__ = "shelves"
    __table_args__ = (CheckConstraint("title != ''", name="ck_shelf_non_empty_title"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_SHELF_COLOR)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=DEFAULT_SORT_ORDER)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    owner: Mapped["Profile"] = relationship("Profile", back_populates="shelves")
    fandoms: Mapped[List["Fandom"]] = relationship(
        "Fandom", secondary=shelf_fandoms, back_populates="shelves"
    )
    relationships: Mapped[List["Relationship"]] = relationship(
        "Relationship", secondary=shelf_relationships, back_populates="shelves"
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary=shelf_tags, back_populates="shelves"
    )
    fic_links: Mapped[List["ShelfFic"]] = relationship(
        "ShelfFic",
        back_populates="shelf",
        cascade="all, delete-orphan",
        order_by="ShelfFic.position",
    )

    def __repr__(self) -> str:
        return f"<Shelf(id={self.id}, title='{self.title}')>"

    @property
    def fics(self) -> List[Fic]:
        """Fics on this shelf in position order."""
        return [link.fic for link in self.fic_links]


class ShelfFic(Base):
    """
    Placement of a fic on a shelf.

    Attributes:
        shelf_id: Shelf (composite primary key)
        fic_id: Fic (composite primary key)
        position: 1-based order on the shelf; new placements go last
    """

    __tablename__ = "shelf_fic"

    shelf_id: Mapped[int] = mapped_column(
        ForeignKey("shelves.id", ondelete="CASCADE"), primary_key=True
    )
    fic_id: Mapped[int] = mapped_column(
        ForeignKey("fics.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    shelf: Mapped["Shelf"] = relationship("Shelf", back_populates="fic_links")
    fic: Mapped["Fic"] = relationship("Fic", back_populates="shelf_links")


class ReadingLog(TimestampMixin, Base):
    """
    A user's reading record for one fic.

    Each element of ``read_ranges`` is one read (rereads append new
    ranges). One log per (user, fic) is the convention the managers keep;
    the schema does not enforce it.

    Attributes:
        id: Primary key
        user_id: Reader
        fic_id: Fic read
        read_ranges: Interval strings, e.g. ``["[2025-06-01,2025-06-05)"]``
        notes: Free-text notes
    """

    __tablename__ = "reading_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fic_id: Mapped[int] = mapped_column(
        ForeignKey("fics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read_ranges: Mapped[List[str]] = mapped_column(JSON, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped["Profile"] = relationship("Profile", back_populates="reading_logs")
    fic: Mapped["Fic"] = relationship("Fic", back_populates="reading_logs")

    def __repr__(self) -> str:
        return f"<ReadingLog(id={self.id}, user_id={self.user_id}, fic_id={self.fic_id})>"
