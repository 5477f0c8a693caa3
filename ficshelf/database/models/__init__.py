"""
Database Models Package
------------------------

SQLAlchemy ORM models for The Fic Shelf database.

Modules:
- base: Base class and timestamp mixin
- associations: Fic/shelf link tables to taggable entities
- taggables: Fandom, Relationship, Character, Tag
- library: Fic, Shelf, ShelfFic, ReadingLog
- social: Profile, Follow, Post, Comment, Like, BookmarkedShelf

Usage:
    from ficshelf.database.models import Fic, Fandom, ReadingLog
"""
# Base classes
from .base import Base, TimestampMixin

# Association tables
from .associations import (
    fic_characters,
    fic_fandoms,
    fic_relationships,
    fic_tags,
    shelf_fandoms,
    shelf_relationships,
    shelf_tags,
)

# Taggable entities
from .taggables import Character, Fandom, Relationship, Tag, TaggableMixin

# Library
from .library import Fic, ReadingLog, Shelf, ShelfFic

# Social
from .social import BookmarkedShelf, Comment, Follow, Like, Post, Profile

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Association tables
    "fic_fandoms",
    "fic_relationships",
    "fic_characters",
    "fic_tags",
    "shelf_fandoms",
    "shelf_relationships",
    "shelf_tags",
    # Taggables
    "TaggableMixin",
    "Fandom",
    "Relationship",
    "Character",
    "Tag",
    # Library
    "Fic",
    "Shelf",
    "ShelfFic",
    "ReadingLog",
    # Social
    "Profile",
    "Follow",
    "Post",
    "Comment",
    "Like",
    "BookmarkedShelf",
]
