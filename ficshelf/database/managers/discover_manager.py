#!/usr/bin/env python3
"""
discover_manager.py
--------------------
Discovery searches across everyone's fics, public shelves and profiles.

Fic and shelf searches combine optional filters. Each filter narrows the
candidates to its own id set and the sets are intersected, so a fic must
pass every given filter. Within one label filter any listed label
matches. With no filters at all, every fic (or public shelf) is listed.

Key Features:
    - Fics by title fragment, authors, fandoms, relationships and tags
    - Public shelves by title fragment, fandoms, relationships and tags
    - Username autocomplete
    - Page-numbered results

Usage:
    discover = DiscoverManager(session, logger)
    page = discover.search_fics(fandoms=["Naruto"], tags=["Slow Burn"])
    for fic in page.items:
        ...
    if page.has_more:
        discover.search_fics(fandoms=["Naruto"], tags=["Slow Burn"], page=2)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, Optional, Set, TypeVar

from sqlalchemy import Select, Table, func, select

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import handle_db_errors, log_database_operation
from ficshelf.database.models import (
    Fic,
    Profile,
    Shelf,
    fic_fandoms,
    fic_relationships,
    fic_tags,
    shelf_fandoms,
    shelf_relationships,
    shelf_tags,
)
from .base_manager import BaseManager
from .taggable_manager import TaggableManager

PAGE_SIZE = 20
USER_SEARCH_LIMIT = 8

Item = TypeVar("Item")


@dataclass
class SearchPage(Generic[Item]):
    """One page of search results."""

    items: List[Item]
    page: int
    has_more: bool


class DiscoverManager(BaseManager):
    """Searches fics, public shelves and profiles."""

    def _label_ids(self, category: str, labels: Optional[Iterable[Any]]) -> Optional[Set[int]]:
        """
        Ids of existing entities named by ``labels``.

        ``labels`` is a comma-separated string or an iterable. Ints are
        taken as ids; anything else is matched by name in any casing.
        Unknown names are dropped, never created.

        Returns:
            None when no label was given, so the filter is skipped
        """
        if isinstance(labels, str):
            labels = DataValidator.split_labels(labels)
        elif labels is not None:
            labels = [
                label for label in labels
                if isinstance(label, int) or DataValidator.normalize_string(label)
            ]
        if not labels:
            return None

        taggables = TaggableManager.for_category(self.session, category, self.logger)
        ids = set()
        for label in labels:
            if isinstance(label, int) and not isinstance(label, bool):
                entity = taggables.get(entity_id=label)
            else:
                entity = taggables.get(label)
            if entity is not None:
                ids.add(entity.id)
        return ids

    @staticmethod
    def _owners_linked_to(table: Table, entity_ids: Set[int]) -> Select:
        """Owner ids linked to any of ``entity_ids`` in link ``table``."""
        owner_column, entity_column = table.primary_key.columns
        return select(owner_column).where(entity_column.in_(sorted(entity_ids)))

    def _paginate(self, stmt: Select, page: int, page_size: int) -> SearchPage:
        if page < 1:
            raise ValidationError(f"Page must be 1 or more, got {page}")
        if page_size < 1:
            raise ValidationError(f"Page size must be 1 or more, got {page_size}")
        rows = list(
            self.session.scalars(stmt.offset((page - 1) * page_size).limit(page_size + 1))
        )
        return SearchPage(items=rows[:page_size], page=page, has_more=len(rows) > page_size)

    # -------------------------------------------------------------------------
    # Fics
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("discover_fics")
    def search_fics(
        self,
        title: Optional[str] = None,
        authors: Optional[Iterable[str]] = None,
        fandoms: Optional[Iterable[Any]] = None,
        relationships: Optional[Iterable[Any]] = None,
        tags: Optional[Iterable[Any]] = None,
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> SearchPage[Fic]:
        """
        Search all fics, newest first.

        Args:
            title: Case-insensitive title fragment
            authors: Author names, any of which may match (any casing)
            fandoms: Fandom names or ids, any of which may match
            relationships: Relationship names or ids, any of which may match
            tags: Tag names or ids, any of which may match
            page: 1-based page number
            page_size: Results per page

        Returns:
            The requested page of fics

        Raises:
            ValidationError: If page or page_size is below 1
        """
        stmt = select(Fic)

        fragment = DataValidator.normalize_string(title)
        if fragment:
            stmt = stmt.where(self._contains(func.lower(Fic.title), fragment.lower()))

        names = {name.lower() for name in DataValidator.split_labels(authors)}
        if names:
            stmt = stmt.where(func.lower(Fic.author).in_(sorted(names)))

        for category, table, labels in (
            ("fandom", fic_fandoms, fandoms),
            ("relationship", fic_relationships, relationships),
            ("tag", fic_tags, tags),
        ):
            ids = self._label_ids(category, labels)
            if ids is not None:
                stmt = stmt.where(Fic.id.in_(self._owners_linked_to(table, ids)))

        stmt = stmt.order_by(Fic.created_at.desc(), Fic.id.desc())
        return self._paginate(stmt, page, page_size)

    # -------------------------------------------------------------------------
    # Shelves
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("discover_shelves")
    def search_shelves(
        self,
        title: Optional[str] = None,
        fandoms: Optional[Iterable[Any]] = None,
        relationships: Optional[Iterable[Any]] = None,
        tags: Optional[Iterable[Any]] = None,
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> SearchPage[Shelf]:
        """
        Search public shelves, alphabetically by title.

        Private shelves never appear, whatever the filters.

        Raises:
            ValidationError: If page or page_size is below 1
        """
        stmt = select(Shelf).where(Shelf.is_private.is_(False))

        fragment = DataValidator.normalize_string(title)
        if fragment:
            stmt = stmt.where(self._contains(func.lower(Shelf.title), fragment.lower()))

        for category, table, labels in (
            ("fandom", shelf_fandoms, fandoms),
            ("relationship", shelf_relationships, relationships),
            ("tag", shelf_tags, tags),
        ):
            ids = self._label_ids(category, labels)
            if ids is not None:
                stmt = stmt.where(Shelf.id.in_(self._owners_linked_to(table, ids)))

        stmt = stmt.order_by(func.lower(Shelf.title), Shelf.id)
        return self._paginate(stmt, page, page_size)

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @handle_db_errors
    def search_users(self, fragment: str, limit: int = USER_SEARCH_LIMIT) -> List[Profile]:
        """Profiles whose username contains ``fragment``, any casing."""
        key = DataValidator.normalize_key(fragment)
        if key is None:
            return []
        stmt = (
            select(Profile)
            .where(self._contains(Profile.username_key, key))
            .order_by(Profile.username_key)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))
