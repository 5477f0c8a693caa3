#!/usr/bin/env python3
"""
shelf_manager.py
--------------------
Manages Shelf entities: user-curated, optionally private collections of
fics, tagged with fandoms, relationships and tags.

Key Features:
    - Create shelves with comma-separated label input
    - Rename, recolor, change privacy and relabel
    - Reorder a user's shelves
    - Place fics on shelves (new placements go last)
    - "Sort" a fic: set exactly which of the user's shelves hold it

Usage:
    shelf_mgr = ShelfManager(session, logger)
    shelf = shelf_mgr.create(user, {"title": "Favourites", "tags": "fluff, au"})
    shelf_mgr.set_fic_shelves(user, fic, [shelf.id])
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from ficshelf.database.models import Fic, Profile, Shelf, ShelfFic
from ficshelf.database.models.library import DEFAULT_SHELF_COLOR, DEFAULT_SORT_ORDER
from .base_manager import BaseManager
from .link_manager import LinkDiff, LinkManager
from .taggable_manager import CATEGORY_CONFIGS, TaggableManager

# Label categories a shelf can carry (no characters)
SHELF_CATEGORIES = ("fandom", "relationship", "tag")

# Shelf excluded from fic sorting, matched case-insensitively
ARCHIVE_SHELF = "archive"


def _normalize_labels(value: Any) -> List[Any]:
    if isinstance(value, str):
        return DataValidator.split_labels(value)
    return list(value or [])


class ShelfManager(BaseManager):
    """Manages Shelf and ShelfFic table operations."""

    @property
    def links(self) -> LinkManager:
        return LinkManager(self.session, self.logger)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @handle_db_errors
    def get(self, shelf_id: int) -> Optional[Shelf]:
        return self.session.get(Shelf, shelf_id)

    @handle_db_errors
    def get_for_user(self, user: Profile, include_private: bool = True) -> List[Shelf]:
        """
        A user's shelves in display order.

        Args:
            user: Shelf owner
            include_private: False when showing the shelves to someone else
        """
        user = self._resolve_object(user, Profile)
        stmt = select(Shelf).where(Shelf.user_id == user.id)
        if not include_private:
            stmt = stmt.where(Shelf.is_private.is_(False))
        return list(self.session.scalars(stmt.order_by(Shelf.sort_order, Shelf.id)))

    def sortable_shelves(self, user: Profile) -> List[Shelf]:
        """The user's shelves a fic can be sorted onto (all but the archive)."""
        return [
            shelf
            for shelf in self.get_for_user(user)
            if shelf.title.strip().casefold() != ARCHIVE_SHELF
        ]

    # -------------------------------------------------------------------------
    # Create / update / delete
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_shelf")
    @validate_metadata(["title"])
    def create(self, user: Profile, metadata: Dict[str, Any]) -> Shelf:
        """
        Create a shelf for ``user``.

        Args:
            user: Owner
            metadata: Dictionary with required key:
                - title: Shelf title
                Optional keys:
                - color: Hex color (default ``#a7b89e``)
                - is_private: Hide from other users (default False)
                - sort_order: Position among the user's shelves
                - fandoms, relationships, tags: Comma-separated string or list

        Returns:
            The created shelf
        """
        user = self._resolve_object(user, Profile)
        shelf = Shelf(
            owner=user,
            title=DataValidator.normalize_string(metadata["title"]),
            color=DataValidator.normalize_string(metadata.get("color")) or DEFAULT_SHELF_COLOR,
            is_private=bool(DataValidator.normalize_bool(metadata.get("is_private"))),
            sort_order=DataValidator.normalize_int(metadata.get("sort_order"))
            or DEFAULT_SORT_ORDER,
        )
        self.session.add(shelf)
        self.session.flush()

        for category in SHELF_CATEGORIES:
            plural = CATEGORY_CONFIGS[category].plural
            taggables = TaggableManager.for_category(self.session, category, self.logger)
            ids = taggables.resolve(_normalize_labels(metadata.get(plural)))
            self.links.link(shelf, category, ids)

        if self.logger:
            self.logger.log_debug(
                f"Created shelf: {shelf.title}", {"shelf_id": shelf.id, "user_id": user.id}
            )
        return shelf

    @handle_db_errors
    @log_database_operation("update_shelf")
    def update(self, shelf: Shelf, metadata: Dict[str, Any]) -> Shelf:
        """
        Update a shelf's fields and reconcile its labels.

        Only keys present in ``metadata`` change.
        """
        shelf = self._resolve_object(shelf, Shelf)
        if "title" in metadata:
            title = DataValidator.normalize_string(metadata["title"])
            if not title:
                raise ValidationError("Shelf title cannot be empty")
            shelf.title = title
        if "color" in metadata:
            shelf.color = (
                DataValidator.normalize_string(metadata["color"]) or DEFAULT_SHELF_COLOR
            )
        if "is_private" in metadata:
            shelf.is_private = bool(DataValidator.normalize_bool(metadata["is_private"]))
        self.session.flush()

        for category in SHELF_CATEGORIES:
            plural = CATEGORY_CONFIGS[category].plural
            if plural in metadata:
                taggables = TaggableManager.for_category(self.session, category, self.logger)
                ids = taggables.resolve(_normalize_labels(metadata[plural]))
                self.links.reconcile(shelf, category, ids)
        return shelf

    def rename(self, shelf: Shelf, title: str) -> Shelf:
        return self.update(shelf, {"title": title})

    def recolor(self, shelf: Shelf, color: str) -> Shelf:
        return self.update(shelf, {"color": color})

    @handle_db_errors
    @log_database_operation("reorder_shelves")
    def reorder(self, user: Profile, shelf_ids: Sequence[int]) -> List[Shelf]:
        """
        Put the listed shelves first, in the given order.

        Shelves not listed keep their sort order.

        Raises:
            ValidationError: If a shelf does not belong to ``user``
        """
        user = self._resolve_object(user, Profile)
        owned = {shelf.id: shelf for shelf in self.get_for_user(user)}
        for shelf_id in shelf_ids:
            if shelf_id not in owned:
                raise ValidationError(f"Shelf {shelf_id} does not belong to {user.username}")

        for position, shelf_id in enumerate(shelf_ids, start=1):
            owned[shelf_id].sort_order = position
        self.session.flush()
        return self.get_for_user(user)

    @handle_db_errors
    @log_database_operation("delete_shelf")
    def delete(self, shelf: Shelf) -> None:
        """Delete a shelf with its placements and label links."""
        shelf = self._resolve_object(shelf, Shelf)
        self.session.delete(shelf)
        self.session.flush()

    # -------------------------------------------------------------------------
    # Fic placement
    # -------------------------------------------------------------------------

    def _next_position(self, shelf_id: int) -> int:
        stmt = select(func.max(ShelfFic.position)).where(ShelfFic.shelf_id == shelf_id)
        return (self.session.scalar(stmt) or 0) + 1

    @handle_db_errors
    def add_fic(self, shelf: Shelf, fic: Fic) -> ShelfFic:
        """Place ``fic`` last on ``shelf``; already placed fics stay put."""
        shelf = self._resolve_object(shelf, Shelf)
        fic = self._resolve_object(fic, Fic)
        placement = self.session.get(ShelfFic, (shelf.id, fic.id))
        if placement is None:
            placement = ShelfFic(
                shelf_id=shelf.id, fic_id=fic.id, position=self._next_position(shelf.id)
            )
            self.session.add(placement)
            self.session.flush()
            self.session.expire(shelf, ["fic_links"])
            self.session.expire(fic, ["shelf_links"])
        return placement

    @handle_db_errors
    def remove_fic(self, shelf: Shelf, fic: Fic) -> bool:
        """Take ``fic`` off ``shelf``. Returns False if it was not there."""
        shelf = self._resolve_object(shelf, Shelf)
        fic = self._resolve_object(fic, Fic)
        placement = self.session.get(ShelfFic, (shelf.id, fic.id))
        if placement is None:
            return False
        self.session.delete(placement)
        self.session.flush()
        self.session.expire(shelf, ["fic_links"])
        self.session.expire(fic, ["shelf_links"])
        return True

    @handle_db_errors
    @log_database_operation("sort_fic")
    def set_fic_shelves(
        self, user: Profile, fic: Fic, shelf_ids: Sequence[int]
    ) -> LinkDiff:
        """
        Make ``fic`` sit on exactly ``shelf_ids`` among the user's shelves.

        The archive shelf is not part of sorting: it can't be targeted and
        an existing archive placement is kept.

        Returns:
            LinkDiff of shelf ids removed and added

        Raises:
            ValidationError: If a shelf is not one of the user's sortable
                shelves
        """
        user = self._resolve_object(user, Profile)
        fic = self._resolve_object(fic, Fic)
        sortable = {shelf.id: shelf for shelf in self.sortable_shelves(user)}
        for shelf_id in shelf_ids:
            if shelf_id not in sortable:
                raise ValidationError(
                    f"Shelf {shelf_id} is not a sortable shelf of {user.username}"
                )

        current = set(
            self.session.scalars(
                select(ShelfFic.shelf_id).where(
                    ShelfFic.fic_id == fic.id, ShelfFic.shelf_id.in_(list(sortable))
                )
            )
        )
        target = set(shelf_ids)
        diff = LinkDiff(to_delete=current - target, to_insert=target - current)

        for shelf_id in sorted(diff.to_delete):
            self.remove_fic(sortable[shelf_id], fic)
        for shelf_id in shelf_ids:
            if shelf_id in diff.to_insert:
                self.add_fic(sortable[shelf_id], fic)
        return diff
