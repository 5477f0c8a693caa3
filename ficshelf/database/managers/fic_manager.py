#!/usr/bin/env python3
"""
fic_manager.py
--------------------
Manages Fic entities and their links to fandoms, relationships,
characters and tags.

Fics are shared records identified by their normalized link. Creating a
fic whose link is already known returns the existing fic untouched.

Key Features:
    - Create fics with label resolution (get-or-create) and linking
    - Update fics with set-difference link reconciliation
    - Lookup by id or link
    - Autocomplete search over taggable names
    - Distinct reader counts

Usage:
    fic_mgr = FicManager(session, logger)

    fic = fic_mgr.create({
        "link": "https://archiveofourown.org/works/1",
        "title": "A Study",
        "fandoms": ["Sherlock (TV)"],
        "tags": "Fluff, Angst",
    })

    fic_mgr.update(fic, {"fandoms": ["Sherlock Holmes - Arthur Conan Doyle"]})
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from ficshelf.database.models import Fic, ReadingLog
from .base_manager import BaseManager
from .link_manager import LinkDiff, LinkManager
from .taggable_manager import CATEGORY_CONFIGS, TaggableManager


# Resolution order for new fics
FIC_CATEGORIES = ("fandom", "relationship", "character", "tag")


def _normalize_labels(value: Any) -> List[Any]:
    """Comma-separated string or list of labels to a list."""
    if isinstance(value, str):
        return DataValidator.split_labels(value)
    return list(value or [])


FIC_FIELDS = [
    ("title", DataValidator.normalize_string, True),
    ("author", DataValidator.normalize_string, True),
    ("summary", DataValidator.normalize_string, True),
    ("rating", DataValidator.normalize_string, True),
    ("archive_warning", DataValidator.split_labels, True),
    ("category", DataValidator.normalize_string, True),
    ("words", DataValidator.normalize_int, True),
    ("chapters", DataValidator.normalize_string, True),
    ("hits", DataValidator.normalize_int, True),
    ("kudos", DataValidator.normalize_int, True),
]


class FicManager(BaseManager):
    """
    Manages Fic table operations and taggable links.

    Each fic links to any number of fandoms, relationships, characters and
    tags. Labels are resolved through TaggableManager and linked through
    LinkManager.
    """

    @property
    def links(self) -> LinkManager:
        return LinkManager(self.session, self.logger)

    def taggables(self, category: str) -> TaggableManager:
        return TaggableManager.for_category(self.session, category, self.logger)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @handle_db_errors
    def get_by_link(self, link: str) -> Optional[Fic]:
        """
        Retrieve a fic by link, normalizing it first.

        Examples:
            >>> fic_mgr.get_by_link("https://www.archiveofourown.org/works/1")
            <Fic(id=1, link='archiveofourown.org/works/1')>
        """
        normalized = DataValidator.normalize_link(link)
        if not normalized:
            return None
        return self.session.scalars(select(Fic).where(Fic.link == normalized)).first()

    @handle_db_errors
    def get(self, fic_id: Optional[int] = None, link: Optional[str] = None) -> Optional[Fic]:
        """Retrieve a fic by id or by link."""
        if fic_id is not None:
            return self.session.get(Fic, fic_id)
        if link is not None:
            return self.get_by_link(link)
        return None

    def exists(self, link: str) -> bool:
        return self.get_by_link(link) is not None

    @handle_db_errors
    def get_all(self) -> List[Fic]:
        return list(self.session.scalars(select(Fic).order_by(Fic.id)))

    # -------------------------------------------------------------------------
    # Create / update
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_fic")
    @validate_metadata(["link"])
    def create(self, metadata: Dict[str, Any]) -> Fic:
        """
        Create a fic, or return the existing one with the same link.

        Args:
            metadata: Dictionary with required key:
                - link: Work URL (normalized before use)
                Optional keys:
                - title, author, summary, rating, category, chapters
                - archive_warning: List or comma-separated string
                - words, hits, kudos: Counts (commas allowed)
                - fandoms, relationships, characters, tags: Labels, as a
                  list of strings/{id, label} pairs or a comma-separated
                  string

        Returns:
            The new fic, or the existing fic when the link is known (its
            metadata and links are not changed)
        """
        link = DataValidator.normalize_link(metadata["link"])
        if not link:
            raise ValidationError(f"Invalid fic link: {metadata.get('link')}")

        existing = self.get_by_link(link)
        if existing is not None:
            if self.logger:
                self.logger.log_debug(
                    "Fic already exists, reusing it", {"fic_id": existing.id, "link": link}
                )
            return existing

        fic = Fic(link=link)
        self._update_scalar_fields(fic, metadata, FIC_FIELDS)
        self.session.add(fic)
        self.session.flush()

        for category in FIC_CATEGORIES:
            plural = CATEGORY_CONFIGS[category].plural
            ids = self.taggables(category).resolve(_normalize_labels(metadata.get(plural)))
            self.links.link(fic, category, ids)

        if self.logger:
            self.logger.log_debug(f"Created fic: {fic.title or link}", {"fic_id": fic.id})
        return fic

    @handle_db_errors
    @log_database_operation("update_fic")
    def update(self, fic: Fic, metadata: Dict[str, Any]) -> Fic:
        """
        Update a fic's fields and links.

        Only keys present in ``metadata`` are changed. For each label
        category present, the fic's links are reconciled to exactly the
        resolved labels; unchanged links are left in place.

        Args:
            fic: Fic to update
            metadata: Same keys as ``create``

        Returns:
            The updated fic

        Raises:
            ValidationError: If the fic is missing or the new link belongs
                to another fic
        """
        fic = self._resolve_object(fic, Fic)

        if "link" in metadata:
            link = DataValidator.normalize_link(metadata["link"])
            if not link:
                raise ValidationError(f"Invalid fic link: {metadata['link']}")
            other = self.get_by_link(link)
            if other is not None and other.id != fic.id:
                raise ValidationError(f"Link already used by fic {other.id}: {link}")
            fic.link = link

        self._update_scalar_fields(fic, metadata, FIC_FIELDS)
        self.session.flush()
        self.reconcile_links(fic, metadata)
        return fic

    def reconcile_links(self, fic: Fic, metadata: Dict[str, Any]) -> Dict[str, LinkDiff]:
        """
        Reconcile each label category present in ``metadata``.

        Returns:
            The LinkDiff of every reconciled category, keyed by category
        """
        diffs: Dict[str, LinkDiff] = {}
        for category in FIC_CATEGORIES:
            plural = CATEGORY_CONFIGS[category].plural
            if plural not in metadata:
                continue
            ids = self.taggables(category).resolve(_normalize_labels(metadata[plural]))
            diffs[category] = self.links.reconcile(fic, category, ids)
        return diffs

    @handle_db_errors
    @log_database_operation("delete_fic")
    def delete(self, fic: Fic) -> None:
        """Delete a fic with its links, placements and reading logs."""
        fic = self._resolve_object(fic, Fic)
        self.session.delete(fic)
        self.session.flush()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def search_names(self, category: str, fragment: str, limit: int = 20) -> List[str]:
        """
        Names in ``category`` containing ``fragment`` (case-insensitive).

        Used for label autocomplete.
        """
        return [entity.name for entity in self.taggables(category).search(fragment, limit)]

    @handle_db_errors
    def reader_count(self, fic: Fic) -> int:
        """Number of distinct users with a reading log for ``fic``."""
        fic = self._resolve_object(fic, Fic)
        stmt = select(func.count(func.distinct(ReadingLog.user_id))).where(
            ReadingLog.fic_id == fic.id
        )
        return self.session.scalar(stmt) or 0

    def linked_names(self, fic: Fic) -> Dict[str, List[str]]:
        """Display names linked to ``fic``, keyed by category plural."""
        return {
            CATEGORY_CONFIGS[category].plural: [
                entity.name
                for entity in getattr(fic, CATEGORY_CONFIGS[category].plural)
            ]
            for category in FIC_CATEGORIES
        }
