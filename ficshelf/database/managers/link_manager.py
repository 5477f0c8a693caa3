#!/usr/bin/env python3
"""
link_manager.py
-------------------
Link maintenance between owners (fics, shelves) and taggable entities.

Links live in plain association tables, so this manager works with Core
``insert``/``delete`` statements on exact ``(owner_id, entity_id)`` pairs
rather than through the ORM collections. That keeps reconciliation minimal:
links that survive an edit are never touched and keep their ``created_at``.

Usage:
    links = LinkManager(session, logger)
    links.link(fic, "fandom", [1, 2, 2])          # inserts 1 and 2
    diff = links.reconcile(fic, "fandom", [2, 3])  # deletes 1, inserts 3
    diff.write_count                               # 2
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import Table, delete, insert, select

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.logging_manager import safe_logger
from ficshelf.database.decorators import handle_db_errors, log_database_operation
from ficshelf.database.models import (
    Fic,
    Shelf,
    fic_characters,
    fic_fandoms,
    fic_relationships,
    fic_tags,
    shelf_fandoms,
    shelf_relationships,
    shelf_tags,
)
from ficshelf.database.models.base import utcnow
from .base_manager import BaseManager


@dataclass(frozen=True)
class LinkConfig:
    """
    One association table.

    Attributes:
        table: The association Table
        owner_column: Owner foreign key column name
        entity_column: Entity foreign key column name
        attr_name: Relationship attribute on the owner model
    """

    table: Table
    owner_column: str
    entity_column: str
    attr_name: str


LINK_CONFIGS: Dict[Tuple[type, str], LinkConfig] = {
    (Fic, "fandom"): LinkConfig(fic_fandoms, "fic_id", "fandom_id", "fandoms"),
    (Fic, "relationship"): LinkConfig(
        fic_relationships, "fic_id", "relationship_id", "relationships"
    ),
    (Fic, "character"): LinkConfig(
        fic_characters, "fic_id", "character_id", "characters"
    ),
    (Fic, "tag"): LinkConfig(fic_tags, "fic_id", "tag_id", "tags"),
    (Shelf, "fandom"): LinkConfig(shelf_fandoms, "shelf_id", "fandom_id", "fandoms"),
    (Shelf, "relationship"): LinkConfig(
        shelf_relationships, "shelf_id", "relationship_id", "relationships"
    ),
    (Shelf, "tag"): LinkConfig(shelf_tags, "shelf_id", "tag_id", "tags"),
}


@dataclass
class LinkDiff:
    """
    Result of a reconciliation.

    Attributes:
        to_delete: Entity ids whose links were removed
        to_insert: Entity ids whose links were added
    """

    to_delete: Set[int] = field(default_factory=set)
    to_insert: Set[int] = field(default_factory=set)

    @property
    def write_count(self) -> int:
        return len(self.to_delete) + len(self.to_insert)

    @property
    def unchanged(self) -> bool:
        return self.write_count == 0


class LinkManager(BaseManager):
    """Insert, read and reconcile owner-to-entity links."""

    def _config(self, owner: Any, category: str) -> LinkConfig:
        config = LINK_CONFIGS.get((type(owner), category))
        if config is None:
            raise ValidationError(
                f"{type(owner).__name__} has no '{category}' links"
            )
        if owner.id is None:
            raise ValidationError(f"{type(owner).__name__} instance must be persisted")
        return config

    @handle_db_errors
    def current_ids(self, owner: Any, category: str) -> Set[int]:
        """Entity ids currently linked to ``owner`` in ``category``."""
        config = self._config(owner, category)
        table = config.table
        stmt = select(table.c[config.entity_column]).where(
            table.c[config.owner_column] == owner.id
        )
        return set(self.session.scalars(stmt))

    @handle_db_errors
    @log_database_operation("link_entities")
    def link(self, owner: Any, category: str, entity_ids: Iterable[int]) -> List[int]:
        """
        Link ``owner`` to each entity id not already linked.

        Repeated ids in the input produce a single link.

        Returns:
            The ids actually inserted, in input order
        """
        config = self._config(owner, category)
        existing = self.current_ids(owner, category)
        new_ids: List[int] = []
        for entity_id in entity_ids:
            if entity_id not in existing and entity_id not in new_ids:
                new_ids.append(entity_id)

        self._insert(owner, config, new_ids)
        return new_ids

    @handle_db_errors
    @log_database_operation("reconcile_links")
    def reconcile(
        self, owner: Any, category: str, target_ids: Iterable[int]
    ) -> LinkDiff:
        """
        Make ``owner``'s links in ``category`` exactly ``target_ids``.

        Computes ``current - target`` and ``target - current`` and applies
        only those. Reconciling to the current set performs no writes.

        Args:
            owner: Persisted Fic or Shelf
            category: Taggable category key
            target_ids: Desired entity ids (duplicates ignored)

        Returns:
            LinkDiff with the deleted and inserted entity ids
        """
        config = self._config(owner, category)
        current = self.current_ids(owner, category)
        target = set(target_ids)
        diff = LinkDiff(to_delete=current - target, to_insert=target - current)

        if diff.to_delete:
            table = config.table
            stmt = delete(table).where(
                table.c[config.owner_column] == owner.id,
                table.c[config.entity_column].in_(sorted(diff.to_delete)),
            )
            self._execute_with_retry(lambda: self.session.execute(stmt))
        self._insert(owner, config, sorted(diff.to_insert))

        safe_logger(self.logger).log_debug(
            f"Reconciled {config.attr_name}",
            {
                "owner": repr(owner),
                "deleted": sorted(diff.to_delete),
                "inserted": sorted(diff.to_insert),
            },
        )
        return diff

    def _insert(self, owner: Any, config: LinkConfig, entity_ids: List[int]) -> None:
        if entity_ids:
            now = utcnow()
            rows = [
                {
                    config.owner_column: owner.id,
                    config.entity_column: entity_id,
                    "created_at": now,
                }
                for entity_id in entity_ids
            ]
            self._execute_with_retry(
                lambda: self.session.execute(insert(config.table), rows)
            )
        # Core statements bypass the ORM collection; reload it on next access
        if owner in self.session:
            self.session.expire(owner, [config.attr_name])

    def link_created_at(self, owner: Any, category: str) -> Dict[int, Optional[Any]]:
        """Creation time of each of ``owner``'s links, keyed by entity id."""
        config = self._config(owner, category)
        table = config.table
        rows = self.session.execute(
            select(table.c[config.entity_column], table.c.created_at).where(
                table.c[config.owner_column] == owner.id
            )
        )
        return {entity_id: created_at for entity_id, created_at in rows}
