"""
Association Tables
-------------------

Link tables connecting fics and shelves to the shared taggable entities.

Each link is a pure ``(owner_id, entity_id)`` pair (the composite primary
key forbids duplicate links) plus the time the link was created. Link
reconciliation deletes and inserts individual pairs, so links that survive
an edit keep their original ``created_at``.

Fic links:
    fic_fandoms, fic_relationships, fic_characters, fic_tags

Shelf links:
    shelf_fandoms, shelf_relationships, shelf_tags
"""
# --- Third party imports ---
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table

# --- Local imports ---
from .base import Base, utcnow


def _link_table(
    name: str,
    owner_column: str,
    owner_table: str,
    entity_column: str,
    entity_table: str,
) -> Table:
    """Build an owner/entity link table with cascading foreign keys."""
    return Table(
        name,
        Base.metadata,
        Column(
            owner_column,
            Integer,
            ForeignKey(f"{owner_table}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column(
            entity_column,
            Integer,
            ForeignKey(f"{entity_table}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column("created_at", DateTime(timezone=True), default=utcnow),
    )


# Fic associations
fic_fandoms = _link_table("fic_fandoms", "fic_id", "fics", "fandom_id", "fandoms")
fic_relationships = _link_table(
    "fic_relationships", "fic_id", "fics", "relationship_id", "relationships"
)
fic_characters = _link_table(
    "fic_characters", "fic_id", "fics", "character_id", "characters"
)
fic_tags = _link_table("fic_tags", "fic_id", "fics", "tag_id", "tags")

# Shelf associations
shelf_fandoms = _link_table(
    "shelf_fandoms", "shelf_id", "shelves", "fandom_id", "fandoms"
)
shelf_relationships = _link_table(
    "shelf_relationships", "shelf_id", "shelves", "relationship_id", "relationships"
)
shelf_tags = _link_table("shelf_tags", "shelf_id", "shelves", "tag_id", "tags")
