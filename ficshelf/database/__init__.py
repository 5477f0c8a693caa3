"""
Fic Shelf Database Package
---------------------------

Persistence layer for The Fic Shelf: ORM models, entity managers, the
``FicShelfDB`` facade, data export and the command-line interface.

Usage:
    from ficshelf.database import FicShelfDB

    db = FicShelfDB(db_path, alembic_dir)
    with db.session_scope():
        fic = db.fics.create({"link": "archive.org/works/1", "title": "..."})
"""
from .manager import FicShelfDB

__all__ = ["FicShelfDB"]
