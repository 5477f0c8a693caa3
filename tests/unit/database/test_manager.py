"""
test_manager.py
---------------
Unit tests for the FicShelfDB facade: schema setup, session scopes and
manager access.
"""
import pytest
from sqlalchemy import inspect

from ficshelf.core.exceptions import DatabaseError, ValidationError
from ficshelf.core.paths import MIGRATIONS_DIR
from ficshelf.database.managers import TaggableManager


class TestSchema:
    """Test initialize_schema() and migration status."""

    def test_fresh_database_stamped_at_head(self, test_db):
        status = test_db.get_migration_status()
        assert status["current_revision"] == "3f1c2a9d8e01"
        assert status["status"] == "up_to_date"

    def test_tables_created(self, test_db):
        tables = set(inspect(test_db.engine).get_table_names())
        assert {"profiles", "fics", "shelves", "shelf_fic", "reading_logs"} <= tables
        assert {"fandoms", "fic_fandoms", "shelf_tags", "likes"} <= tables

    def test_initialize_twice(self, test_db):
        test_db.initialize_schema()
        assert test_db.get_migration_status()["current_revision"] == "3f1c2a9d8e01"

    def test_migrations_build_same_schema(self, tmp_dir):
        """Upgrading an empty file from scratch yields every model table."""
        from ficshelf.database.manager import FicShelfDB
        from ficshelf.database.models import Base

        with FicShelfDB(tmp_dir / "migrated.db", MIGRATIONS_DIR) as db:
            db.upgrade_database()
            tables = set(inspect(db.engine).get_table_names())
        assert set(Base.metadata.tables) <= tables

    def test_logging_to_directory(self, tmp_dir):
        from ficshelf.database.manager import FicShelfDB

        with FicShelfDB(tmp_dir / "logged.db", MIGRATIONS_DIR, log_dir=tmp_dir / "logs") as db:
            db.initialize_schema()
        assert (tmp_dir / "logs" / "system" / "database.log").exists()


class TestSessionScope:
    """Test session_scope() transactions and manager access."""

    def test_managers_require_session(self, test_db):
        with pytest.raises(DatabaseError, match="session_scope"):
            test_db.fics
        with pytest.raises(DatabaseError):
            test_db.taggables("fandom")

    def test_commit(self, test_db):
        with test_db.session_scope():
            test_db.profiles.create({"username": "reader"})
        with test_db.session_scope():
            assert test_db.profiles.exists("reader")

    def test_rollback_on_error(self, test_db):
        """A failure inside the scope discards the fic and its new labels."""
        with pytest.raises(ValidationError):
            with test_db.session_scope():
                test_db.fics.create({"link": "ao3.org/works/1", "fandoms": "Naruto"})
                test_db.profiles.create({"username": "has space"})

        with test_db.session_scope():
            assert test_db.fics.get_all() == []
            assert test_db.taggables("fandom").get_all() == []

    def test_managers_released_after_scope(self, test_db):
        with test_db.session_scope():
            assert test_db.logs is not None
        with pytest.raises(DatabaseError):
            test_db.logs

    def test_taggables_category(self, test_db):
        with test_db.session_scope():
            manager = test_db.taggables("character")
            assert isinstance(manager, TaggableManager)
            assert manager.get_or_create("Iruka").name == "Iruka"
