"""
conftest.py
-----------
Shared pytest fixtures for Fic Shelf tests.

Provides fixtures for:
- Temporary directories
- Database setup and teardown
- Entity managers bound to a test session
- Sample users and fics
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from ficshelf.core.paths import MIGRATIONS_DIR


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Sample Data Factory Functions -----

def create_sample_fic(**overrides):
    """Factory for fic metadata with every field populated."""
    metadata = {
        "link": "https://archiveofourown.org/works/1001",
        "title": "The Long Way Home",
        "author": "quillfeather",
        "summary": "A road trip, eventually.",
        "rating": "Teen And Up Audiences",
        "archive_warning": "No Archive Warnings Apply",
        "category": "M/M",
        "words": "12,500",
        "chapters": "5/5",
        "hits": "3400",
        "kudos": "210",
        "fandoms": ["Harry Potter - J. K. Rowling"],
        "relationships": ["Harry Potter/Draco Malfoy"],
        "characters": ["Harry Potter", "Draco Malfoy"],
        "tags": "Road Trip, Slow Burn",
    }
    metadata.update(overrides)
    return metadata


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_db(test_db_path):
    """
    Create test database instance with schema.

    Returns a FicShelfDB with the schema created and stamped at the
    Alembic head. Closed after the test.
    """
    from ficshelf.database.manager import FicShelfDB

    db = FicShelfDB(db_path=test_db_path, alembic_dir=MIGRATIONS_DIR)
    db.initialize_schema()

    yield db

    db.close()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def profile_manager(db_session):
    """Create ProfileManager instance for testing."""
    from ficshelf.database.managers.profile_manager import ProfileManager
    return ProfileManager(db_session)


@pytest.fixture
def fic_manager(db_session):
    """Create FicManager instance for testing."""
    from ficshelf.database.managers.fic_manager import FicManager
    return FicManager(db_session)


@pytest.fixture
def shelf_manager(db_session):
    """Create ShelfManager instance for testing."""
    from ficshelf.database.managers.shelf_manager import ShelfManager
    return ShelfManager(db_session)


@pytest.fixture
def log_manager(db_session):
    """Create ReadingLogManager instance for testing."""
    from ficshelf.database.managers.reading_log_manager import ReadingLogManager
    return ReadingLogManager(db_session)


@pytest.fixture
def social_manager(db_session):
    """Create SocialManager instance for testing."""
    from ficshelf.database.managers.social_manager import SocialManager
    return SocialManager(db_session)


@pytest.fixture
def link_manager(db_session):
    """Create LinkManager instance for testing."""
    from ficshelf.database.managers.link_manager import LinkManager
    return LinkManager(db_session)


@pytest.fixture
def discover_manager(db_session):
    """Create DiscoverManager instance for testing."""
    from ficshelf.database.managers.discover_manager import DiscoverManager
    return DiscoverManager(db_session)


@pytest.fixture
def fandom_manager(db_session):
    """Create a fandom TaggableManager for testing."""
    from ficshelf.database.managers.taggable_manager import TaggableManager
    return TaggableManager.for_fandoms(db_session)


# ----- Sample Entity Fixtures -----

@pytest.fixture
def reader(profile_manager):
    """A persisted reader profile."""
    return profile_manager.create({"username": "reader", "display_name": "A Reader"})


@pytest.fixture
def other_reader(profile_manager):
    """A second persisted profile."""
    return profile_manager.create({"username": "bookworm"})


@pytest.fixture
def sample_fic(fic_manager):
    """A persisted fic with labels in every category."""
    return fic_manager.create(create_sample_fic())
