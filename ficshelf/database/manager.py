#!/usr/bin/env python3
"""
manager.py
-------------------
Main database facade for The Fic Shelf.

Handles:
    - Initialization of the database engine and sessionmaker
    - Transactional session scopes with per-session entity managers
    - Schema creation and Alembic migrations
    - Logging of database operations

Entity managers are available inside ``session_scope()``:
    - db.profiles: ProfileManager
    - db.fics: FicManager
    - db.shelves: ShelfManager
    - db.logs: ReadingLogManager
    - db.social: SocialManager
    - db.links: LinkManager
    - db.discover: DiscoverManager
    - db.taggables(category): TaggableManager

Usage:
    db = FicShelfDB(DB_PATH, MIGRATIONS_DIR, log_dir=LOG_DIR)
    db.initialize_schema()

    with db.session_scope() as session:
        user = db.profiles.create({"username": "reader"})
        fic = db.fics.create({"link": "archiveofourown.org/works/1"})
        db.logs.log_read(user, fic, "2025-06-01", "2025-06-04")
        report = db.monthly_analytics.compute(session, user, today=date(2025, 6, 30))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

# --- Third party ---
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from ficshelf.core.exceptions import DatabaseError
from ficshelf.core.logging_manager import FicShelfLogger
from .decorators import handle_db_errors, log_database_operation
from .export_manager import ExportManager
from .managers import (
    DiscoverManager,
    FicManager,
    LinkManager,
    ProfileManager,
    ReadingLogManager,
    ShelfManager,
    SocialManager,
    TaggableManager,
)
from .models import Base
from .monthly_analytics import MonthlyAnalytics


def _configure_sqlite(engine: Engine) -> None:
    """
    Enable foreign keys and let SQLAlchemy own transaction boundaries.

    pysqlite's implicit BEGIN handling breaks SAVEPOINTs, which the
    get-or-create conflict handling relies on; emitting BEGIN ourselves
    restores them.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ----- Main Database Manager -----
class FicShelfDB:
    """
    Main database manager for The Fic Shelf.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - alembic_dir (Path): Filesystem path to the migrations directory.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - logger (FicShelfLogger | None): Operation logger.
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path (str | Path): Path to the SQLite file.
            alembic_dir (str | Path): Path to the Alembic migrations directory.
            log_dir (str | Path): Directory for log files (optional)
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[FicShelfLogger] = FicShelfLogger(
                self.log_dir,
                component_name="database",
            )
        else:
            self.logger = None

        # Service components
        self.export_manager = ExportManager(self.logger)
        self.monthly_analytics = MonthlyAnalytics(self.logger)

        # Entity managers (bound in session_scope)
        self._session: Optional[Session] = None
        self._profile_manager: Optional[ProfileManager] = None
        self._fic_manager: Optional[FicManager] = None
        self._shelf_manager: Optional[ShelfManager] = None
        self._log_manager: Optional[ReadingLogManager] = None
        self._social_manager: Optional[SocialManager] = None
        self._link_manager: Optional[LinkManager] = None
        self._discover_manager: Optional[DiscoverManager] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            if self.logger:
                self.logger.log_operation(
                    "database_init_start",
                    {
                        "db_path": str(self.db_path),
                        "alembic_dir": str(self.alembic_dir),
                    },
                )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            _configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Everything done in the scope commits together or, on any
        exception, rolls back together: a fic, the labels created for it
        and its links are never left half-written.

        Usage:
            with db.session_scope() as session:
                fic = db.fics.create({"link": "...", "fandoms": ["Naruto"]})
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self._session = session
        self._profile_manager = ProfileManager(session, self.logger)
        self._fic_manager = FicManager(session, self.logger)
        self._shelf_manager = ShelfManager(session, self.logger)
        self._log_manager = ReadingLogManager(session, self.logger)
        self._social_manager = SocialManager(session, self.logger)
        self._link_manager = LinkManager(session, self.logger)
        self._discover_manager = DiscoverManager(session, self.logger)

        if self.logger:
            self.logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
            raise
        finally:
            self._session = None
            self._profile_manager = None
            self._fic_manager = None
            self._shelf_manager = None
            self._log_manager = None
            self._social_manager = None
            self._link_manager = None
            self._discover_manager = None

            session.close()
            if self.logger:
                self.logger.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    @staticmethod
    def _require(manager, name: str):
        if manager is None:
            raise DatabaseError(
                f"{name} requires active session. Use within session_scope."
            )
        return manager

    @property
    def profiles(self) -> ProfileManager:
        """Access ProfileManager for user operations."""
        return self._require(self._profile_manager, "ProfileManager")

    @property
    def fics(self) -> FicManager:
        """
        Access FicManager for fic operations.

        Example:
            with db.session_scope():
                fic = db.fics.create({"link": "archiveofourown.org/works/1"})
        """
        return self._require(self._fic_manager, "FicManager")

    @property
    def shelves(self) -> ShelfManager:
        """Access ShelfManager for shelf operations."""
        return self._require(self._shelf_manager, "ShelfManager")

    @property
    def logs(self) -> ReadingLogManager:
        """Access ReadingLogManager for reading log operations."""
        return self._require(self._log_manager, "ReadingLogManager")

    @property
    def social(self) -> SocialManager:
        """Access SocialManager for follows, posts, likes and comments."""
        return self._require(self._social_manager, "SocialManager")

    @property
    def links(self) -> LinkManager:
        """Access LinkManager for link reconciliation."""
        return self._require(self._link_manager, "LinkManager")

    @property
    def discover(self) -> DiscoverManager:
        """Access DiscoverManager for fic, shelf and user searches."""
        return self._require(self._discover_manager, "DiscoverManager")

    def taggables(self, category: str) -> TaggableManager:
        """TaggableManager for 'fandom', 'relationship', 'character' or 'tag'."""
        session = self._require(self._session, "TaggableManager")
        return TaggableManager.for_category(session, category, self.logger)

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Build the Alembic configuration (no ini file needed)."""
        try:
            alembic_cfg = Config()
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.set_main_option(
                "file_template",
                "%%(year)d%%(month).2d%%(day).2d_%%(hour).2d%%(minute).2d_%%(slug)s",
            )
            return alembic_cfg
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Initialize database - create tables if needed and run migrations.

        Actions:
            Checks if the database is fresh (no tables)
            If fresh,
                creates all tables from the ORM models
                stamps the Alembic revision to head
            If not,
                runs pending migrations to update schema
        """
        table_names = inspect(self.engine).get_table_names()

        if not table_names:
            Base.metadata.create_all(bind=self.engine)
            try:
                command.stamp(self.alembic_cfg, "head")
            except Exception as e:
                raise DatabaseError(f"Could not stamp new database: {e}") from e
            if self.logger:
                self.logger.log_operation(
                    "fresh_database_created",
                    {"tables_created": len(Base.metadata.tables)},
                )
        else:
            self.upgrade_database()
            if self.logger:
                self.logger.log_operation(
                    "existing_database_migrated", {"table_count": len(table_names)}
                )

    @handle_db_errors
    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """
        Upgrade the database schema to the specified Alembic revision.

        Args:
            revision (str, optional): Target revision (default: 'head').
        """
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    def get_migration_status(self) -> Dict[str, Optional[str]]:
        """
        Get the current migration status of the database.

        Returns:
            Dictionary with 'current_revision' and 'status'
            ('up_to_date' or 'needs_migration').
        """
        with self.engine.connect() as conn:
            context = MigrationContext.configure(conn)
            current_rev = context.get_current_revision()

        return {
            "current_revision": current_rev,
            "status": "up_to_date" if current_rev else "needs_migration",
        }

    def close(self) -> None:
        """Dispose of the engine and close log handlers."""
        self.engine.dispose()
        if self.logger:
            self.logger.close()

    # ----- Context Manager Support -----
    def __enter__(self) -> "FicShelfDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        del exc_type, exc_val, exc_tb
        self.close()
