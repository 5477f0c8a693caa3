#!/usr/bin/env python3
"""
The Fic Shelf CLI
-----------------

Command-line interface over the Fic Shelf store.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup & Initialization (init, reset)
    - Users & follows (user)
    - Fics (fic)
    - Shelves & sorting (shelf)
    - Reading logs (log)
    - Monthly analytics (stats)
    - Data export (export)
    - Posts, likes & comments (post)
    - Search (discover)

Usage:
    # Get general help
    ficshelf --help

    # Get help for a specific command group
    ficshelf shelf --help

    # Get help for a specific command
    ficshelf log add --help
"""
import click
import logging
from pathlib import Path

from ficshelf.core.logging_manager import FicShelfLogger
from ficshelf.core.paths import DB_PATH, LOG_DIR, MIGRATIONS_DIR
from ficshelf.database import FicShelfDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(MIGRATIONS_DIR),
    help="Path to Alembic migrations directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, log_dir):
    """The Fic Shelf: shelves, reading logs and monthly stats for fanfic readers."""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["logger"] = FicShelfLogger(Path(log_dir) / "cli", component_name="cli")
    ctx.call_on_close(ctx.obj["logger"].close)


def get_db(ctx) -> FicShelfDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        db = FicShelfDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            log_dir=ctx.obj["log_dir"],
        )
        ctx.find_root().call_on_close(db.close)
        ctx.obj["db"] = db
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, reset  # noqa: E402
from .users import user  # noqa: E402
from .fics import fic  # noqa: E402
from .shelves import shelf  # noqa: E402
from .logs import log  # noqa: E402
from .stats import stats  # noqa: E402
from .export import export  # noqa: E402
from .posts import post  # noqa: E402
from .discover import discover  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(reset)

# Register command groups
cli.add_command(user)
cli.add_command(fic)
cli.add_command(shelf)
cli.add_command(log)
cli.add_command(stats)
cli.add_command(export)
cli.add_command(post)
cli.add_command(discover)


if __name__ == "__main__":
    cli(obj={})
