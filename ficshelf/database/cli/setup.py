"""
Setup & Initialization Commands
--------------------------------

Database initialization commands.

Commands:
    - init: Create the schema (fresh database) or migrate it to head
    - reset: Delete and recreate the database (dangerous!)
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema, or upgrade an existing one."""
    try:
        db = get_db(ctx)
        click.echo("🚀 Initializing Fic Shelf database...")
        db.initialize_schema()

        status = db.get_migration_status()
        click.echo(f"✅ Database ready at revision {status['current_revision']}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.confirmation_option(prompt="⚠️  This will DELETE the database! Are you sure?")
@click.pass_context
def reset(ctx):
    """Reset database (DANGEROUS - deletes all data!)."""
    try:
        db_path = ctx.obj["db_path"]

        click.echo("🗑️  Resetting database...")
        if db_path.exists():
            db_path.unlink()
            click.echo(f"  Deleted: {db_path}")

        click.echo("🔄 Reinitializing...")
        get_db(ctx).initialize_schema()
        click.echo("✅ Database reset complete!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "reset")
