"""
Export Commands
---------------

"Export my data": a user's shelves and reading logs.

Commands:
    - xlsx: One workbook, one sheet per shelf
    - csv: One CSV file per shelf
    - json: One JSON document
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db


@click.group()
@click.pass_context
def export(ctx: click.Context) -> None:
    """Export a user's data to various formats."""
    pass


@export.command("xlsx")
@click.argument("username")
@click.argument("output_file", type=click.Path())
@click.pass_context
def export_xlsx(ctx, username, output_file):
    """Export USERNAME's shelves to an Excel workbook."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting to XLSX: {output_file}")

        with db.session_scope() as session:
            owner = db.profiles.require(username)
            exported = db.export_manager.export_to_xlsx(session, owner, output_file)

        click.echo(f"✅ Export complete: {exported}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "export_xlsx", additional_context={"output_file": output_file}
        )


@export.command("csv")
@click.argument("username")
@click.argument("output_dir", type=click.Path())
@click.pass_context
def export_csv(ctx, username, output_dir):
    """Export USERNAME's shelves to CSV files."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting to CSV: {output_dir}")

        with db.session_scope() as session:
            owner = db.profiles.require(username)
            exported = db.export_manager.export_to_csv(session, owner, output_dir)

        click.echo(f"\n✅ Export Complete ({len(exported)} shelves):")
        for title, path in exported.items():
            click.echo(f"  • {title}: {path}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "export_csv", additional_context={"output_dir": output_dir}
        )


@export.command("json")
@click.argument("username")
@click.argument("output_file", type=click.Path())
@click.pass_context
def export_json(ctx, username, output_file):
    """Export USERNAME's shelves to JSON."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting to JSON: {output_file}")

        with db.session_scope() as session:
            owner = db.profiles.require(username)
            exported = db.export_manager.export_to_json(session, owner, output_file)

        click.echo(f"✅ Export complete: {exported}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "export_json", additional_context={"output_file": output_file}
        )
