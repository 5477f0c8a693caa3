"""
Reading Log Commands
--------------------

Recording reads.

Commands:
    - add: Log a read of a fic between two dates (inclusive)
    - show: A user's reading logs
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db


@click.group()
@click.pass_context
def log(ctx: click.Context) -> None:
    """Record and list reads."""
    pass


@log.command("add")
@click.argument("username")
@click.argument("fic_id", type=int)
@click.argument("start")
@click.argument("end")
@click.option("--notes", help="Replace the log's notes")
@click.pass_context
def log_add(ctx, username, fic_id, start, end, notes):
    """Log that USERNAME read FIC_ID from START through END (YYYY-MM-DD)."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            reader = db.profiles.require(username)
            target = db.fics.get(fic_id=fic_id)
            if target is None:
                raise ValidationError(f"No fic with id {fic_id}")
            entry = db.logs.log_read(reader, target, start, end, notes)
            click.echo(f"✅ Logged {entry.read_ranges[-1]} for fic {fic_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx,
            e,
            "log_add",
            additional_context={"fic_id": fic_id, "start": start, "end": end},
        )


@log.command("show")
@click.argument("username")
@click.pass_context
def log_show(ctx, username):
    """List USERNAME's reading logs."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            entries = db.logs.get_for_user(db.profiles.require(username))
            if not entries:
                click.echo("No reads logged")
                return
            for entry in entries:
                click.echo(f"📖 [{entry.fic_id}] {entry.fic.title or entry.fic.link}")
                for range_str in entry.read_ranges or []:
                    click.echo(f"    {range_str}")
                if entry.notes:
                    click.echo(f"    Notes: {entry.notes}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "log_show", additional_context={"username": username})
