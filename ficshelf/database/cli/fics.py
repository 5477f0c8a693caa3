"""
Fic Commands
------------

Shared fic records and their labels.

Commands:
    - add: Add a fic (returns the existing one for a known link)
    - edit: Change a fic's fields or replace its labels
    - show: Display a fic with its labels and reader count
    - search: Autocomplete over fandom/relationship/character/tag names
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db

LABEL_CATEGORIES = ("fandom", "relationship", "character", "tag")


def fic_options(function):
    """Shared field and label options of ``fic add`` and ``fic edit``."""
    options = [
        click.option("--title"),
        click.option("--author"),
        click.option("--summary"),
        click.option("--rating"),
        click.option("--warnings", "archive_warning", help="Comma-separated archive warnings"),
        click.option("--category"),
        click.option("--words", help="Word count (commas allowed)"),
        click.option("--chapters", help="e.g. 12/12"),
        click.option("--hits"),
        click.option("--kudos"),
        click.option("--fandoms", help="Comma-separated fandoms"),
        click.option("--relationships", help="Comma-separated relationships"),
        click.option("--characters", help="Comma-separated characters"),
        click.option("--tags", help="Comma-separated additional tags"),
    ]
    for option in reversed(options):
        function = option(function)
    return function


def _metadata(fields):
    """Drop options that were not given."""
    return {key: value for key, value in fields.items() if value is not None}


def _echo_fic(db, fic) -> None:
    click.echo(f"📖 [{fic.id}] {fic.title or '(untitled)'}")
    if fic.author:
        click.echo(f"  by {fic.author}")
    click.echo(f"  {fic.link}")
    if fic.words is not None:
        click.echo(f"  Words: {fic.words:,}")
    for plural, names in db.fics.linked_names(fic).items():
        if names:
            click.echo(f"  {plural.capitalize()}: {', '.join(names)}")
    click.echo(f"  Readers: {db.fics.reader_count(fic)}")


@click.group()
@click.pass_context
def fic(ctx: click.Context) -> None:
    """Manage fics."""
    pass


@fic.command("add")
@click.argument("link")
@fic_options
@click.pass_context
def fic_add(ctx, link, **fields):
    """Add the fic at LINK."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            created = db.fics.create({"link": link, **_metadata(fields)})
            click.echo(f"✅ Fic {created.id}: {created.title or created.link}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "fic_add", additional_context={"link": link})


@fic.command("edit")
@click.argument("fic_id", type=int)
@click.option("--link", help="New link")
@fic_options
@click.pass_context
def fic_edit(ctx, fic_id, **fields):
    """Edit fic FIC_ID. Label options replace the fic's labels."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = db.fics.get(fic_id=fic_id)
            if target is None:
                raise ValidationError(f"No fic with id {fic_id}")
            metadata = _metadata(fields)
            if not metadata:
                click.echo("Nothing to change")
                return
            db.fics.update(target, metadata)
            click.echo(f"✅ Updated fic {target.id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "fic_edit", additional_context={"fic_id": fic_id})


@fic.command("show")
@click.argument("fic_id", type=int)
@click.pass_context
def fic_show(ctx, fic_id):
    """Show fic FIC_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = db.fics.get(fic_id=fic_id)
            if target is None:
                raise ValidationError(f"No fic with id {fic_id}")
            _echo_fic(db, target)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "fic_show", additional_context={"fic_id": fic_id})


@fic.command("search")
@click.argument("category", type=click.Choice(LABEL_CATEGORIES))
@click.argument("fragment")
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def fic_search(ctx, category, fragment, limit):
    """Names in CATEGORY containing FRAGMENT."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            names = db.fics.search_names(category, fragment, limit)
        if not names:
            click.echo("No matches")
        for name in names:
            click.echo(f"  • {name}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "fic_search", additional_context={"fragment": fragment})
