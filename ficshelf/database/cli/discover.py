"""
Discover Commands
-----------------

Search everyone's fics, public shelves and users.

Filters combine: a result must match every option given. Within one
comma-separated option, any listed label matches.

Commands:
    - fics: Fics by title, author, fandom, relationship and tag
    - shelves: Public shelves by title, fandom, relationship and tag
    - users: Usernames containing a fragment
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from ficshelf.database.managers import PAGE_SIZE
from . import get_db


def _echo_more(page):
    if page.has_more:
        click.echo(f"More results: --page {page.page + 1}")


@click.group()
@click.pass_context
def discover(ctx: click.Context) -> None:
    """Search fics, public shelves and users."""
    pass


@discover.command("fics")
@click.option("--title", help="Title fragment")
@click.option("--authors", help="Comma-separated authors")
@click.option("--fandoms", help="Comma-separated fandoms")
@click.option("--relationships", help="Comma-separated relationships")
@click.option("--tags", help="Comma-separated tags")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--page-size", type=click.IntRange(min=1), default=PAGE_SIZE, show_default=True)
@click.pass_context
def discover_fics(ctx, title, authors, fandoms, relationships, tags, page, page_size):
    """Find fics, newest first."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            found = db.discover.search_fics(
                title=title,
                authors=authors,
                fandoms=fandoms,
                relationships=relationships,
                tags=tags,
                page=page,
                page_size=page_size,
            )
            if not found.items:
                click.echo("No fics found")
                return
            for item in found.items:
                by = f" by {item.author}" if item.author else ""
                click.echo(f"📖 [{item.id}] {item.title or item.link}{by}")
            _echo_more(found)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "discover_fics", additional_context={"page": page})


@discover.command("shelves")
@click.option("--title", help="Title fragment")
@click.option("--fandoms", help="Comma-separated fandoms")
@click.option("--relationships", help="Comma-separated relationships")
@click.option("--tags", help="Comma-separated tags")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--page-size", type=click.IntRange(min=1), default=PAGE_SIZE, show_default=True)
@click.pass_context
def discover_shelves(ctx, title, fandoms, relationships, tags, page, page_size):
    """Find public shelves, alphabetically."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            found = db.discover.search_shelves(
                title=title,
                fandoms=fandoms,
                relationships=relationships,
                tags=tags,
                page=page,
                page_size=page_size,
            )
            if not found.items:
                click.echo("No shelves found")
                return
            for item in found.items:
                click.echo(f"📚 [{item.id}] {item.title} by @{item.owner.username}")
            _echo_more(found)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "discover_shelves", additional_context={"page": page})


@discover.command("users")
@click.argument("fragment")
@click.pass_context
def discover_users(ctx, fragment):
    """Find users whose username contains FRAGMENT."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            profiles = db.discover.search_users(fragment)
            if not profiles:
                click.echo("No users found")
                return
            for profile in profiles:
                name = f" ({profile.display_name})" if profile.display_name else ""
                click.echo(f"  • {profile.username}{name}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "discover_users", additional_context={"fragment": fragment})
