"""
Shelf Commands
--------------

Shelves, fic placement and sorting.

Commands:
    - create: Create a shelf for a user
    - list: A user's shelves in display order
    - show: Fics on a shelf
    - add: Place a fic on a shelf
    - remove: Take a fic off a shelf
    - sort: Put a fic on exactly the given shelves
    - reorder: Change the display order of a user's shelves
    - delete: Delete a shelf
    - bookmark: Save another user's public shelf
    - unbookmark: Drop a saved shelf
    - bookmarks: A user's saved shelves
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db


def _require_shelf(db, shelf_id):
    shelf = db.shelves.get(shelf_id)
    if shelf is None:
        raise ValidationError(f"No shelf with id {shelf_id}")
    return shelf


def _require_fic(db, fic_id):
    fic = db.fics.get(fic_id=fic_id)
    if fic is None:
        raise ValidationError(f"No fic with id {fic_id}")
    return fic


@click.group()
@click.pass_context
def shelf(ctx: click.Context) -> None:
    """Manage shelves."""
    pass


@shelf.command("create")
@click.argument("username")
@click.argument("title")
@click.option("--color", help="Hex color, e.g. #a7b89e")
@click.option("--private", "is_private", is_flag=True, help="Hide from other users")
@click.option("--fandoms", help="Comma-separated fandoms")
@click.option("--relationships", help="Comma-separated relationships")
@click.option("--tags", help="Comma-separated tags")
@click.pass_context
def shelf_create(ctx, username, title, color, is_private, fandoms, relationships, tags):
    """Create shelf TITLE for USERNAME."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            owner = db.profiles.require(username)
            created = db.shelves.create(
                owner,
                {
                    "title": title,
                    "color": color,
                    "is_private": is_private,
                    "fandoms": fandoms,
                    "relationships": relationships,
                    "tags": tags,
                },
            )
            click.echo(f"✅ Created shelf {created.id}: {created.title}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_create", additional_context={"title": title})


@shelf.command("list")
@click.argument("username")
@click.pass_context
def shelf_list(ctx, username):
    """List USERNAME's shelves in display order."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            owner = db.profiles.require(username)
            shelves = db.shelves.get_for_user(owner)
            if not shelves:
                click.echo(f"{owner.username} has no shelves")
                return
            for item in shelves:
                lock = " 🔒" if item.is_private else ""
                click.echo(f"  [{item.id}] {item.title} ({len(item.fic_links)} fics){lock}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_list", additional_context={"username": username})


@shelf.command("show")
@click.argument("shelf_id", type=int)
@click.pass_context
def shelf_show(ctx, shelf_id):
    """List the fics on shelf SHELF_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = _require_shelf(db, shelf_id)
            click.echo(f"📚 {target.title}")
            for item in target.fics:
                click.echo(f"  [{item.id}] {item.title or item.link}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_show", additional_context={"shelf_id": shelf_id})


@shelf.command("add")
@click.argument("shelf_id", type=int)
@click.argument("fic_id", type=int)
@click.pass_context
def shelf_add(ctx, shelf_id, fic_id):
    """Place fic FIC_ID on shelf SHELF_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.shelves.add_fic(_require_shelf(db, shelf_id), _require_fic(db, fic_id))
        click.echo(f"✅ Fic {fic_id} is on shelf {shelf_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "shelf_add", additional_context={"shelf_id": shelf_id, "fic_id": fic_id}
        )


@shelf.command("remove")
@click.argument("shelf_id", type=int)
@click.argument("fic_id", type=int)
@click.pass_context
def shelf_remove(ctx, shelf_id, fic_id):
    """Take fic FIC_ID off shelf SHELF_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            removed = db.shelves.remove_fic(
                _require_shelf(db, shelf_id), _require_fic(db, fic_id)
            )
        if removed:
            click.echo(f"✅ Removed fic {fic_id} from shelf {shelf_id}")
        else:
            click.echo(f"Fic {fic_id} was not on shelf {shelf_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "shelf_remove", additional_context={"shelf_id": shelf_id, "fic_id": fic_id}
        )


@shelf.command("sort")
@click.argument("username")
@click.argument("fic_id", type=int)
@click.argument("shelf_ids", type=int, nargs=-1)
@click.pass_context
def shelf_sort(ctx, username, fic_id, shelf_ids):
    """Put fic FIC_ID on exactly SHELF_IDS among USERNAME's shelves."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            owner = db.profiles.require(username)
            diff = db.shelves.set_fic_shelves(owner, _require_fic(db, fic_id), shelf_ids)
        if diff.unchanged:
            click.echo("No changes")
        else:
            click.echo(
                f"✅ Sorted fic {fic_id}: "
                f"+{len(diff.to_insert)} shelves, -{len(diff.to_delete)} shelves"
            )

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_sort", additional_context={"fic_id": fic_id})


@shelf.command("reorder")
@click.argument("username")
@click.argument("shelf_ids", type=int, nargs=-1, required=True)
@click.pass_context
def shelf_reorder(ctx, username, shelf_ids):
    """Show SHELF_IDS first, in the given order."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            shelves = db.shelves.reorder(db.profiles.require(username), shelf_ids)
            click.echo("✅ New order: " + ", ".join(item.title for item in shelves))

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_reorder", additional_context={"username": username})


@shelf.command("delete")
@click.argument("shelf_id", type=int)
@click.confirmation_option(prompt="Delete this shelf and its placements?")
@click.pass_context
def shelf_delete(ctx, shelf_id):
    """Delete shelf SHELF_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.shelves.delete(_require_shelf(db, shelf_id))
        click.echo(f"✅ Deleted shelf {shelf_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_delete", additional_context={"shelf_id": shelf_id})


@shelf.command("bookmark")
@click.argument("username")
@click.argument("shelf_id", type=int)
@click.pass_context
def shelf_bookmark(ctx, username, shelf_id):
    """Save another user's public shelf SHELF_ID for USERNAME."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = _require_shelf(db, shelf_id)
            db.social.bookmark_shelf(db.profiles.require(username), target)
            click.echo(f"✅ {username} bookmarked {target.title}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_bookmark", additional_context={"shelf_id": shelf_id})


@shelf.command("unbookmark")
@click.argument("username")
@click.argument("shelf_id", type=int)
@click.pass_context
def shelf_unbookmark(ctx, username, shelf_id):
    """Remove shelf SHELF_ID from USERNAME's bookmarks."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            removed = db.social.unbookmark_shelf(
                db.profiles.require(username), _require_shelf(db, shelf_id)
            )
        if removed:
            click.echo(f"✅ Removed bookmark of shelf {shelf_id}")
        else:
            click.echo(f"Shelf {shelf_id} was not bookmarked")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_unbookmark", additional_context={"shelf_id": shelf_id})


@shelf.command("bookmarks")
@click.argument("username")
@click.pass_context
def shelf_bookmarks(ctx, username):
    """List the shelves USERNAME has bookmarked."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            owner = db.profiles.require(username)
            saved = db.social.bookmarked_shelves(owner)
            if not saved:
                click.echo(f"{owner.username} has no bookmarked shelves")
                return
            for item in saved:
                click.echo(f"  [{item.id}] {item.title} by @{item.owner.username}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "shelf_bookmarks", additional_context={"username": username})
