"""
Post Commands
-------------

Posts, likes and comments.

Commands:
    - add: Publish a post, optionally sharing a fic or shelf
    - delete: Delete one of your posts
    - feed: Posts by a user and everyone they follow
    - show: A post with its comments
    - like: Like a post, or unlike it
    - comment: Comment on a post or reply to a comment
"""
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db
from .shelves import _require_fic, _require_shelf


def _require_post(db, post_id):
    post = db.social.get_post(post_id)
    if post is None:
        raise ValidationError(f"No post with id {post_id}")
    return post


def _echo_post(db, post):
    stamp = post.created_at.strftime("%Y-%m-%d %H:%M")
    click.echo(f"💬 [{post.id}] @{post.author.username} · {stamp}")
    text = db.social.render_post_text(post)
    if text:
        click.echo(f"  {text}")
    if post.fic is not None:
        click.echo(f"  📖 [{post.fic.id}] {post.fic.title or post.fic.link}")
    if post.shelf is not None:
        click.echo(f"  📚 [{post.shelf.id}] {post.shelf.title}")
    click.echo(f"  ♥ {db.social.like_count(post)} | Comments: {len(post.comments)}")


@click.group()
@click.pass_context
def post(ctx: click.Context) -> None:
    """Publish and react to posts."""
    pass


@post.command("add")
@click.argument("username")
@click.argument("text", default="")
@click.option("--fic", "fic_id", type=int, help="Share fic with this id")
@click.option("--shelf", "shelf_id", type=int, help="Share shelf with this id")
@click.pass_context
def post_add(ctx, username, text, fic_id, shelf_id):
    """Publish TEXT as USERNAME. Use [fic] in TEXT to name the shared fic."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            created = db.social.create_post(
                db.profiles.require(username),
                text,
                fic=_require_fic(db, fic_id) if fic_id is not None else None,
                shelf=_require_shelf(db, shelf_id) if shelf_id is not None else None,
            )
            click.echo(f"✅ Posted {created.id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_add", additional_context={"username": username})


@post.command("delete")
@click.argument("post_id", type=int)
@click.argument("username")
@click.pass_context
def post_delete(ctx, post_id, username):
    """Delete post POST_ID written by USERNAME."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.social.delete_post(_require_post(db, post_id), db.profiles.require(username))
        click.echo(f"✅ Deleted post {post_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_delete", additional_context={"post_id": post_id})


@post.command("feed")
@click.argument("username")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.pass_context
def post_feed(ctx, username, limit):
    """Posts by USERNAME and the users they follow, newest first."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            posts = db.social.feed(db.profiles.require(username), limit=limit)
            if not posts:
                click.echo("No posts yet")
                return
            for item in posts:
                _echo_post(db, item)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_feed", additional_context={"username": username})


@post.command("show")
@click.argument("post_id", type=int)
@click.pass_context
def post_show(ctx, post_id):
    """Show post POST_ID and its comment threads."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = _require_post(db, post_id)
            _echo_post(db, target)

            replies = {}
            for comment in db.social.comments_for(target):
                replies.setdefault(comment.parent_id, []).append(comment)

            def echo_thread(parent_id, depth):
                for comment in replies.get(parent_id, []):
                    indent = "  " * (depth + 1)
                    click.echo(
                        f"{indent}↳ [{comment.id}] @{comment.author.username}: {comment.text}"
                    )
                    echo_thread(comment.id, depth + 1)

            echo_thread(None, 0)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_show", additional_context={"post_id": post_id})


@post.command("like")
@click.argument("post_id", type=int)
@click.argument("username")
@click.pass_context
def post_like(ctx, post_id, username):
    """Like post POST_ID as USERNAME, or unlike it if already liked."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            target = _require_post(db, post_id)
            liked = db.social.toggle_like(target, db.profiles.require(username))
            count = db.social.like_count(target)
        verb = "liked" if liked else "unliked"
        click.echo(f"✅ {username} {verb} post {post_id} (♥ {count})")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_like", additional_context={"post_id": post_id})


@post.command("comment")
@click.argument("post_id", type=int)
@click.argument("username")
@click.argument("text")
@click.option("--reply-to", type=int, help="Id of the comment being answered")
@click.pass_context
def post_comment(ctx, post_id, username, text, reply_to):
    """Comment TEXT on post POST_ID as USERNAME."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            parent = None
            if reply_to is not None:
                parent = db.social.get_comment(reply_to)
                if parent is None:
                    raise ValidationError(f"No comment with id {reply_to}")
            comment = db.social.add_comment(
                _require_post(db, post_id), db.profiles.require(username), text, parent=parent
            )
            click.echo(f"✅ Comment {comment.id} added to post {post_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "post_comment", additional_context={"post_id": post_id})
