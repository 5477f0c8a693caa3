"""
User Commands
-------------

Profiles and follows.

Commands:
    - add: Create a profile
    - list: List all profiles
    - show: Profile details with follower counts
    - follow: Follow another user
    - unfollow: Stop following a user
    - notifications: Recent activity aimed at a user
"""
from datetime import datetime, time, timezone

import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from ficshelf.core.validators import DataValidator
from . import get_db


@click.group()
@click.pass_context
def user(ctx: click.Context) -> None:
    """Manage users and follows."""
    pass


@user.command("add")
@click.argument("username")
@click.option("--display-name", help="Name shown instead of the username")
@click.option("--bio", help="Short profile text")
@click.pass_context
def user_add(ctx, username, display_name, bio):
    """Create a user profile."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            profile = db.profiles.create(
                {"username": username, "display_name": display_name, "bio": bio}
            )
            click.echo(f"✅ Created user {profile.username} (id {profile.id})")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "user_add", additional_context={"username": username})


@user.command("list")
@click.pass_context
def user_list(ctx):
    """List all users."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            profiles = db.profiles.get_all()
            if not profiles:
                click.echo("No users yet")
                return
            for profile in profiles:
                name = f" ({profile.display_name})" if profile.display_name else ""
                click.echo(f"  • {profile.username}{name}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "user_list")


@user.command("show")
@click.argument("username")
@click.pass_context
def user_show(ctx, username):
    """Show a user's profile, follow counts and shelves."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            profile = db.profiles.require(username)
            click.echo(f"👤 {profile.display_name or profile.username} (@{profile.username})")
            if profile.bio:
                click.echo(f"  {profile.bio}")
            click.echo(
                f"  Followers: {db.social.follower_count(profile)}"
                f" | Following: {db.social.following_count(profile)}"
            )
            for shelf in db.shelves.get_for_user(profile):
                lock = " 🔒" if shelf.is_private else ""
                click.echo(f"  [{shelf.id}] {shelf.title}{lock}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "user_show", additional_context={"username": username})


@user.command("follow")
@click.argument("follower")
@click.argument("followee")
@click.pass_context
def user_follow(ctx, follower, followee):
    """Make FOLLOWER follow FOLLOWEE."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.social.follow(db.profiles.require(follower), db.profiles.require(followee))
        click.echo(f"✅ {follower} now follows {followee}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "user_follow", additional_context={"follower": follower, "followee": followee}
        )


@user.command("unfollow")
@click.argument("follower")
@click.argument("followee")
@click.pass_context
def user_unfollow(ctx, follower, followee):
    """Make FOLLOWER stop following FOLLOWEE."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            removed = db.social.unfollow(
                db.profiles.require(follower), db.profiles.require(followee)
            )
        if removed:
            click.echo(f"✅ {follower} no longer follows {followee}")
        else:
            click.echo(f"{follower} was not following {followee}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "user_unfollow", additional_context={"follower": follower, "followee": followee}
        )


@user.command("notifications")
@click.argument("username")
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True)
@click.option("--since", help="Only activity after this date (YYYY-MM-DD)")
@click.pass_context
def user_notifications(ctx, username, limit, since):
    """Likes, comments, follows and bookmarks aimed at USERNAME."""
    try:
        since_time = None
        if since is not None:
            since_date = DataValidator.normalize_date(since)
            if since_date is None:
                raise ValidationError(f"Invalid date: {since}")
            since_time = datetime.combine(since_date, time.min, tzinfo=timezone.utc)

        db = get_db(ctx)
        with db.session_scope():
            found = db.social.notifications(
                db.profiles.require(username), since=since_time, limit=limit
            )
            if not found:
                click.echo("No notifications")
                return
            for item in found:
                stamp = item.created_at.strftime("%Y-%m-%d %H:%M")
                click.echo(f"🔔 {stamp} {item.message}")
                if item.post is not None:
                    click.echo(f"  {db.social.render_post_text(item.post)}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx, e, "user_notifications", additional_context={"username": username}
        )
