#!/usr/bin/env python3
"""
social_manager.py
--------------------
Social layer: follows, posts, likes, comments, shelf bookmarks and the
notifications they produce.

Key Features:
    - Follow/unfollow with follower and following counts
    - Posts that may share a fic or a shelf; a feed of followed users
    - Like toggling and counts
    - Threaded comments
    - Bookmarking other users' public shelves
    - Notifications of likes, comments, follows and bookmarks, newest first

Usage:
    social = SocialManager(session, logger)
    social.follow(alice, bob)
    post = social.create_post(bob, "Finished this today!", fic=fic)
    social.toggle_like(post, alice)     # True: now liked
    social.feed(alice)                  # [post, ...]
    social.notifications(bob)           # [Notification("like", alice.id, ...)]
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, or_, select

from ficshelf.core.exceptions import ValidationError
from ficshelf.database.decorators import handle_db_errors, log_database_operation
from ficshelf.database.models import (
    BookmarkedShelf,
    Comment,
    Fic,
    Follow,
    Like,
    Post,
    Profile,
    Shelf,
)
from .base_manager import BaseManager

_FIC_TOKEN = re.compile(r"\[fic\]", re.IGNORECASE)


@dataclass
class Notification:
    """
    One piece of activity aimed at a user.

    Attributes:
        kind: "like", "comment", "follow" or "bookmark"
        actor_id: Who did it
        created_at: When
        post: The liked or commented post
        shelf: The bookmarked shelf
        text: Comment text
        actor: Profile of ``actor_id``, filled in by the query
    """

    kind: str
    actor_id: int
    created_at: datetime
    post: Optional[Post] = None
    shelf: Optional[Shelf] = None
    text: Optional[str] = None
    actor: Optional[Profile] = None

    @property
    def message(self) -> str:
        who = f"@{self.actor.username}" if self.actor is not None else "Someone"
        if self.kind == "like":
            return f"{who} liked your post."
        if self.kind == "comment":
            return f"{who} commented: \"{self.text}\""
        if self.kind == "follow":
            return f"{who} followed you."
        title = self.shelf.title if self.shelf is not None else "your shelf"
        return f"{who} bookmarked \"{title}\"."


class SocialManager(BaseManager):
    """Manages follows, posts, likes, comments and bookmarks."""

    # -------------------------------------------------------------------------
    # Follows
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("follow")
    def follow(self, follower: Profile, followee: Profile) -> Follow:
        """
        Make ``follower`` follow ``followee``. Following twice is a no-op.

        Raises:
            ValidationError: If a user tries to follow themselves
        """
        follower = self._resolve_object(follower, Profile)
        followee = self._resolve_object(followee, Profile)
        if follower.id == followee.id:
            raise ValidationError("Users cannot follow themselves")

        edge = self.session.get(Follow, (follower.id, followee.id))
        if edge is None:
            edge = Follow(follower_id=follower.id, following_id=followee.id)
            self.session.add(edge)
            self.session.flush()
        return edge

    @handle_db_errors
    @log_database_operation("unfollow")
    def unfollow(self, follower: Profile, followee: Profile) -> bool:
        """Remove the follow edge. Returns False if there was none."""
        follower = self._resolve_object(follower, Profile)
        followee = self._resolve_object(followee, Profile)
        edge = self.session.get(Follow, (follower.id, followee.id))
        if edge is None:
            return False
        self.session.delete(edge)
        self.session.flush()
        return True

    def is_following(self, follower: Profile, followee: Profile) -> bool:
        return self.session.get(Follow, (follower.id, followee.id)) is not None

    def follower_count(self, user: Profile) -> int:
        user = self._resolve_object(user, Profile)
        return self._count(Follow, following_id=user.id)

    def following_count(self, user: Profile) -> int:
        user = self._resolve_object(user, Profile)
        return self._count(Follow, follower_id=user.id)

    # -------------------------------------------------------------------------
    # Posts
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_post")
    def create_post(
        self,
        user: Profile,
        text: str,
        fic: Optional[Fic] = None,
        shelf: Optional[Shelf] = None,
    ) -> Post:
        """
        Publish a post, optionally sharing a fic or a shelf.

        Raises:
            ValidationError: If the post has no text and shares nothing, or
                shares another user's private shelf
        """
        user = self._resolve_object(user, Profile)
        body = (text or "").strip()
        if fic is not None:
            fic = self._resolve_object(fic, Fic)
        if shelf is not None:
            shelf = self._resolve_object(shelf, Shelf)
            if shelf.is_private and shelf.user_id != user.id:
                raise ValidationError("Cannot share another user's private shelf")
        if not body and fic is None and shelf is None:
            raise ValidationError("Post cannot be empty")

        post = Post(
            user_id=user.id,
            text=body,
            fic_id=fic.id if fic is not None else None,
            shelf_id=shelf.id if shelf is not None else None,
        )
        self.session.add(post)
        self.session.flush()
        return post

    @handle_db_errors
    @log_database_operation("delete_post")
    def delete_post(self, post: Post, user: Profile) -> None:
        """
        Delete a post with its comments and likes.

        Raises:
            ValidationError: If ``user`` is not the author
        """
        post = self._resolve_object(post, Post)
        user = self._resolve_object(user, Profile)
        if post.user_id != user.id:
            raise ValidationError("Only the author can delete a post")
        self.session.delete(post)
        self.session.flush()

    def get_post(self, post_id: int) -> Optional[Post]:
        return self.session.get(Post, post_id)

    @handle_db_errors
    def posts_by(self, user: Profile, limit: int = 50) -> List[Post]:
        user = self._resolve_object(user, Profile)
        stmt = (
            select(Post)
            .where(Post.user_id == user.id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    @handle_db_errors
    def feed(self, user: Profile, limit: int = 50) -> List[Post]:
        """Posts by ``user`` and everyone they follow, newest first."""
        user = self._resolve_object(user, Profile)
        followed = select(Follow.following_id).where(Follow.follower_id == user.id)
        stmt = (
            select(Post)
            .where(or_(Post.user_id == user.id, Post.user_id.in_(followed)))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    # -------------------------------------------------------------------------
    # Likes
    # -------------------------------------------------------------------------

    @handle_db_errors
    def toggle_like(self, post: Post, user: Profile) -> bool:
        """
        Like the post, or unlike it if already liked.

        Returns:
            True if the post is liked after the call
        """
        post = self._resolve_object(post, Post)
        user = self._resolve_object(user, Profile)
        like = self.session.get(Like, (post.id, user.id))
        if like is not None:
            self.session.delete(like)
            self.session.flush()
            return False
        self.session.add(Like(post_id=post.id, user_id=user.id))
        self.session.flush()
        return True

    def like_count(self, post: Post) -> int:
        post = self._resolve_object(post, Post)
        return self._count(Like, post_id=post.id)

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("add_comment")
    def add_comment(
        self,
        post: Post,
        user: Profile,
        text: str,
        parent: Optional[Comment] = None,
    ) -> Comment:
        """
        Comment on a post, optionally replying to another comment.

        Raises:
            ValidationError: If the text is empty or the parent comment
                belongs to a different post
        """
        post = self._resolve_object(post, Post)
        user = self._resolve_object(user, Profile)
        body = (text or "").strip()
        if not body:
            raise ValidationError("Comment cannot be empty")
        if parent is not None:
            parent = self._resolve_object(parent, Comment)
            if parent.post_id != post.id:
                raise ValidationError("Reply must be on the same post as its parent")

        comment = Comment(
            post_id=post.id,
            user_id=user.id,
            parent_id=parent.id if parent is not None else None,
            text=body,
        )
        self.session.add(comment)
        self.session.flush()
        return comment

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        return self.session.get(Comment, comment_id)

    @handle_db_errors
    def comments_for(self, post: Post) -> List[Comment]:
        """A post's comments, oldest first."""
        post = self._resolve_object(post, Post)
        return list(
            self.session.scalars(
                select(Comment)
                .where(Comment.post_id == post.id)
                .order_by(Comment.created_at, Comment.id)
            )
        )

    # -------------------------------------------------------------------------
    # Bookmarks
    # -------------------------------------------------------------------------

    @handle_db_errors
    def bookmark_shelf(self, user: Profile, shelf: Shelf) -> BookmarkedShelf:
        """
        Save another user's shelf. Bookmarking twice is a no-op.

        Raises:
            ValidationError: If the shelf is the user's own or another
                user's private shelf
        """
        user = self._resolve_object(user, Profile)
        shelf = self._resolve_object(shelf, Shelf)
        if shelf.user_id == user.id:
            raise ValidationError("Cannot bookmark your own shelf")
        if shelf.is_private:
            raise ValidationError("Cannot bookmark a private shelf")

        bookmark = self.session.get(BookmarkedShelf, (user.id, shelf.id))
        if bookmark is None:
            bookmark = BookmarkedShelf(user_id=user.id, shelf_id=shelf.id)
            self.session.add(bookmark)
            self.session.flush()
        return bookmark

    @handle_db_errors
    def unbookmark_shelf(self, user: Profile, shelf: Shelf) -> bool:
        user = self._resolve_object(user, Profile)
        shelf = self._resolve_object(shelf, Shelf)
        result = self.session.execute(
            delete(BookmarkedShelf).where(
                BookmarkedShelf.user_id == user.id,
                BookmarkedShelf.shelf_id == shelf.id,
            )
        )
        return result.rowcount > 0

    @handle_db_errors
    def bookmarked_shelves(self, user: Profile) -> List[Shelf]:
        user = self._resolve_object(user, Profile)
        stmt = (
            select(Shelf)
            .join(BookmarkedShelf, BookmarkedShelf.shelf_id == Shelf.id)
            .where(BookmarkedShelf.user_id == user.id)
            .order_by(BookmarkedShelf.created_at, Shelf.id)
        )
        return list(self.session.scalars(stmt))


    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def render_post_text(self, post: Post) -> str:
        """Post text with ``[fic]`` (any case) replaced by "Title by Author"."""
        post = self._resolve_object(post, Post)
        if post.fic is None:
            return post.text
        fic = post.fic
        shared = f"{fic.title or fic.link} by {fic.author or 'Anonymous'}"
        return _FIC_TOKEN.sub(lambda _match: shared, post.text)

    @handle_db_errors
    def notifications(
        self,
        user: Profile,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        """
        Activity by other users aimed at ``user``, newest first.

        Collects likes and comments on the user's posts, new followers and
        bookmarks of the user's shelves. The user's own likes and comments
        are left out.

        Args:
            user: Whose notifications to build
            since: Only activity strictly after this time (UTC)
            limit: Maximum number of notifications

        Returns:
            Notifications sorted by time, newest first
        """
        user = self._resolve_object(user, Profile)

        likes = (
            select(Like, Post)
            .join(Post, Post.id == Like.post_id)
            .where(Post.user_id == user.id, Like.user_id != user.id)
        )
        comments = (
            select(Comment)
            .join(Post, Post.id == Comment.post_id)
            .where(Post.user_id == user.id, Comment.user_id != user.id)
        )
        follows = select(Follow).where(Follow.following_id == user.id)
        bookmarks = (
            select(BookmarkedShelf, Shelf)
            .join(Shelf, Shelf.id == BookmarkedShelf.shelf_id)
            .where(Shelf.user_id == user.id)
        )
        if since is not None:
            likes = likes.where(Like.created_at > since)
            comments = comments.where(Comment.created_at > since)
            follows = follows.where(Follow.created_at > since)
            bookmarks = bookmarks.where(BookmarkedShelf.created_at > since)

        found: List[Notification] = []
        for like, post in self.session.execute(likes):
            found.append(Notification("like", like.user_id, like.created_at, post=post))
        for comment in self.session.scalars(comments):
            found.append(
                Notification(
                    "comment",
                    comment.user_id,
                    comment.created_at,
                    post=comment.post,
                    text=comment.text,
                )
            )
        for edge in self.session.scalars(follows):
            found.append(Notification("follow", edge.follower_id, edge.created_at))
        for bookmark, shelf in self.session.execute(bookmarks):
            found.append(
                Notification("bookmark", bookmark.user_id, bookmark.created_at, shelf=shelf)
            )

        actor_ids = sorted({item.actor_id for item in found})
        actors = {
            profile.id: profile
            for profile in self.session.scalars(
                select(Profile).where(Profile.id.in_(actor_ids))
            )
        }
        for item in found:
            item.actor = actors.get(item.actor_id)

        found.sort(key=lambda item: item.created_at, reverse=True)
        return found[:limit] if limit is not None else found
