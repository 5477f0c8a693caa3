"""
Social Models
--------------

Users and the social layer around reading activity.

Models:
    - Profile: A user (authentication is handled elsewhere)
    - Follow: Directed follower -> following edge
    - Post: A status update, optionally sharing a fic or shelf
    - Comment: Threaded comment on a post
    - Like: One user's like of one post
    - BookmarkedShelf: Another user's shelf saved for later
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import Base, utcnow

if TYPE_CHECKING:
    from .library import Fic, ReadingLog, Shelf


class Profile(Base):
    """
    A user of The Fic Shelf.

    Attributes:
        id: Primary key
        username: Display handle as chosen
        username_key: Case-folded handle, unique
        display_name: Optional full display name
        bio: Optional biography
        created_at: Sign-up time
    """

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("username != ''", name="ck_profile_non_empty_username"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    username_key: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    shelves: Mapped[List["Shelf"]] = relationship(
        "Shelf",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="Shelf.sort_order",
    )
    reading_logs: Mapped[List["ReadingLog"]] = relationship(
        "ReadingLog", back_populates="user", cascade="all, delete-orphan"
    )
    posts: Mapped[List["Post"]] = relationship(
        "Post", back_populates="author", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, username='{self.username}')>"

    def __str__(self) -> str:
        return self.username


class Follow(Base):
    """Directed follow edge; a user cannot follow themselves."""

    __tablename__ = "follows"
    __table_args__ = (
        CheckConstraint("follower_id != following_id", name="ck_follow_not_self"),
    )

    follower_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Post(Base):
    """
    A user's status update.

    Attributes:
        id: Primary key
        user_id: Author
        text: Post body
        fic_id: Optional shared fic
        shelf_id: Optional shared shelf
        created_at: Publication time
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    fic_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("fics.id", ondelete="SET NULL")
    )
    shelf_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("shelves.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    author: Mapped["Profile"] = relationship("Profile", back_populates="posts")
    fic: Mapped[Optional["Fic"]] = relationship("Fic")
    shelf: Mapped[Optional["Shelf"]] = relationship("Shelf")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
    likes: Mapped[List["Like"]] = relationship(
        "Like", back_populates="post", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id})>"


class Comment(Base):
    """A comment on a post; ``parent_id`` makes it a reply."""

    __tablename__ = "comments"
    __table_args__ = (CheckConstraint("text != ''", name="ck_comment_non_empty_text"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE")
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    post: Mapped["Post"] = relationship("Post", back_populates="comments")
    author: Mapped["Profile"] = relationship("Profile")


class Like(Base):
    """One user's like of one post."""

    __tablename__ = "likes"

    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    post: Mapped["Post"] = relationship("Post", back_populates="likes")


class BookmarkedShelf(Base):
    """A shelf saved by a user other than its owner."""

    __tablename__ = "bookmarked_shelves"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    shelf_id: Mapped[int] = mapped_column(
        ForeignKey("shelves.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    shelf: Mapped["Shelf"] = relationship("Shelf")
