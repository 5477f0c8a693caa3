"""initial schema

Revision ID: 3f1c2a9d8e01
Revises:
Create Date: 2025-06-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d8e01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAGGABLE_TABLES = ("fandoms", "relationships", "characters", "tags")

LINK_TABLES = (
    ("fic_fandoms", "fic_id", "fics", "fandom_id", "fandoms"),
    ("fic_relationships", "fic_id", "fics", "relationship_id", "relationships"),
    ("fic_characters", "fic_id", "fics", "character_id", "characters"),
    ("fic_tags", "fic_id", "fics", "tag_id", "tags"),
    ("shelf_fandoms", "shelf_id", "shelves", "fandom_id", "fandoms"),
    ("shelf_relationships", "shelf_id", "shelves", "relationship_id", "relationships"),
    ("shelf_tags", "shelf_id", "shelves", "tag_id", "tags"),
)


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("username_key", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("username != ''", name="ck_profile_non_empty_username"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_username_key", "profiles", ["username_key"], unique=True)

    op.create_table(
        "fics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("link", sa.String(length=500), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("author", sa.String(length=255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("rating", sa.String(length=100), nullable=True),
        sa.Column("archive_warning", sa.JSON(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("words", sa.Integer(), nullable=True),
        sa.Column("chapters", sa.String(length=50), nullable=True),
        sa.Column("hits", sa.Integer(), nullable=True),
        sa.Column("kudos", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("link != ''", name="ck_fic_non_empty_link"),
        sa.CheckConstraint("words IS NULL OR words >= 0", name="ck_fic_positive_words"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fics_link", "fics", ["link"], unique=True)

    for table in TAGGABLE_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("name_key", sa.String(length=255), nullable=False),
            sa.CheckConstraint("name != ''", name=f"ck_{table}_non_empty_name"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_name_key", table, ["name_key"], unique=True)

    op.create_table(
        "shelves",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("title != ''", name="ck_shelf_non_empty_title"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_shelves_user_id", "shelves", ["user_id"])

    op.create_table(
        "shelf_fic",
        sa.Column("shelf_id", sa.Integer(), nullable=False),
        sa.Column("fic_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["fic_id"], ["fics.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shelf_id"], ["shelves.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("shelf_id", "fic_id"),
    )

    op.create_table(
        "reading_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("fic_id", sa.Integer(), nullable=False),
        sa.Column("read_ranges", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["fic_id"], ["fics.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reading_logs_user_id", "reading_logs", ["user_id"])
    op.create_index("ix_reading_logs_fic_id", "reading_logs", ["fic_id"])

    for name, owner_column, owner_table, entity_column, entity_table in LINK_TABLES:
        op.create_table(
            name,
            sa.Column(owner_column, sa.Integer(), nullable=False),
            sa.Column(entity_column, sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(
                [owner_column], [f"{owner_table}.id"], ondelete="CASCADE"
            ),
            sa.ForeignKeyConstraint(
                [entity_column], [f"{entity_table}.id"], ondelete="CASCADE"
            ),
            sa.PrimaryKeyConstraint(owner_column, entity_column),
        )

    op.create_table(
        "follows",
        sa.Column("follower_id", sa.Integer(), nullable=False),
        sa.Column("following_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("follower_id != following_id", name="ck_follow_not_self"),
        sa.ForeignKeyConstraint(["follower_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["following_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("follower_id", "following_id"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("fic_id", sa.Integer(), nullable=True),
        sa.Column("shelf_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["fic_id"], ["fics.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["shelf_id"], ["shelves.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("text != ''", name="ck_comment_non_empty_text"),
        sa.ForeignKeyConstraint(["parent_id"], ["comments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "likes",
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "user_id"),
    )

    op.create_table(
        "bookmarked_shelves",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("shelf_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["shelf_id"], ["shelves.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "shelf_id"),
    )


def downgrade() -> None:
    op.drop_table("bookmarked_shelves")
    op.drop_table("likes")
    op.drop_index("ix_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("follows")

    for name, *_ in reversed(LINK_TABLES):
        op.drop_table(name)

    op.drop_index("ix_reading_logs_fic_id", table_name="reading_logs")
    op.drop_index("ix_reading_logs_user_id", table_name="reading_logs")
    op.drop_table("reading_logs")
    op.drop_table("shelf_fic")
    op.drop_index("ix_shelves_user_id", table_name="shelves")
    op.drop_table("shelves")

    for table in reversed(TAGGABLE_TABLES):
        op.drop_index(f"ix_{table}_name_key", table_name=table)
        op.drop_table(table)

    op.drop_index("ix_fics_link", table_name="fics")
    op.drop_table("fics")
    op.drop_index("ix_profiles_username_key", table_name="profiles")
    op.drop_table("profiles")
