"""
test_social_manager.py
----------------------
Unit tests for SocialManager: follows, posts, feed, likes, comments,
shelf bookmarks and notifications.
"""
from datetime import datetime, timezone

import pytest

from ficshelf.core.exceptions import ValidationError
from ficshelf.database.models import Like


@pytest.fixture
def third_reader(profile_manager):
    return profile_manager.create({"username": "lurker"})


class TestFollows:
    """Test follow(), unfollow() and counts."""

    def test_follow_is_idempotent(self, social_manager, reader, other_reader):
        social_manager.follow(reader, other_reader)
        social_manager.follow(reader, other_reader)
        assert social_manager.is_following(reader, other_reader) is True
        assert social_manager.follower_count(other_reader) == 1
        assert social_manager.following_count(reader) == 1
        assert social_manager.follower_count(reader) == 0

    def test_self_follow_rejected(self, social_manager, reader):
        with pytest.raises(ValidationError, match="themselves"):
            social_manager.follow(reader, reader)

    def test_unfollow(self, social_manager, reader, other_reader):
        social_manager.follow(reader, other_reader)
        assert social_manager.unfollow(reader, other_reader) is True
        assert social_manager.unfollow(reader, other_reader) is False
        assert social_manager.is_following(reader, other_reader) is False


class TestPosts:
    """Test create_post(), delete_post() and feed()."""

    def test_post_sharing_fic(self, social_manager, reader, sample_fic):
        post = social_manager.create_post(reader, "  Finished this!  ", fic=sample_fic)
        assert post.text == "Finished this!"
        assert post.fic is sample_fic

    def test_empty_post_rejected(self, social_manager, reader):
        with pytest.raises(ValidationError, match="empty"):
            social_manager.create_post(reader, "   ")

    def test_share_only_post_allowed(self, social_manager, reader, sample_fic):
        assert social_manager.create_post(reader, "", fic=sample_fic).text == ""

    def test_private_shelf_of_other_rejected(
        self, social_manager, shelf_manager, reader, other_reader
    ):
        secret = shelf_manager.create(other_reader, {"title": "Secret", "is_private": True})
        with pytest.raises(ValidationError, match="private"):
            social_manager.create_post(reader, "look", shelf=secret)

    def test_own_private_shelf_allowed(self, social_manager, shelf_manager, reader):
        secret = shelf_manager.create(reader, {"title": "Secret", "is_private": True})
        assert social_manager.create_post(reader, "mine", shelf=secret).shelf is secret

    def test_feed_includes_followed_only(
        self, social_manager, reader, other_reader, third_reader
    ):
        social_manager.follow(reader, other_reader)
        own = social_manager.create_post(reader, "mine")
        followed = social_manager.create_post(other_reader, "theirs")
        social_manager.create_post(third_reader, "stranger")

        feed = social_manager.feed(reader)

        assert {post.id for post in feed} == {own.id, followed.id}
        assert feed[0].id == followed.id

    def test_delete_post_author_only(self, social_manager, reader, other_reader):
        post = social_manager.create_post(reader, "oops")
        with pytest.raises(ValidationError, match="author"):
            social_manager.delete_post(post, other_reader)
        social_manager.delete_post(post, reader)
        assert social_manager.posts_by(reader) == []


class TestLikesAndComments:
    """Test toggle_like(), add_comment() and comments_for()."""

    def test_toggle_like(self, social_manager, reader, other_reader):
        post = social_manager.create_post(reader, "hello")
        assert social_manager.toggle_like(post, other_reader) is True
        assert social_manager.like_count(post) == 1
        assert social_manager.toggle_like(post, other_reader) is False
        assert social_manager.like_count(post) == 0

    def test_comments_oldest_first(self, social_manager, reader, other_reader):
        post = social_manager.create_post(reader, "thoughts?")
        first = social_manager.add_comment(post, other_reader, " great fic ")
        reply = social_manager.add_comment(post, reader, "thanks", parent=first)

        comments = social_manager.comments_for(post)

        assert [c.id for c in comments] == [first.id, reply.id]
        assert first.text == "great fic"
        assert reply.parent_id == first.id

    def test_empty_comment_rejected(self, social_manager, reader):
        post = social_manager.create_post(reader, "hello")
        with pytest.raises(ValidationError):
            social_manager.add_comment(post, reader, "  ")

    def test_reply_must_share_post(self, social_manager, reader):
        post_a = social_manager.create_post(reader, "a")
        post_b = social_manager.create_post(reader, "b")
        comment = social_manager.add_comment(post_a, reader, "on a")
        with pytest.raises(ValidationError, match="same post"):
            social_manager.add_comment(post_b, reader, "reply", parent=comment)


class TestBookmarks:
    """Test shelf bookmarks."""

    def test_bookmark_public_shelf(self, social_manager, shelf_manager, reader, other_reader):
        shelf = shelf_manager.create(other_reader, {"title": "Recs"})
        social_manager.bookmark_shelf(reader, shelf)
        social_manager.bookmark_shelf(reader, shelf)
        assert social_manager.bookmarked_shelves(reader) == [shelf]
        assert social_manager.unbookmark_shelf(reader, shelf) is True
        assert social_manager.bookmarked_shelves(reader) == []

    def test_private_shelf_rejected(self, social_manager, shelf_manager, reader, other_reader):
        shelf = shelf_manager.create(other_reader, {"title": "Mine", "is_private": True})
        with pytest.raises(ValidationError, match="private"):
            social_manager.bookmark_shelf(reader, shelf)

    def test_own_shelf_rejected(self, social_manager, shelf_manager, reader):
        shelf = shelf_manager.create(reader, {"title": "Mine"})
        with pytest.raises(ValidationError, match="own"):
            social_manager.bookmark_shelf(reader, shelf)


def at(day):
    return datetime(2025, 3, day, tzinfo=timezone.utc)


class TestNotifications:
    """Test notifications() and render_post_text()."""

    @pytest.fixture
    def activity(
        self, social_manager, shelf_manager, db_session, reader, other_reader, third_reader
    ):
        """Activity aimed at reader on days 1-4, plus noise that must not show."""
        post = social_manager.create_post(reader, "Just finished it")
        shelf = shelf_manager.create(reader, {"title": "Recs"})

        edge = social_manager.follow(other_reader, reader)
        edge.created_at = at(1)

        social_manager.toggle_like(post, other_reader)
        db_session.get(Like, (post.id, other_reader.id)).created_at = at(2)

        comment = social_manager.add_comment(post, third_reader, "so good")
        comment.created_at = at(3)

        bookmark = social_manager.bookmark_shelf(third_reader, shelf)
        bookmark.created_at = at(4)

        # Own reactions and activity on other users' posts
        social_manager.toggle_like(post, reader)
        social_manager.add_comment(post, reader, "thanks all")
        theirs = social_manager.create_post(other_reader, "not yours")
        social_manager.toggle_like(theirs, third_reader)
        social_manager.follow(reader, third_reader)

        db_session.flush()
        return post, shelf

    def test_newest_first(self, social_manager, reader, activity):
        found = social_manager.notifications(reader)
        assert [item.kind for item in found] == ["bookmark", "comment", "like", "follow"]
        assert [item.actor.username for item in found] == [
            "lurker",
            "lurker",
            "bookworm",
            "bookworm",
        ]

    def test_messages(self, social_manager, reader, activity):
        post, shelf = activity
        messages = [item.message for item in social_manager.notifications(reader)]
        assert messages == [
            '@lurker bookmarked "Recs".',
            '@lurker commented: "so good"',
            "@bookworm liked your post.",
            "@bookworm followed you.",
        ]

    def test_references(self, social_manager, reader, activity):
        post, shelf = activity
        bookmark, comment, like, follow = social_manager.notifications(reader)
        assert bookmark.shelf.id == shelf.id
        assert comment.post.id == post.id
        assert like.post.id == post.id
        assert follow.post is None and follow.shelf is None

    def test_since_and_limit(self, social_manager, reader, activity):
        found = social_manager.notifications(reader, since=at(2))
        assert [item.kind for item in found] == ["bookmark", "comment"]

        found = social_manager.notifications(reader, limit=1)
        assert [item.kind for item in found] == ["bookmark"]

    def test_nothing_for_quiet_user(self, social_manager, third_reader):
        assert social_manager.notifications(third_reader) == []

    def test_render_post_text(self, social_manager, reader, sample_fic):
        post = social_manager.create_post(reader, "Loved [fic]! Read [FIC] now", fic=sample_fic)
        assert social_manager.render_post_text(post) == (
            "Loved The Long Way Home by quillfeather! "
            "Read The Long Way Home by quillfeather now"
        )

    def test_render_post_text_without_fic(self, social_manager, reader):
        post = social_manager.create_post(reader, "No [fic] here")
        assert social_manager.render_post_text(post) == "No [fic] here"
