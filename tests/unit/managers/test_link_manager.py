"""
test_link_manager.py
--------------------
Unit tests for LinkManager insertion and set-difference reconciliation.
"""
import pytest

from ficshelf.core.exceptions import ValidationError
from ficshelf.database.managers.link_manager import LinkDiff


@pytest.fixture
def bare_fic(fic_manager):
    """A fic with no labels."""
    return fic_manager.create({"link": "archiveofourown.org/works/42"})


@pytest.fixture
def fandom_ids(fandom_manager):
    """Ids of fandoms A, B and C."""
    return dict(zip("ABC", fandom_manager.resolve(["A", "B", "C"])))


class TestLinkDiff:
    """Test LinkDiff helpers."""

    def test_unchanged(self):
        assert LinkDiff(set(), set()).unchanged is True
        assert LinkDiff({1}, set()).unchanged is False

    def test_write_count(self):
        assert LinkDiff({1, 2}, {3}).write_count == 3


class TestLink:
    """Test LinkManager.link()."""

    def test_links_each_id_once(self, link_manager, bare_fic, fandom_ids):
        a, b = fandom_ids["A"], fandom_ids["B"]
        inserted = link_manager.link(bare_fic, "fandom", [a, b, a])
        assert inserted == [a, b]
        assert link_manager.current_ids(bare_fic, "fandom") == {a, b}

    def test_existing_links_skipped(self, link_manager, bare_fic, fandom_ids):
        a = fandom_ids["A"]
        link_manager.link(bare_fic, "fandom", [a])
        assert link_manager.link(bare_fic, "fandom", [a]) == []

    def test_orm_collection_sees_links(self, link_manager, bare_fic, fandom_ids):
        link_manager.link(bare_fic, "fandom", [fandom_ids["A"]])
        assert [f.name for f in bare_fic.fandoms] == ["A"]

    def test_shelves_have_no_character_links(self, link_manager, shelf_manager, reader):
        shelf = shelf_manager.create(reader, {"title": "Favorites"})
        with pytest.raises(ValidationError):
            link_manager.current_ids(shelf, "character")


class TestReconcile:
    """Test LinkManager.reconcile()."""

    def test_set_difference(self, link_manager, bare_fic, fandom_ids):
        """{A, B} -> {B, C} deletes exactly A and inserts exactly C."""
        a, b, c = fandom_ids["A"], fandom_ids["B"], fandom_ids["C"]
        link_manager.link(bare_fic, "fandom", [a, b])

        diff = link_manager.reconcile(bare_fic, "fandom", [b, c])

        assert diff.to_delete == {a}
        assert diff.to_insert == {c}
        assert link_manager.current_ids(bare_fic, "fandom") == {b, c}

    def test_untouched_link_keeps_created_at(self, link_manager, bare_fic, fandom_ids):
        """B survives the edit with its original creation time."""
        a, b, c = fandom_ids["A"], fandom_ids["B"], fandom_ids["C"]
        link_manager.link(bare_fic, "fandom", [a, b])
        original = link_manager.link_created_at(bare_fic, "fandom")[b]

        link_manager.reconcile(bare_fic, "fandom", [b, c])

        assert link_manager.link_created_at(bare_fic, "fandom")[b] == original

    def test_idempotent(self, link_manager, bare_fic, fandom_ids):
        """The second reconcile to the same target writes nothing."""
        target = [fandom_ids["B"], fandom_ids["C"]]
        link_manager.link(bare_fic, "fandom", [fandom_ids["A"]])

        first = link_manager.reconcile(bare_fic, "fandom", target)
        second = link_manager.reconcile(bare_fic, "fandom", target)

        assert first.write_count == 3
        assert second.unchanged is True
        assert second.write_count == 0

    def test_reconcile_to_empty(self, link_manager, bare_fic, fandom_ids):
        link_manager.link(bare_fic, "fandom", list(fandom_ids.values()))
        diff = link_manager.reconcile(bare_fic, "fandom", [])
        assert diff.to_delete == set(fandom_ids.values())
        assert bare_fic.fandoms == []

    def test_duplicate_targets_ignored(self, link_manager, bare_fic, fandom_ids):
        a = fandom_ids["A"]
        diff = link_manager.reconcile(bare_fic, "fandom", [a, a])
        assert diff.to_insert == {a}
