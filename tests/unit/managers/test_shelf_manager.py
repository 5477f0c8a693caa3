"""
test_shelf_manager.py
---------------------
Unit tests for ShelfManager: shelf CRUD, label input, ordering, fic
placement and sorting.
"""
import pytest

from ficshelf.core.exceptions import ValidationError
from ficshelf.database.models.library import DEFAULT_SHELF_COLOR, DEFAULT_SORT_ORDER


@pytest.fixture
def shelves(shelf_manager, reader):
    """Three shelves for ``reader``: Favorites, To Read, Archive."""
    return [
        shelf_manager.create(reader, {"title": title})
        for title in ("Favorites", "To Read", "Archive")
    ]


class TestShelfManagerCreate:
    """Test ShelfManager.create()."""

    def test_defaults(self, shelf_manager, reader):
        shelf = shelf_manager.create(reader, {"title": "  Comfort   Reads "})
        assert shelf.title == "Comfort Reads"
        assert shelf.color == DEFAULT_SHELF_COLOR
        assert shelf.sort_order == DEFAULT_SORT_ORDER
        assert shelf.is_private is False
        assert shelf.owner is reader

    def test_comma_separated_labels(self, shelf_manager, reader):
        shelf = shelf_manager.create(
            reader,
            {
                "title": "Hurt/Comfort",
                "color": "#112233",
                "is_private": "yes",
                "fandoms": "Naruto, Bleach",
                "tags": "Angst, , Fluff",
            },
        )
        assert shelf.color == "#112233"
        assert shelf.is_private is True
        assert sorted(f.name for f in shelf.fandoms) == ["Bleach", "Naruto"]
        assert sorted(t.name for t in shelf.tags) == ["Angst", "Fluff"]
        assert shelf.relationships == []

    def test_title_required(self, shelf_manager, reader):
        with pytest.raises(ValidationError):
            shelf_manager.create(reader, {"title": "  "})


class TestShelfManagerUpdate:
    """Test rename, recolor and relabel."""

    def test_rename_and_recolor(self, shelf_manager, shelves):
        shelf_manager.rename(shelves[0], "Faves")
        shelf_manager.recolor(shelves[0], "#000000")
        assert shelves[0].title == "Faves"
        assert shelves[0].color == "#000000"

    def test_empty_title_rejected(self, shelf_manager, shelves):
        with pytest.raises(ValidationError):
            shelf_manager.rename(shelves[0], " ")

    def test_relabel(self, shelf_manager, reader):
        shelf = shelf_manager.create(reader, {"title": "Mixed", "tags": "Fluff, Angst"})
        shelf_manager.update(shelf, {"tags": ["Angst", "Crack"]})
        assert sorted(t.name for t in shelf.tags) == ["Angst", "Crack"]


class TestShelfManagerOrdering:
    """Test get_for_user() and reorder()."""

    def test_reorder(self, shelf_manager, reader, shelves):
        favorites, to_read, archive = shelves
        ordered = shelf_manager.reorder(reader, [archive.id, favorites.id])
        assert [s.title for s in ordered] == ["Archive", "Favorites", "To Read"]

    def test_reorder_foreign_shelf_rejected(self, shelf_manager, reader, other_reader):
        theirs = shelf_manager.create(other_reader, {"title": "Theirs"})
        with pytest.raises(ValidationError):
            shelf_manager.reorder(reader, [theirs.id])

    def test_private_hidden_from_others(self, shelf_manager, reader):
        shelf_manager.create(reader, {"title": "Public"})
        shelf_manager.create(reader, {"title": "Secret", "is_private": True})
        visible = shelf_manager.get_for_user(reader, include_private=False)
        assert [s.title for s in visible] == ["Public"]

    def test_sortable_excludes_archive(self, shelf_manager, reader, shelves):
        assert [s.title for s in shelf_manager.sortable_shelves(reader)] == [
            "Favorites",
            "To Read",
        ]


class TestShelfManagerPlacement:
    """Test add_fic(), remove_fic() and set_fic_shelves()."""

    def test_add_appends_in_order(self, shelf_manager, fic_manager, shelves, sample_fic):
        second = fic_manager.create({"link": "archiveofourown.org/works/2", "title": "Second"})
        shelf_manager.add_fic(shelves[0], sample_fic)
        placement = shelf_manager.add_fic(shelves[0], second)
        assert placement.position == 2
        assert [f.id for f in shelves[0].fics] == [sample_fic.id, second.id]

    def test_add_twice_keeps_position(self, shelf_manager, shelves, sample_fic):
        first = shelf_manager.add_fic(shelves[0], sample_fic)
        again = shelf_manager.add_fic(shelves[0], sample_fic)
        assert again is first
        assert len(shelves[0].fics) == 1

    def test_remove(self, shelf_manager, shelves, sample_fic):
        shelf_manager.add_fic(shelves[0], sample_fic)
        assert shelf_manager.remove_fic(shelves[0], sample_fic) is True
        assert shelf_manager.remove_fic(shelves[0], sample_fic) is False
        assert shelves[0].fics == []

    def test_set_fic_shelves(self, shelf_manager, reader, shelves, sample_fic):
        favorites, to_read, _ = shelves
        shelf_manager.add_fic(favorites, sample_fic)

        diff = shelf_manager.set_fic_shelves(reader, sample_fic, [to_read.id])

        assert diff.to_delete == {favorites.id}
        assert diff.to_insert == {to_read.id}
        assert favorites.fics == []
        assert [f.id for f in to_read.fics] == [sample_fic.id]

    def test_set_fic_shelves_idempotent(self, shelf_manager, reader, shelves, sample_fic):
        shelf_manager.set_fic_shelves(reader, sample_fic, [shelves[0].id])
        assert shelf_manager.set_fic_shelves(reader, sample_fic, [shelves[0].id]).unchanged

    def test_archive_placement_kept(self, shelf_manager, reader, shelves, sample_fic):
        """Sorting never touches the archive shelf."""
        favorites, _, archive = shelves
        shelf_manager.add_fic(archive, sample_fic)
        shelf_manager.set_fic_shelves(reader, sample_fic, [favorites.id])
        assert [f.id for f in archive.fics] == [sample_fic.id]

    def test_archive_not_a_target(self, shelf_manager, reader, shelves, sample_fic):
        with pytest.raises(ValidationError, match="not a sortable shelf"):
            shelf_manager.set_fic_shelves(reader, sample_fic, [shelves[2].id])

    def test_delete_shelf(self, shelf_manager, reader, shelves, sample_fic):
        shelf_manager.add_fic(shelves[0], sample_fic)
        shelf_manager.delete(shelves[0])
        assert [s.title for s in shelf_manager.get_for_user(reader)] == ["To Read", "Archive"]
        assert sample_fic.shelf_links == []
