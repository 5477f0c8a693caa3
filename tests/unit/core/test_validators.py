"""
test_validators.py
------------------
Unit tests for DataValidator normalization helpers.
"""
from datetime import date, datetime

import pytest

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator


class TestRequiredFields:
    """Test DataValidator.validate_required_fields()."""

    def test_passes_when_present(self):
        """Present, non-empty fields pass."""
        DataValidator.validate_required_fields({"link": "ao3/works/1"}, ["link"])

    def test_missing_field_raises(self):
        """Missing field raises ValidationError."""
        with pytest.raises(ValidationError, match="link"):
            DataValidator.validate_required_fields({}, ["link"])

    def test_blank_string_raises(self):
        """Whitespace-only counts as empty."""
        with pytest.raises(ValidationError):
            DataValidator.validate_required_fields({"title": "   "}, ["title"])


class TestNormalizeString:
    """Test string and key normalization."""

    def test_trims_and_collapses_whitespace(self):
        assert DataValidator.normalize_string("  Harry   Potter \n") == "Harry Potter"

    def test_empty_returns_none(self):
        assert DataValidator.normalize_string("   ") is None
        assert DataValidator.normalize_string(None) is None

    def test_key_is_case_insensitive(self):
        """Case variants share one key."""
        assert DataValidator.normalize_key("Harry Potter") == DataValidator.normalize_key(
            "  harry  POTTER "
        )

    def test_key_of_empty_is_none(self):
        assert DataValidator.normalize_key("") is None


class TestNormalizeLink:
    """Test DataValidator.normalize_link()."""

    def test_strips_scheme_and_www(self):
        assert (
            DataValidator.normalize_link(" https://www.ArchiveOfOurOwn.org/works/1 ")
            == "archiveofourown.org/works/1"
        )

    def test_http_scheme(self):
        assert DataValidator.normalize_link("http://example.com/a") == "example.com/a"

    def test_empty_link_is_none(self):
        assert DataValidator.normalize_link("  ") is None
        assert DataValidator.normalize_link(None) is None


class TestSplitLabels:
    """Test DataValidator.split_labels()."""

    def test_comma_separated_string(self):
        assert DataValidator.split_labels("Fluff, Angst ,, Hurt/Comfort") == [
            "Fluff",
            "Angst",
            "Hurt/Comfort",
        ]

    def test_list_input_drops_empties(self):
        assert DataValidator.split_labels(["Fluff", " ", None, "Angst"]) == ["Fluff", "Angst"]

    def test_none_is_empty_list(self):
        assert DataValidator.split_labels(None) == []


class TestNormalizeDate:
    """Test DataValidator.normalize_date()."""

    def test_iso_string(self):
        assert DataValidator.normalize_date("2025-06-01") == date(2025, 6, 1)

    def test_datetime_becomes_date(self):
        assert DataValidator.normalize_date(datetime(2025, 6, 1, 13, 5)) == date(2025, 6, 1)

    def test_invalid_string_raises(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_date("June 1st")

    def test_none(self):
        assert DataValidator.normalize_date(None) is None


class TestNormalizeScalars:
    """Test bool and int conversion."""

    @pytest.mark.parametrize("value,expected", [
        ("yes", True), ("off", False), (1, True), (0, False), (True, True),
    ])
    def test_bool(self, value, expected):
        assert DataValidator.normalize_bool(value) is expected

    def test_bool_rejects_garbage(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_bool("maybe")

    def test_int_accepts_thousands_separators(self):
        assert DataValidator.normalize_int("12,500") == 12500

    def test_int_unparseable_is_none(self):
        assert DataValidator.normalize_int("lots") is None
        assert DataValidator.normalize_int(True) is None
