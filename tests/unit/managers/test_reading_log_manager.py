"""
test_reading_log_manager.py
---------------------------
Unit tests for ReadingLogManager: logging reads as canonical ranges,
rereads, notes and validation.
"""
from datetime import date, datetime

import pytest

from ficshelf.core.exceptions import RangeParseError, ValidationError


class TestLogRead:
    """Test ReadingLogManager.log_read()."""

    def test_stores_canonical_half_open_range(self, log_manager, reader, sample_fic):
        log = log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-04")
        assert log.read_ranges == ["[2025-06-01,2025-06-05)"]

    def test_single_day_read(self, log_manager, reader, sample_fic):
        log = log_manager.log_read(reader, sample_fic, date(2025, 6, 30), date(2025, 6, 30))
        assert log.read_ranges == ["[2025-06-30,2025-07-01)"]

    def test_reread_appends_to_same_log(self, log_manager, reader, sample_fic):
        first = log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-04")
        second = log_manager.log_read(
            reader, sample_fic, datetime(2025, 8, 1, 22, 0), "2025-08-02"
        )
        assert second.id == first.id
        assert second.read_ranges == [
            "[2025-06-01,2025-06-05)",
            "[2025-08-01,2025-08-03)",
        ]
        assert len(log_manager.get_for_user(reader)) == 1

    def test_notes_replaced_only_when_given(self, log_manager, reader, sample_fic):
        log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-01", notes=" loved it ")
        log = log_manager.log_read(reader, sample_fic, "2025-06-02", "2025-06-02")
        assert log.notes == "loved it"

    def test_end_before_start_rejected(self, log_manager, reader, sample_fic):
        with pytest.raises(ValidationError, match="before start"):
            log_manager.log_read(reader, sample_fic, "2025-06-05", "2025-06-01")
        assert log_manager.get(reader, sample_fic) is None

    def test_invalid_date_rejected(self, log_manager, reader, sample_fic):
        with pytest.raises(ValidationError):
            log_manager.log_read(reader, sample_fic, "yesterday", "2025-06-01")

    def test_missing_date_rejected(self, log_manager, reader, sample_fic):
        with pytest.raises(ValidationError, match="required"):
            log_manager.log_read(reader, sample_fic, None, "2025-06-01")


class TestAddRange:
    """Test ReadingLogManager.add_range()."""

    def test_accepts_inclusive_notation(self, log_manager, reader, sample_fic):
        log = log_manager.add_range(reader, sample_fic, " [2025-06-01,2025-06-05] ")
        assert log.read_ranges == ["[2025-06-01,2025-06-05]"]

    def test_malformed_range_rejected(self, log_manager, reader, sample_fic):
        with pytest.raises(RangeParseError):
            log_manager.add_range(reader, sample_fic, "2025-06-01 to 2025-06-05")


class TestQueries:
    """Test get(), get_for_user(), intervals() and delete()."""

    def test_logs_are_per_user(self, log_manager, reader, other_reader, sample_fic):
        log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-01")
        assert log_manager.get(other_reader, sample_fic) is None
        assert log_manager.get_for_user(other_reader) == []

    def test_intervals(self, log_manager, reader, sample_fic):
        log = log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-04")
        [interval] = log_manager.intervals(log)
        assert interval.fic_id == sample_fic.id
        assert interval.end == datetime(2025, 6, 4, 23, 59, 59)

    def test_intervals_skip_corrupt_ranges(self, log_manager, reader, sample_fic):
        log = log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-04")
        log.read_ranges = [*log.read_ranges, "garbage"]
        assert len(log_manager.intervals(log)) == 1

    def test_delete(self, log_manager, reader, sample_fic):
        log = log_manager.log_read(reader, sample_fic, "2025-06-01", "2025-06-04")
        log_manager.delete(log)
        assert log_manager.get(reader, sample_fic) is None
