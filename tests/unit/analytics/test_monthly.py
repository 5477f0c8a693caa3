"""
test_monthly.py
---------------
Unit tests for monthly report aggregation (pure, no database) and for
MonthlyAnalytics against a test database.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from ficshelf.analytics.intervals import month_window, parse_range_strict
from ficshelf.analytics.monthly import NO_DATA, build_report, top_name

JUNE_2025 = month_window(0, today=date(2025, 6, 15))


@dataclass
class Named:
    name: str


@dataclass
class StubFic:
    """Stand-in carrying what build_report reads from a fic."""

    words: Optional[int] = None
    fandoms: List[Named] = field(default_factory=list)
    relationships: List[Named] = field(default_factory=list)
    characters: List[Named] = field(default_factory=list)


def named(*names):
    return [Named(name) for name in names]


class TestTopName:
    """Test top_name() selection."""

    def test_most_frequent(self):
        assert top_name(["Naruto", "Bleach", "Naruto"]) == "Naruto"

    def test_tie_is_alphabetical(self):
        """Ties go to the alphabetically first name, whatever the order."""
        assert top_name(["Naruto", "Bleach"]) == "Bleach"
        assert top_name(["Bleach", "Naruto"]) == "Bleach"

    def test_tie_ignores_case_first(self):
        assert top_name(["bleach", "Avatar"]) == "Avatar"

    def test_names_trimmed(self):
        assert top_name([" Naruto", "Naruto ", "Bleach"]) == "Naruto"

    def test_empty_is_sentinel(self):
        assert top_name([]) == NO_DATA
        assert top_name(["", "  "]) == NO_DATA


class TestBuildReport:
    """Test build_report()."""

    def test_words_summed_over_completed_fics(self):
        intervals = [
            parse_range_strict("[2025-06-01,2025-06-03)", 1),
            parse_range_strict("[2025-06-10,2025-06-12]", 2),
        ]
        fics = {1: StubFic(words=1000), 2: StubFic(words=2500)}

        report = build_report(intervals, JUNE_2025, fics)

        assert report.words_read == 3500
        assert report.fics_read == 2
        assert report.days_read == 5

    def test_reread_words_counted_once(self):
        intervals = [
            parse_range_strict("[2025-06-01,2025-06-01]", 1),
            parse_range_strict("[2025-06-20,2025-06-20]", 1),
        ]
        report = build_report(intervals, JUNE_2025, {1: StubFic(words=1000)})
        assert report.words_read == 1000

    def test_missing_word_count_is_zero(self):
        intervals = [parse_range_strict("[2025-06-01,2025-06-01]", 1)]
        assert build_report(intervals, JUNE_2025, {1: StubFic()}).words_read == 0

    def test_empty_month(self):
        """No completed fics: words 0 and every top name is the sentinel."""
        report = build_report([], JUNE_2025, {})
        assert report.words_read == 0
        assert report.top_fandom == NO_DATA
        assert report.top_relationship == NO_DATA
        assert report.top_character == NO_DATA
        assert report.heatmap == [False] * 30

    def test_top_names_across_fics(self):
        intervals = [
            parse_range_strict("[2025-06-01,2025-06-01]", 1),
            parse_range_strict("[2025-06-02,2025-06-02]", 2),
        ]
        fics = {
            1: StubFic(
                fandoms=named("Naruto", "Bleach"),
                relationships=named("Kakashi/Iruka"),
                characters=named("Iruka", "Kakashi"),
            ),
            2: StubFic(fandoms=named("Naruto"), characters=named("Kakashi")),
        }

        report = build_report(intervals, JUNE_2025, fics)

        assert report.top_fandom == "Naruto"
        assert report.top_relationship == "Kakashi/Iruka"
        assert report.top_character == "Kakashi"

    def test_to_dict(self):
        report = build_report([parse_range_strict("[2025-06-01,2025-06-01]", 1)], JUNE_2025, {})
        data = report.to_dict()
        assert data["month"] == "2025-06"
        assert data["completed_fic_ids"] == [1]
        assert data["days_read"] == 1
        assert len(data["heatmap"]) == 30


class TestMonthlyAnalytics:
    """Test MonthlyAnalytics.compute() against the database."""

    def test_compute(self, test_db):
        with test_db.session_scope() as session:
            reader = test_db.profiles.create({"username": "reader"})
            first = test_db.fics.create(
                {"link": "ao3.org/works/1", "words": 1000, "fandoms": "Naruto"}
            )
            second = test_db.fics.create(
                {"link": "ao3.org/works/2", "words": 2500, "fandoms": "Bleach, Naruto"}
            )
            test_db.logs.log_read(reader, first, "2025-05-30", "2025-06-02")
            test_db.logs.log_read(reader, second, "2025-06-10", "2025-06-11")

            report = test_db.monthly_analytics.compute(
                session, reader, month_offset=0, today=date(2025, 6, 30)
            )

        assert report.completed_fic_ids == [first.id, second.id]
        assert report.words_read == 3500
        assert report.top_fandom == "Naruto"
        assert report.top_character == NO_DATA
        assert report.days_read == 4

    def test_previous_month_offset(self, test_db):
        with test_db.session_scope() as session:
            reader = test_db.profiles.create({"username": "reader"})
            fic = test_db.fics.create({"link": "ao3.org/works/1", "words": 10})
            test_db.logs.log_read(reader, fic, "2025-05-30", "2025-06-02")

            may = test_db.monthly_analytics.compute(
                session, reader, month_offset=1, today=date(2025, 6, 30)
            )

        assert may.window.label == "May 2025"
        assert may.completed_fic_ids == []
        assert may.words_read == 0
        assert [i + 1 for i, active in enumerate(may.heatmap) if active] == [30, 31]
