#!/usr/bin/env python3
"""
monthly.py
------------------
Monthly reading report.

For a target month the report gives the reading heatmap, the fics
finished that month, the words read across them and the most frequent
fandom, relationship and character among them.

This module only aggregates; loading logs and fics from the database is
done by ``ficshelf.database.monthly_analytics``.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .intervals import MonthWindow, ReadingInterval, completed_fic_ids, reading_heatmap

NO_DATA = "—"


def top_name(names: Iterable[str]) -> str:
    """
    Most frequent name, or ``NO_DATA`` when there are none.

    Ties go to the alphabetically first name (case-insensitive, then
    exact), so the result never depends on row order.

    Examples:
        >>> top_name(["Naruto", "Bleach", "Naruto"])
        'Naruto'
        >>> top_name(["Naruto", "Bleach"])
        'Bleach'
    """
    counts = Counter(name.strip() for name in names if name and name.strip())
    if not counts:
        return NO_DATA
    return min(counts, key=lambda name: (-counts[name], name.casefold(), name))


@dataclass
class MonthlyReport:
    """
    One user's reading in one calendar month.

    Attributes:
        window: The month covered
        heatmap: One flag per day, True when a read was active
        completed_fic_ids: Fics finished in the month
        words_read: Sum of the completed fics' word counts
        top_fandom: Most frequent fandom among completed fics
        top_relationship: Most frequent relationship among completed fics
        top_character: Most frequent character among completed fics
    """

    window: MonthWindow
    heatmap: List[bool]
    completed_fic_ids: List[int] = field(default_factory=list)
    words_read: int = 0
    top_fandom: str = NO_DATA
    top_relationship: str = NO_DATA
    top_character: str = NO_DATA

    @property
    def fics_read(self) -> int:
        return len(self.completed_fic_ids)

    @property
    def days_read(self) -> int:
        return sum(self.heatmap)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.window.first_day.strftime("%Y-%m"),
            "heatmap": list(self.heatmap),
            "days_read": self.days_read,
            "fics_read": self.fics_read,
            "completed_fic_ids": list(self.completed_fic_ids),
            "words_read": self.words_read,
            "top_fandom": self.top_fandom,
            "top_relationship": self.top_relationship,
            "top_character": self.top_character,
        }


def build_report(
    intervals: List[ReadingInterval],
    window: MonthWindow,
    fics_by_id: Dict[int, Any],
) -> MonthlyReport:
    """
    Aggregate intervals into a MonthlyReport.

    Args:
        intervals: All of the user's reading intervals
        window: Target month
        fics_by_id: Completed fics keyed by id; each needs ``words`` and
            ``fandoms``/``relationships``/``characters`` collections of
            objects with a ``name``

    Returns:
        The report; with nothing completed, words are 0 and every top
        name is ``NO_DATA``
    """
    report = MonthlyReport(
        window=window,
        heatmap=reading_heatmap(intervals, window),
        completed_fic_ids=completed_fic_ids(intervals, window),
    )
    fics = [fics_by_id[fic_id] for fic_id in report.completed_fic_ids if fic_id in fics_by_id]

    report.words_read = sum(fic.words or 0 for fic in fics)
    report.top_fandom = top_name(e.name for fic in fics for e in fic.fandoms)
    report.top_relationship = top_name(e.name for fic in fics for e in fic.relationships)
    report.top_character = top_name(e.name for fic in fics for e in fic.characters)
    return report
