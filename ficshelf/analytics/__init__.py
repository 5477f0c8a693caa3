"""
Reading analytics for The Fic Shelf.

Modules:
- intervals: Reading range parsing, month windows, heatmaps, completions
- monthly: Monthly report aggregation and top-name selection
"""
from .intervals import (
    MonthWindow,
    ReadingInterval,
    completed_fic_ids,
    finished_in_month,
    format_range,
    month_window,
    parse_range,
    parse_range_strict,
    parse_ranges,
    reading_heatmap,
)
from .monthly import NO_DATA, MonthlyReport, build_report, top_name

__all__ = [
    "MonthWindow",
    "ReadingInterval",
    "completed_fic_ids",
    "finished_in_month",
    "format_range",
    "month_window",
    "parse_range",
    "parse_range_strict",
    "parse_ranges",
    "reading_heatmap",
    "NO_DATA",
    "MonthlyReport",
    "build_report",
    "top_name",
]
