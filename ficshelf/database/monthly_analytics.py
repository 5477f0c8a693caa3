#!/usr/bin/env python3
"""
monthly_analytics.py
--------------------
Loads a user's reading logs and builds their monthly reading report.
"""
from datetime import date
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ficshelf.analytics import (
    MonthlyReport,
    ReadingInterval,
    build_report,
    completed_fic_ids,
    month_window,
    parse_ranges,
)
from ficshelf.core.logging_manager import FicShelfLogger
from .decorators import handle_db_errors, log_database_operation
from .models import Fic, Profile, ReadingLog


class MonthlyAnalytics:
    """
    Handles per-month reading statistics.

    Loads reading logs and completed fics and hands them to the
    aggregation functions of ``ficshelf.analytics``.
    """

    def __init__(self, logger: Optional[FicShelfLogger] = None) -> None:
        """
        Initialize monthly analytics.

        Args:
            logger: Optional logger for analytics operations
        """
        self.logger = logger

    @handle_db_errors
    def user_intervals(
        self, session: Session, user: Union[Profile, int]
    ) -> List[ReadingInterval]:
        """
        Every parseable reading interval of a user, across all logs.

        Malformed stored ranges are skipped.
        """
        user_id = user.id if isinstance(user, Profile) else user
        logs = session.scalars(
            select(ReadingLog)
            .where(ReadingLog.user_id == user_id)
            .order_by(ReadingLog.id)
        )
        intervals: List[ReadingInterval] = []
        for log in logs:
            intervals.extend(parse_ranges(log.read_ranges, log.fic_id))
        return intervals

    @handle_db_errors
    @log_database_operation("monthly_report")
    def compute(
        self,
        session: Session,
        user: Union[Profile, int],
        month_offset: int = 0,
        today: Optional[date] = None,
    ) -> MonthlyReport:
        """
        Build the report for the month ``month_offset`` months back.

        Args:
            session: SQLAlchemy session
            user: Profile or profile id
            month_offset: 0 for the current month, 1 for the previous one...
            today: Reference date (defaults to today)

        Returns:
            MonthlyReport for the target month
        """
        window = month_window(month_offset, today)
        intervals = self.user_intervals(session, user)

        fic_ids = completed_fic_ids(intervals, window)
        fics_by_id = {}
        if fic_ids:
            fics = session.scalars(
                select(Fic)
                .where(Fic.id.in_(fic_ids))
                .options(
                    selectinload(Fic.fandoms),
                    selectinload(Fic.relationships),
                    selectinload(Fic.characters),
                )
            )
            fics_by_id = {fic.id: fic for fic in fics}

        report = build_report(intervals, window, fics_by_id)

        if self.logger:
            self.logger.log_debug(
                "Monthly report built",
                {
                    "month": report.window.label,
                    "fics_read": report.fics_read,
                    "days_read": report.days_read,
                },
            )
        return report
