#!/usr/bin/env python3
"""
reading_log_manager.py
----------------------
Manages ReadingLog entities: a user's reads of one fic.

A user keeps one log per fic. Logging a read stores the day span as a
canonical half-open range (``[2025-06-01,2025-06-05)`` for June 1-4);
rereads append further ranges to the same log.

Usage:
    log_mgr = ReadingLogManager(session, logger)
    log = log_mgr.log_read(user, fic, "2025-06-01", "2025-06-04")
    log_mgr.log_read(user, fic, date(2025, 7, 1), date(2025, 7, 2))  # reread
"""
from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import select

from ficshelf.analytics.intervals import (
    ReadingInterval,
    format_range,
    parse_range_strict,
    parse_ranges,
)
from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import handle_db_errors, log_database_operation
from ficshelf.database.models import Fic, Profile, ReadingLog
from .base_manager import BaseManager


class ReadingLogManager(BaseManager):
    """Manages ReadingLog table operations."""

    @handle_db_errors
    def get(self, user: Profile, fic: Fic) -> Optional[ReadingLog]:
        """The user's log for ``fic``, if any (oldest when several exist)."""
        user = self._resolve_object(user, Profile)
        fic = self._resolve_object(fic, Fic)
        return self.session.scalars(
            select(ReadingLog)
            .where(ReadingLog.user_id == user.id, ReadingLog.fic_id == fic.id)
            .order_by(ReadingLog.id)
        ).first()

    @handle_db_errors
    def get_for_user(self, user: Profile) -> List[ReadingLog]:
        """All of a user's logs, most recently updated first."""
        user = self._resolve_object(user, Profile)
        return list(
            self.session.scalars(
                select(ReadingLog)
                .where(ReadingLog.user_id == user.id)
                .order_by(ReadingLog.updated_at.desc(), ReadingLog.id.desc())
            )
        )

    @handle_db_errors
    @log_database_operation("log_read")
    def log_read(
        self,
        user: Profile,
        fic: Fic,
        start: Any,
        end: Any,
        notes: Optional[str] = None,
    ) -> ReadingLog:
        """
        Record that ``user`` read ``fic`` from ``start`` through ``end``.

        Args:
            user: Reader
            fic: Fic read
            start: First day (date, datetime or ISO string)
            end: Last day, inclusive
            notes: Replaces the log's notes when given

        Returns:
            The user's log for the fic, with the new range appended

        Raises:
            ValidationError: If a date is missing or invalid, or ``end`` is
                before ``start``
        """
        user = self._resolve_object(user, Profile)
        fic = self._resolve_object(fic, Fic)
        start_day = DataValidator.normalize_date(start)
        end_day = DataValidator.normalize_date(end)
        if start_day is None or end_day is None:
            raise ValidationError("Both start and end dates are required")
        if end_day < start_day:
            raise ValidationError(
                f"End date {end_day.isoformat()} is before start date {start_day.isoformat()}"
            )

        return self.add_range(user, fic, format_range(start_day, end_day), notes)

    @handle_db_errors
    def add_range(
        self,
        user: Profile,
        fic: Fic,
        range_str: str,
        notes: Optional[str] = None,
    ) -> ReadingLog:
        """
        Append a raw range string to the user's log for ``fic``.

        The range must parse; malformed input is rejected here rather than
        stored and skipped later.

        Raises:
            RangeParseError: If ``range_str`` is malformed
        """
        user = self._resolve_object(user, Profile)
        fic = self._resolve_object(fic, Fic)
        parse_range_strict(range_str)
        range_str = range_str.strip()

        log = self.get(user, fic)
        if log is None:
            log = ReadingLog(user_id=user.id, fic_id=fic.id, read_ranges=[range_str])
            self.session.add(log)
        else:
            # Reassign so the JSON column registers the change
            log.read_ranges = [*(log.read_ranges or []), range_str]

        if notes and notes.strip():
            log.notes = notes.strip()

        self.session.flush()
        if self.logger:
            self.logger.log_debug(
                "Logged read",
                {"log_id": log.id, "user_id": user.id, "fic_id": fic.id, "range": range_str},
            )
        return log

    def intervals(self, log: ReadingLog) -> List[ReadingInterval]:
        """The log's parseable ranges as intervals."""
        return parse_ranges(log.read_ranges, log.fic_id)

    @handle_db_errors
    @log_database_operation("delete_reading_log")
    def delete(self, log: ReadingLog) -> None:
        log = self._resolve_object(log, ReadingLog)
        self.session.delete(log)
        self.session.flush()
