#!/usr/bin/env python3
"""
export_manager.py
-----------------
"Export my data": a user's logged fics, grouped by shelf.

Every shelf becomes one table with one row per reading log of a fic on
that shelf. Columns follow the reading-tracker spreadsheet layout:

    Title, Author, Link, Summary, Rating, Archive Warning, Category,
    Fandoms, Characters, Relationships, Additional Tags, Words, Hits,
    Kudos, Reading Dates, Notes

Export Formats:
    1. **XLSX**: One workbook, one sheet per shelf (openpyxl)
    2. **CSV**: One file per shelf in a directory
    3. **JSON**: One document with every shelf's rows

All files are staged in a temporary file and moved into place once
complete.

Usage:
    exporter = ExportManager(logger=db.logger)

    with db.session_scope() as session:
        user = db.profiles.require("reader")
        exporter.export_to_xlsx(session, user, Path("my_fic_shelf_data.xlsx"))
"""
from __future__ import annotations

import csv
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ficshelf.core.exceptions import ExportError
from ficshelf.core.logging_manager import FicShelfLogger
from ficshelf.core.temporal_files import TemporalFileManager
from .decorators import handle_db_errors, log_database_operation
from .models import Fic, Profile, ReadingLog, Shelf, ShelfFic

EXPORT_COLUMNS = [
    "Title",
    "Author",
    "Link",
    "Summary",
    "Rating",
    "Archive Warning",
    "Category",
    "Fandoms",
    "Characters",
    "Relationships",
    "Additional Tags",
    "Words",
    "Hits",
    "Kudos",
    "Reading Dates",
    "Notes",
]

# Excel limits sheet titles to 31 characters and forbids []:*?/\
SHEET_TITLE_LIMIT = 31
_SHEET_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")
_FILENAME_FORBIDDEN = re.compile(r"[^\w\- ]+")

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="202D26", end_color="202D26", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)
_CELL_ALIGN = Alignment(vertical="top", wrap_text=True)

ShelfRows = Dict[str, List[Dict[str, Any]]]


def sheet_title(title: str) -> str:
    """Shelf title made safe for a worksheet name."""
    cleaned = _SHEET_FORBIDDEN.sub("_", title).strip() or "Shelf"
    return cleaned[:SHEET_TITLE_LIMIT]


def _unique_name(name: str, used: Set[str], limit: Optional[int] = None) -> str:
    """
    ``name``, or ``name (2)``, ``name (3)`` ... when already taken.

    Names are compared casefolded since Excel and most filesystems ignore
    case. With ``limit`` the name is shortened so the suffix still fits.
    The returned name is recorded in ``used``.
    """
    candidate = name
    suffix = 2
    while candidate.casefold() in used:
        tag = f" ({suffix})"
        base = name[: limit - len(tag)] if limit else name
        candidate = f"{base}{tag}"
        suffix += 1
    used.add(candidate.casefold())
    return candidate


def _names(entities: List[Any]) -> str:
    return ", ".join(entity.name for entity in entities)


class ExportManager:
    """
    Exports a user's shelves and reading logs to files.

    Attributes:
        logger: Optional logger for export operations
    """

    def __init__(self, logger: Optional[FicShelfLogger] = None) -> None:
        """
        Initialize export manager.

        Args:
            logger: Optional logger for export operations
        """
        self.logger = logger

    # -------------------------------------------------------------------------
    # Row collection
    # -------------------------------------------------------------------------

    @staticmethod
    def _serialize_log(log: ReadingLog) -> Dict[str, Any]:
        fic: Fic = log.fic
        return {
            "Title": fic.title or "",
            "Author": fic.author or "",
            "Link": fic.link or "",
            "Summary": fic.summary or "",
            "Rating": fic.rating or "",
            "Archive Warning": ", ".join(fic.archive_warning or []),
            "Category": fic.category or "",
            "Fandoms": _names(fic.fandoms),
            "Characters": _names(fic.characters),
            "Relationships": _names(fic.relationships),
            "Additional Tags": _names(fic.tags),
            "Words": fic.words if fic.words is not None else "",
            "Hits": fic.hits if fic.hits is not None else "",
            "Kudos": fic.kudos if fic.kudos is not None else "",
            "Reading Dates": ", ".join(log.read_ranges or []),
            "Notes": log.notes or "",
        }

    @handle_db_errors
    def collect_user_rows(self, session: Session, user: Profile) -> ShelfRows:
        """
        Build the export rows of every shelf of ``user``.

        Args:
            session: SQLAlchemy session
            user: Whose data to export

        Returns:
            Rows keyed by shelf title, shelves in display order. A shelf
            with no logged fics maps to an empty list.
        """
        shelves = session.scalars(
            select(Shelf)
            .where(Shelf.user_id == user.id)
            .order_by(Shelf.sort_order, Shelf.id)
        )

        rows: ShelfRows = {}
        used: Set[str] = set()
        for shelf in shelves:
            logs = session.scalars(
                select(ReadingLog)
                .join(ShelfFic, ShelfFic.fic_id == ReadingLog.fic_id)
                .where(ShelfFic.shelf_id == shelf.id, ReadingLog.user_id == user.id)
                .order_by(ShelfFic.position, ReadingLog.id)
                .options(
                    selectinload(ReadingLog.fic).selectinload(Fic.fandoms),
                    selectinload(ReadingLog.fic).selectinload(Fic.characters),
                    selectinload(ReadingLog.fic).selectinload(Fic.relationships),
                    selectinload(ReadingLog.fic).selectinload(Fic.tags),
                )
            )
            rows[_unique_name(shelf.title, used)] = [
                self._serialize_log(log) for log in logs
            ]
        return rows

    # -------------------------------------------------------------------------
    # Writers
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("export_to_xlsx")
    def export_to_xlsx(
        self, session: Session, user: Profile, export_file: Union[str, Path]
    ) -> Path:
        """
        Export to one workbook with a sheet per shelf.

        Args:
            session: SQLAlchemy session
            user: Whose data to export
            export_file: Destination ``.xlsx`` path

        Returns:
            Path to the written workbook
        """
        rows_by_shelf = self.collect_user_rows(session, user)

        workbook = Workbook()
        workbook.remove(workbook.active)
        used: Set[str] = set()
        for title, rows in rows_by_shelf.items():
            worksheet = workbook.create_sheet(
                _unique_name(sheet_title(title), used, SHEET_TITLE_LIMIT)
            )
            self._write_header(worksheet)
            for row in rows:
                worksheet.append([row[column] for column in EXPORT_COLUMNS])
            self._auto_width(worksheet)

        # A workbook needs at least one sheet
        if not workbook.sheetnames:
            self._write_header(workbook.create_sheet("Shelves"))

        try:
            with TemporalFileManager() as temp_manager:
                temp_file = temp_manager.create_temp_file(suffix=".xlsx")
                workbook.save(temp_file)
                return temp_manager.commit(temp_file, Path(export_file))
        except Exception as e:
            raise ExportError(f"Failed to write workbook {export_file}: {e}") from e

    @handle_db_errors
    @log_database_operation("export_to_csv")
    def export_to_csv(
        self, session: Session, user: Profile, export_dir: Union[str, Path]
    ) -> Dict[str, Path]:
        """
        Export one CSV file per shelf.

        Args:
            session: SQLAlchemy session
            user: Whose data to export
            export_dir: Directory for the CSV files

        Returns:
            Written file paths keyed by shelf title
        """
        export_dir = Path(export_dir)
        rows_by_shelf = self.collect_user_rows(session, user)
        exported: Dict[str, Path] = {}
        used: Set[str] = set()

        try:
            with TemporalFileManager() as temp_manager:
                for title, rows in rows_by_shelf.items():
                    temp_file = temp_manager.create_temp_file(suffix=".csv")
                    with open(temp_file, "w", newline="", encoding="utf-8") as csvfile:
                        writer = csv.DictWriter(csvfile, fieldnames=EXPORT_COLUMNS)
                        writer.writeheader()
                        writer.writerows(rows)

                    filename = _unique_name(
                        _FILENAME_FORBIDDEN.sub("_", title).strip() or "shelf", used
                    )
                    exported[title] = temp_manager.commit(
                        temp_file, export_dir / f"{filename}.csv"
                    )
        except Exception as e:
            raise ExportError(f"Failed to export CSV files to {export_dir}: {e}") from e

        return exported

    @handle_db_errors
    @log_database_operation("export_to_json")
    def export_to_json(
        self, session: Session, user: Profile, export_file: Union[str, Path]
    ) -> Path:
        """
        Export every shelf's rows to one JSON document.

        Returns:
            Path to the written JSON file
        """
        document = {
            "export_timestamp": datetime.now(timezone.utc).isoformat(),
            "username": user.username,
            "shelves": [
                {"title": title, "rows": rows}
                for title, rows in self.collect_user_rows(session, user).items()
            ],
        }

        try:
            with TemporalFileManager() as temp_manager:
                temp_file = temp_manager.create_temp_file(suffix=".json")
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2, default=str)
                return temp_manager.commit(temp_file, Path(export_file))
        except Exception as e:
            raise ExportError(f"Failed to write {export_file}: {e}") from e

    # -------------------------------------------------------------------------
    # Worksheet styling
    # -------------------------------------------------------------------------

    @staticmethod
    def _write_header(worksheet) -> None:
        """Write the styled header row."""
        worksheet.append(EXPORT_COLUMNS)
        for col_idx in range(1, len(EXPORT_COLUMNS) + 1):
            cell = worksheet.cell(row=1, column=col_idx)
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
            cell.alignment = _HEADER_ALIGN
        worksheet.freeze_panes = "A2"

    @staticmethod
    def _auto_width(worksheet) -> None:
        """Fit column widths to content, between 10 and 50 characters."""
        for col_idx, header in enumerate(EXPORT_COLUMNS, 1):
            max_len = len(header)
            for row in worksheet.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                for cell in row:
                    if cell.value:
                        cell.alignment = _CELL_ALIGN
                        max_len = max(max_len, len(str(cell.value)))
            worksheet.column_dimensions[get_column_letter(col_idx)].width = min(
                max(max_len + 2, 10), 50
            )
