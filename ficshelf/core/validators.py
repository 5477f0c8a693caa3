#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for all Fic Shelf operations.

Provides type-safe conversion, validation, and normalization functions
used by the entity managers, the analytics pipeline and the CLI.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")
_SCHEME = re.compile(r"^https?://")
_WWW = re.compile(r"^www\.")


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            value = data.get(field)
            if isinstance(value, str):
                value = value.strip()
            if field not in data or not value:
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Trim a string and collapse internal runs of whitespace.

        Args:
            value: Value to normalize

        Returns:
            Normalized string, or None if empty after trimming
        """
        if value is None:
            return None
        text = _WHITESPACE.sub(" ", str(value)).strip()
        return text or None

    @staticmethod
    def normalize_key(value: Any) -> Optional[str]:
        """
        Build the case-insensitive comparison key for a name.

        Two names that differ only by case (or by surrounding and repeated
        whitespace) share one key.

        Args:
            value: Name to convert

        Returns:
            Case-folded key, or None if the name is empty
        """
        text = DataValidator.normalize_string(value)
        return text.casefold() if text else None

    @staticmethod
    def normalize_link(value: Any) -> Optional[str]:
        """
        Normalize a fic URL so the same work always maps to one link.

        Trims, lowercases and strips a leading ``http://``/``https://``
        scheme and ``www.`` prefix.

        Examples:
            >>> DataValidator.normalize_link("https://www.Archive.org/works/1")
            'archive.org/works/1'
        """
        if value is None:
            return None
        link = str(value).strip().lower()
        link = _SCHEME.sub("", link)
        link = _WWW.sub("", link)
        return link or None

    @staticmethod
    def split_labels(value: Any) -> List[str]:
        """
        Split user-supplied labels into a clean list.

        Accepts a comma-separated string or an iterable of strings.
        Empty items are dropped; order is preserved.
        """
        if value is None:
            return []
        if isinstance(value, str):
            items: Iterable[Any] = value.split(",")
        else:
            items = value
        labels = []
        for item in items:
            text = DataValidator.normalize_string(item)
            if text:
                labels.append(text)
        return labels

    @staticmethod
    def normalize_date(date_value: Any) -> Optional[date]:
        """
        Normalize various date inputs to a date object.

        Args:
            date_value: ISO date string, date object, or datetime

        Returns:
            Normalized date object or None

        Raises:
            ValidationError: If a string is not an ISO date
        """
        if isinstance(date_value, datetime):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value
        if isinstance(date_value, str):
            try:
                return date.fromisoformat(date_value.strip())
            except ValueError as e:
                raise ValidationError(f"Invalid date format: {date_value}") from e
        return None

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Raises:
            ValidationError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            if value in (0, 1):
                return bool(value)
            raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        if isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            if value.lower() in ("false", "0", "no", "off"):
                return False
            raise ValidationError(f"Cannot convert '{value}' to boolean")
        if value is not None:
            return bool(value)
        return None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer safely.

        Unparseable input yields None rather than an error, matching how
        free-text count fields (words, hits, kudos) are treated.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value).replace(",", "").strip())
        except ValueError:
            return None
