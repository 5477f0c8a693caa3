#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for The Fic Shelf.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all store-related errors
    │   └── ExportError - Data export operation failures
    ├── ValidationError - Data validation failures
    │   └── RangeParseError - Unparseable reading range (strict parsing only)
    └── TemporalFileError - Temporary file staging failures

Usage:
    from ficshelf.core.exceptions import DatabaseError, ValidationError

    try:
        db.fics.create({...})
    except ValidationError as e:
        click.echo(f"Invalid data: {e}", err=True)
    except DatabaseError as e:
        logger.log_error(e)
"""


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when store operations fail: connection problems, query errors,
    integrity violations (e.g. a get-or-create race lost to the unique
    constraint that could not be recovered by re-querying).

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: duplicate link")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for data export operation failures.

    Raised when writing a user's shelves and reading logs to JSON, CSV
    or XLSX fails.

    Examples:
        >>> raise ExportError("Failed to write workbook: permission denied")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Missing required fields
    - Invalid date formats
    - End date before start date
    - Unknown taggable category
    - Following yourself

    Examples:
        >>> raise ValidationError("Required field 'link' missing or empty")
        >>> raise ValidationError("Users cannot follow themselves")
    """

    pass


class RangeParseError(ValidationError):
    """
    Exception for reading ranges that do not match the interval notation.

    Only the strict parser raises this. Aggregation skips malformed
    ranges silently instead.

    Examples:
        >>> raise RangeParseError("Malformed reading range: '2025-06-01'")
    """

    pass


class TemporalFileError(Exception):
    """
    Exception for temporary file staging failures.

    Raised when a staging file for an atomic write cannot be created.

    Examples:
        >>> raise TemporalFileError("Failed to create temporary file")
    """

    pass
