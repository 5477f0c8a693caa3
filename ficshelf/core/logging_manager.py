#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Rotating file logs for Fic Shelf components.

Each component writes ``<component>.log`` (everything from DEBUG up) and
shares ``errors.log`` with the other components. Warnings and errors are
echoed to the console as well. Structured details are appended to each
line as JSON.

Usage:
    logger = FicShelfLogger(LOG_DIR / "system", component_name="database")
    logger.log_operation("fic_created", {"fic_id": 7})
    safe_logger(maybe_none).log_debug("resolved labels", {"created": 2})
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

_FILE_FORMAT = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
_CONSOLE_FORMAT = logging.Formatter("%(levelname)s - %(message)s")


def _with_details(message: str, details: Optional[Dict[str, Any]]) -> str:
    if not details:
        return message
    return f"{message}: {json.dumps(details, default=str)}"


class FicShelfLogger:
    """
    Logger pair for one component: an operations log and the shared
    error log.

    Attributes:
        log_dir: Directory holding the log files
        component_name: Prefix of the logger names and the log file name
        main_logger: Operations and debug output
        error_logger: Errors with their tracebacks
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "ficshelf",
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._logger(
            "operations", f"{component_name}.log", logging.DEBUG, max_bytes, backup_count
        )
        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(_CONSOLE_FORMAT)
        self.main_logger.addHandler(console)

        self.error_logger = self._logger(
            "errors", "errors.log", logging.ERROR, max_bytes, backup_count
        )

    def _logger(
        self, suffix: str, filename: str, level: int, max_bytes: int, backup_count: int
    ) -> logging.Logger:
        """A named logger writing to one rotating file; old handlers dropped."""
        logger = logging.getLogger(f"{self.component_name}.{suffix}")
        logger.setLevel(level)
        logger.propagate = False
        for stale in list(logger.handlers):
            stale.close()
            logger.removeHandler(stale)

        handler = RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(_FILE_FORMAT)
        logger.addHandler(handler)
        return logger

    def close(self) -> None:
        """Detach and close every handler, releasing the log files."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a finished operation."""
        self.main_logger.info(_with_details(f"OPERATION - {operation}", details or {}))

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.debug(_with_details(f"DEBUG - {message}", details))

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Record ``error`` in errors.log with its context and traceback.

        Context is written as ``key=value`` pairs after the error text.
        """
        line = f"ERROR - {type(error).__name__}: {error}"
        if context:
            line += " | " + ", ".join(f"{key}={value}" for key, value in context.items())
        self.error_logger.error(line, exc_info=(type(error), error, error.__traceback__))


def format_cli_error(error: Exception) -> str:
    """One-line error text shown to CLI users."""
    return f"❌ {type(error).__name__}: {error}"


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Log a failed CLI command, print its error to stderr and exit.

    Args:
        ctx: Click context; ``ctx.obj["logger"]`` is used when present
        error: What went wrong
        operation: Command name for the log (e.g. 'fic_add')
        additional_context: Extra key/value pairs for the log line
        exit_code: Process exit status
    """
    context = {"operation": operation, **(additional_context or {})}
    safe_logger((ctx.obj or {}).get("logger")).log_error(error, context)
    click.echo(format_cli_error(error), err=True)
    sys.exit(exit_code)


class NullLogger:
    """Stand-in with the FicShelfLogger interface that discards everything."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass


_null_logger = NullLogger()


def safe_logger(logger: Optional[FicShelfLogger]) -> FicShelfLogger:
    """``logger`` itself, or a NullLogger when it is None."""
    return logger if logger is not None else _null_logger  # type: ignore[return-value]
