"""
Tests for logging_manager module.

Tests FicShelfLogger file output, the CLI error helpers and the
safe_logger/NullLogger pair used where a logger is optional.
"""
import click
import pytest

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.logging_manager import (
    FicShelfLogger,
    NullLogger,
    format_cli_error,
    handle_cli_error,
    safe_logger,
)


class TestFicShelfLogger:
    """Tests for FicShelfLogger file handlers."""

    def test_creates_log_files(self, tmp_dir):
        """Operation and error logs land in the log directory."""
        logger = FicShelfLogger(tmp_dir, component_name="test_component")
        logger.log_operation("create_fic", {"fic_id": 1})
        logger.log_error(ValueError("boom"), {"operation": "create_fic"})
        logger.close()

        main_log = (tmp_dir / "test_component.log").read_text()
        error_log = (tmp_dir / "errors.log").read_text()
        assert 'OPERATION - create_fic: {"fic_id": 1}' in main_log
        assert "ValueError: boom | operation=create_fic" in error_log

    def test_error_traceback_logged(self, tmp_dir):
        logger = FicShelfLogger(tmp_dir, component_name="trace_component")
        try:
            raise KeyError("missing")
        except KeyError as e:
            logger.log_error(e)
        logger.close()

        error_log = (tmp_dir / "errors.log").read_text()
        assert "Traceback" in error_log
        assert "test_error_traceback_logged" in error_log

    def test_debug_details_are_json(self, tmp_dir):
        logger = FicShelfLogger(tmp_dir, component_name="debug_component")
        logger.log_debug("resolved", {"created": 2})
        logger.log_debug("plain")
        logger.close()

        main_log = (tmp_dir / "debug_component.log").read_text()
        assert 'DEBUG - resolved: {"created": 2}' in main_log
        assert "DEBUG - plain\n" in main_log

    def test_reopening_does_not_duplicate_lines(self, tmp_dir):
        """A second logger for the same component replaces the first's handlers."""
        FicShelfLogger(tmp_dir, component_name="twice")
        logger = FicShelfLogger(tmp_dir, component_name="twice")
        logger.log_operation("once")
        logger.close()

        assert (tmp_dir / "twice.log").read_text().count("OPERATION - once") == 1


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_all_methods_are_no_ops(self):
        """NullLogger accepts every logging call."""
        logger = NullLogger()
        logger.log_operation("op", {"key": "value"})
        logger.log_error(ValueError("test"), {"context": "test"})
        logger.log_debug("debug", {"key": "value"})


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_returns_logger_when_provided(self, tmp_dir):
        logger = FicShelfLogger(tmp_dir, component_name="safe")
        assert safe_logger(logger) is logger
        logger.close()

    def test_returns_null_logger_for_none(self):
        assert isinstance(safe_logger(None), NullLogger)


class TestHandleCliError:
    """Tests for format_cli_error() and handle_cli_error()."""

    def test_format(self):
        assert format_cli_error(ValidationError("No fic with id 9")) == (
            "❌ ValidationError: No fic with id 9"
        )

    def test_prints_and_exits(self, capsys):
        ctx = click.Context(click.Command("dummy"), obj={})
        with pytest.raises(SystemExit) as excinfo:
            handle_cli_error(ctx, ValueError("bad input"), "dummy")

        assert excinfo.value.code == 1
        assert "ValueError: bad input" in capsys.readouterr().err

    def test_logs_operation_context(self, tmp_dir):
        logger = FicShelfLogger(tmp_dir, component_name="cli")
        ctx = click.Context(click.Command("dummy"), obj={"logger": logger})

        with pytest.raises(SystemExit):
            handle_cli_error(
                ctx, ValidationError("no"), "fic_show", additional_context={"fic_id": 9}
            )
        logger.close()

        assert "operation=fic_show, fic_id=9" in (tmp_dir / "errors.log").read_text()
