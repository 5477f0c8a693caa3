"""Tests for database decorators."""
import pytest
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from ficshelf.core.exceptions import DatabaseError, ValidationError
from ficshelf.core.logging_manager import FicShelfLogger
from ficshelf.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from ficshelf.database.managers.base_manager import BaseManager


class Operations:
    """Minimal object carrying a logger, as managers do."""

    def __init__(self, logger=None):
        self.logger = logger

    @log_database_operation("do_work")
    def work(self, value, scale=None):
        return value * 2

    @log_database_operation("do_fail")
    def fail(self):
        raise ValueError("boom")

    @validate_metadata(["title"])
    def create(self, metadata):
        return metadata["title"]


class TestHandleDbErrors:
    """Tests for handle_db_errors."""

    def test_integrity_error_raises_database_error(self):
        @handle_db_errors
        def insert():
            raise IntegrityError("statement", {}, Exception("duplicate"))

        with pytest.raises(DatabaseError, match="Data integrity violation in insert"):
            insert()

    def test_sqlalchemy_error_raises_database_error(self):
        @handle_db_errors
        def query():
            raise SQLAlchemyError("connection failed")

        with pytest.raises(DatabaseError, match="Database operation failed"):
            query()

    def test_validation_errors_pass_through(self):
        @handle_db_errors
        def validate():
            raise ValidationError("bad input")

        with pytest.raises(ValidationError):
            validate()


class TestLogDatabaseOperation:
    """Tests for log_database_operation."""

    def test_logs_start_and_completion(self):
        mock_logger = MagicMock(spec=FicShelfLogger)

        assert Operations(mock_logger).work(21, scale=None) == 42

        message, details = mock_logger.log_debug.call_args[0]
        assert message == "do_work started"
        assert details == {"positional": 1, "keywords": ["scale"]}
        name, details = mock_logger.log_operation.call_args[0]
        assert name == "do_work_completed"
        assert details["elapsed_ms"] >= 0

    def test_logs_failure_and_reraises(self):
        mock_logger = MagicMock(spec=FicShelfLogger)

        with pytest.raises(ValueError):
            Operations(mock_logger).fail()

        mock_logger.log_error.assert_called_once()
        assert mock_logger.log_error.call_args[0][1]["operation"] == "do_fail"
        mock_logger.log_operation.assert_not_called()

    def test_without_logger(self):
        assert Operations().work(1) == 2


class TestValidateMetadata:
    """Tests for validate_metadata."""

    def test_passes_with_required_field(self):
        assert Operations().create({"title": "Recs"}) == "Recs"

    def test_missing_field_raises(self):
        with pytest.raises(ValidationError):
            Operations().create({"color": "#ffffff"})

    def test_metadata_keyword(self):
        assert Operations().create(metadata={"title": "Recs"}) == "Recs"
        with pytest.raises(ValidationError):
            Operations().create(metadata={})


class TestExecuteWithRetry:
    """Tests for BaseManager._execute_with_retry."""

    class Manager(BaseManager):
        pass

    def test_retries_when_locked(self, monkeypatch):
        monkeypatch.setattr("ficshelf.database.managers.base_manager.time.sleep", lambda s: None)
        manager = self.Manager(session=MagicMock())
        calls = []

        def operation():
            calls.append(1)
            if len(calls) < 3:
                raise OperationalError("stmt", {}, Exception("database is locked"))
            return "done"

        assert manager._execute_with_retry(operation) == "done"
        assert len(calls) == 3

    def test_other_operational_errors_raise(self):
        manager = self.Manager(session=MagicMock())

        def operation():
            raise OperationalError("stmt", {}, Exception("no such table"))

        with pytest.raises(OperationalError):
            manager._execute_with_retry(operation)
