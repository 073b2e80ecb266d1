"""Unit tests for the logging package."""

import json
import logging
from pathlib import Path

import pytest

from moviemaker.config.models import LoggingConfig
from moviemaker.logging import (
    JobContextFilter,
    JSONFormatter,
    clear_job_context,
    configure_logging,
    get_job_context,
    job_context,
    set_job_context,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="moviemaker.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJobContext:
    """Tests for job context helpers."""

    def test_set_get_clear(self) -> None:
        set_job_context("01", "abcdef0123456789")
        assert get_job_context() == ("01", "abcdef0123456789")
        clear_job_context()
        assert get_job_context() == (None, None)

    def test_context_manager_restores_previous(self) -> None:
        with job_context("01", "outer"):
            with job_context("02", "inner"):
                assert get_job_context() == ("02", "inner")
            assert get_job_context() == ("01", "outer")
        assert get_job_context() == (None, None)


class TestJobContextFilter:
    """Tests for JobContextFilter."""

    def test_tag_with_job(self) -> None:
        record = _record()
        with job_context("03", "abcdef0123456789"):
            assert JobContextFilter().filter(record)
        assert record.job_tag == "[W03:abcdef01] "
        assert record.worker_id == "03"

    def test_tag_without_job(self) -> None:
        record = _record()
        with job_context("03"):
            JobContextFilter().filter(record)
        assert record.job_tag == "[W03] "

    def test_no_context(self) -> None:
        record = _record()
        JobContextFilter().filter(record)
        assert record.job_tag == ""
        assert record.job_id is None


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record("done")))

        assert entry["message"] == "done"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "moviemaker.test"
        assert "context" not in entry

    def test_context_fields(self) -> None:
        record = _record(worker_id="01", job_id="abc", job_tag="[W01:abc] ", size=3)
        entry = json.loads(JSONFormatter().format(record))

        assert entry["context"] == {"worker_id": "01", "job_id": "abc", "size": 3}


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_stderr_only_by_default(self, restore_root_logger) -> None:
        configure_logging(LoggingConfig(level="warning"))

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_handler_json(self, restore_root_logger, temp_dir: Path) -> None:
        log_file = temp_dir / "logs" / "moviemaker.log"
        configure_logging(LoggingConfig(level="info", file=log_file, format="json"))

        with job_context("01", "abcdef0123"):
            logging.getLogger("moviemaker.test").info("queued")
        for handler in restore_root_logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "queued"
        assert entry["context"]["worker_id"] == "01"

    def test_file_and_stderr(self, restore_root_logger, temp_dir: Path) -> None:
        configure_logging(
            LoggingConfig(file=temp_dir / "a.log", include_stderr=True)
        )
        assert len(restore_root_logger.handlers) == 2
