"""
Unit tests for log formatters.
"""

import json
import logging

import pytest

from snapdiff.core.logging import HumanReadableFormatter, StructuredFormatter, configure_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="snapdiff.snapshot.store",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Skipping malformed payload",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestFormatters:
    """Structured and human-readable output."""

    def test_structured_includes_context(self):
        formatter = StructuredFormatter(include_timestamp=False)
        line = formatter.format(make_record(snapshot="old.tar.gz", source_label="users"))
        entry = json.loads(line)

        assert entry == {
            "level": "WARNING",
            "logger": "snapdiff.snapshot.store",
            "message": "Skipping malformed payload",
            "snapshot": "old.tar.gz",
            "source_label": "users",
        }

    def test_structured_timestamp(self):
        entry = json.loads(StructuredFormatter().format(make_record()))
        assert "timestamp" in entry

    def test_human_readable_context_suffix(self):
        formatter = HumanReadableFormatter(include_timestamp=False)
        line = formatter.format(make_record(snapshot="old.tar.gz", key="CN=a,DC=b"))
        assert line == (
            "[WARNING] snapdiff.snapshot.store - Skipping malformed payload "
            "[snapshot=old.tar.gz key=CN=a,DC=b]"
        )

    def test_human_readable_without_context(self):
        line = HumanReadableFormatter(include_timestamp=False).format(make_record())
        assert line.endswith("Skipping malformed payload")


@pytest.mark.unit
class TestConfigureLogging:
    """Package logger setup."""

    def test_single_handler(self):
        pkg_logger = logging.getLogger("snapdiff")
        try:
            configure_logging(level=logging.DEBUG)
            configure_logging(level=logging.INFO, structured=True)

            assert len(pkg_logger.handlers) == 1
            assert pkg_logger.level == logging.INFO
            assert isinstance(pkg_logger.handlers[0].formatter, StructuredFormatter)
        finally:
            for handler in list(pkg_logger.handlers):
                pkg_logger.removeHandler(handler)
            pkg_logger.setLevel(logging.NOTSET)
