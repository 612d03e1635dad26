"""Tests for logging formatters and log context."""

import json
import logging

import pytest

from cursorpage.logging import (
    HumanReadableFormatter,
    StructuredJSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)


@pytest.fixture
def record():
    return logging.LogRecord(
        name="cursorpage",
        level=logging.ERROR,
        pathname=__file__,
        lineno=10,
        msg="No cursor payload found in cache for %s",
        args=("paginator_cursor:1",),
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def reset_context():
    clear_log_context()
    yield
    clear_log_context()


class TestLogContext:
    """Tests for the log context helpers."""

    def test_set_merges(self):
        set_log_context(request_id="abc")
        set_log_context(collection="blog_posts")

        assert get_log_context() == {"request_id": "abc", "collection": "blog_posts"}

    def test_clear(self):
        set_log_context(request_id="abc")

        clear_log_context()

        assert get_log_context() == {}


class TestStructuredJSONFormatter:
    """Tests for StructuredJSONFormatter."""

    def test_standard_fields(self, record):
        data = json.loads(StructuredJSONFormatter().format(record))

        assert data["level"] == "ERROR"
        assert data["logger"] == "cursorpage"
        assert data["message"] == "No cursor payload found in cache for paginator_cursor:1"
        assert data["environment"] == "development"

    def test_context_fields_included(self, record):
        set_log_context(request_id="abc")

        data = json.loads(StructuredJSONFormatter().format(record))

        assert data["request_id"] == "abc"

    def test_extra_fields_included(self, record):
        record.cache_key = "paginator_cursor:1"

        data = json.loads(StructuredJSONFormatter().format(record))

        assert data["cache_key"] == "paginator_cursor:1"


class TestHumanReadableFormatter:
    """Tests for HumanReadableFormatter."""

    def test_error_includes_location(self, record):
        output = HumanReadableFormatter().format(record)

        assert "ERROR" in output
        assert "test_logging" in output
        assert "paginator_cursor:1" in output
