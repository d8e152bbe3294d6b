"""
Tests for the request-id logging context.
"""
import logging

from sentry_academy.logger import (
    REQUEST_ID,
    RequestIdFilter,
    clear_request_id,
    configure_logging,
    request_context,
    set_request_id,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("sentry_academy.test", logging.INFO, __file__, 1, "msg", None, None)


class TestRequestContext:
    def test_default_is_dash(self):
        record = _record()
        RequestIdFilter().filter(record)
        assert record.request_id == "-"

    def test_context_binds_and_restores(self):
        with request_context("req-42"):
            record = _record()
            RequestIdFilter().filter(record)
            assert record.request_id == "req-42"
        assert REQUEST_ID.get() == "-"

    def test_nested_contexts(self):
        with request_context("outer"):
            with request_context("inner"):
                assert REQUEST_ID.get() == "inner"
            assert REQUEST_ID.get() == "outer"

    def test_set_and_clear(self):
        set_request_id("req-7")
        assert REQUEST_ID.get() == "req-7"
        clear_request_id()
        assert REQUEST_ID.get() == "-"


class TestConfigureLogging:
    def test_idempotent(self):
        first = configure_logging("DEBUG")
        handlers = list(first.handlers)
        second = configure_logging("INFO")
        assert first is second
        assert second.handlers == handlers
        assert any(isinstance(f, RequestIdFilter) for h in handlers for f in h.filters)
