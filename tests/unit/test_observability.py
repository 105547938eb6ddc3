"""Tests for observability/logger.py"""
import io
import json
import logging
import sys


class TestStructuredFormatter:
    def _get_record(
        self,
        msg,
        level=logging.INFO,
        exc_info=None,
        stack_info=None,
        extra_fields=None,
    ):
        record = logging.LogRecord(
            name="test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        if stack_info is not None:
            record.stack_info = stack_info
        return record

    def test_basic_format(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "test"
        assert "ts" in result

    def test_extra_fields_merged(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"page_id": "abc", "blocks": 5})
        result = json.loads(fmt.format(record))
        assert result["page_id"] == "abc"
        assert result["blocks"] == 5

    def test_reserved_keys_not_overwritten(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("real", extra_fields={"message": "fake", "level": "X"})
        result = json.loads(fmt.format(record))
        assert result["message"] == "real"
        assert result["level"] == "INFO"

    def test_exception_info_included(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(fmt.format(self._get_record("error msg", exc_info=exc_info)))
        assert "ValueError: test error" in result["exception"]

    def test_stack_info_included(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("m", stack_info="Stack (most recent)")))
        assert "Stack" in result["stack_info"]

    def test_non_serializable_values_stringified(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("m", extra_fields={"obj": object()})
        assert "object" in json.loads(fmt.format(record))["obj"]

    def test_unicode_kept(self):
        from notionblog.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        assert "📄" in fmt.format(self._get_record("📄 page"))


class TestGetLogger:
    def test_writes_json_lines(self):
        from notionblog.observability.logger import get_logger, log_event

        stream = io.StringIO()
        log = get_logger("notionblog.test.stream", stream=stream)
        log.warning("Child listing failed", extra=log_event("fetch_children", block_id="b1"))
        entry = json.loads(stream.getvalue().strip())
        assert entry["message"] == "Child listing failed"
        assert entry["op"] == "fetch_children"
        assert entry["block_id"] == "b1"
        assert entry["level"] == "WARNING"

    def test_repeated_calls_reuse_handler(self):
        from notionblog.observability.logger import get_logger

        first = get_logger("notionblog.test.reuse")
        second = get_logger("notionblog.test.reuse")
        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False

    def test_string_level(self):
        from notionblog.observability.logger import get_logger

        log = get_logger("notionblog.test.level", level="warning")
        assert log.level == logging.WARNING


class TestLogEvent:
    def test_shape(self):
        from notionblog.observability.logger import log_event

        assert log_event("export", user_id="u1") == {
            "extra_fields": {"op": "export", "user_id": "u1"}
        }
