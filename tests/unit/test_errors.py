"""Tests for the notionblog error hierarchy."""

import pytest

from notionblog import errors
from notionblog.errors import ErrorCode, NotionBlogError, NotionBlogNetworkError


def _coded_subclasses():
    return [
        obj
        for obj in vars(errors).values()
        if isinstance(obj, type)
        and issubclass(obj, NotionBlogError)
        and obj.__module__ == errors.__name__
        and not obj.__name__.startswith("_")
        and obj is not NotionBlogError
    ]


class TestHierarchy:
    def test_one_class_per_code(self):
        codes = sorted(cls.default_code.value for cls in _coded_subclasses())
        assert codes == sorted(code.value for code in ErrorCode)

    def test_no_conversion_error(self):
        assert not hasattr(errors, "NotionBlogConversionError")
        assert "CONVERSION_ERROR" not in {code.value for code in ErrorCode}

    @pytest.mark.parametrize("cls", _coded_subclasses(), ids=lambda c: c.__name__)
    def test_code_is_plain_string(self, cls):
        err = cls(message="boom")
        assert type(err.code) is str
        assert err.code == cls.default_code.value
        assert str(err) == "boom"


class TestNotionBlogError:
    def test_cause_chained(self):
        cause = OSError("reset")
        err = NotionBlogNetworkError(message="net", context={"path": "/x"}, cause=cause)
        assert err.__cause__ is cause
        assert err.context == {"path": "/x"}

    def test_repr(self):
        err = NotionBlogError(code="CUSTOM", message="m", context={"k": 1})
        assert repr(err) == "NotionBlogError(code='CUSTOM', message='m', context={'k': 1})"
