"""Unit tests for custom exception hierarchy"""
import asyncio
from datetime import datetime

from reflxy.exceptions import (
    ReflxyError,
    ValidationError,
    StoreError,
    ExternalAPIError,
    InsightRewriteError,
    wrap_external_exception
)


class TestReflxyError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = ReflxyError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = ReflxyError(
            message="Insight save failed",
            user_id="user-123",
            operation="upsert_insight",
            context={"fingerprint": "temporal:delayed:10"},
        )
        assert error.user_id == "user-123"
        assert error.operation == "upsert_insight"
        assert error.context["fingerprint"] == "temporal:delayed:10"

    def test_to_dict(self):
        """Test API serialization"""
        data = ReflxyError("boom", user_message="Try later").to_dict()
        assert data["error"] == "ReflxyError"
        assert data["user_message"] == "Try later"
        assert "request_id" in data


class TestSubclasses:
    """Test specialised exceptions"""

    def test_validation_error(self):
        error = ValidationError("cannot be empty", field="user_id", value="")
        assert error.user_message == "Invalid user_id: cannot be empty"
        assert error.context == {"field": "user_id", "value": ""}

    def test_rewrite_error_is_external(self):
        error = InsightRewriteError("missing opener", operation="rewrite_insight")
        assert isinstance(error, ExternalAPIError)
        assert error.service == "OpenAI"

    def test_store_error(self):
        cause = RuntimeError("disk full")
        error = StoreError("write failed", user_id="u1", cause=cause)
        assert error.cause is cause
        assert "insight history" in error.user_message


class TestWrapExternalException:
    """Test wrap_external_exception()"""

    def test_timeout_becomes_rewrite_error(self):
        wrapped = wrap_external_exception(asyncio.TimeoutError(), operation="rewrite_insight")
        assert isinstance(wrapped, InsightRewriteError)
        assert "timed out" in wrapped.message

    def test_unknown_error_is_generic(self):
        wrapped = wrap_external_exception(KeyError("x"), operation="rewrite_insight")
        assert type(wrapped) is ReflxyError
        assert wrapped.operation == "rewrite_insight"
