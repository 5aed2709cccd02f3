"""Unit tests for infrastructure.logging.context module.

Tests cover:
- bind_request_context() context manager
- Context restoration for nested bindings
"""

import uuid

import pytest
import structlog

from infrastructure.logging.context import bind_request_context


def _correlation_id():
    return structlog.contextvars.get_contextvars().get("correlation_id")


@pytest.mark.unit
class TestBindRequestContext:
    """Test suite for bind_request_context context manager."""

    def test_auto_generates_correlation_id(self):
        """Correlation ID is auto-generated if not provided."""
        with bind_request_context(request_id="req-1"):
            uuid.UUID(_correlation_id())

    def test_uses_provided_correlation_id(self):
        """Provided correlation ID is used instead of generating one."""
        with bind_request_context(correlation_id="corr-123"):
            assert _correlation_id() == "corr-123"

    def test_binds_request_and_user(self):
        """Request id, user id and extra fields are bound."""
        with bind_request_context(request_id="req-1", user_id="user-1", kind="reminder"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["request_id"] == "req-1"
            assert ctx["user_id"] == "user-1"
            assert ctx["kind"] == "reminder"

    def test_unbinds_on_exit(self):
        """Context is removed when the block ends."""
        with bind_request_context(request_id="req-1"):
            pass
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbinds_on_exception(self):
        """Context is removed even when the block raises."""
        with pytest.raises(RuntimeError):
            with bind_request_context(request_id="req-1"):
                raise RuntimeError("boom")
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_nested_binding_restores_outer(self):
        """An inner binding restores the outer values when it ends."""
        with bind_request_context(correlation_id="outer", request_id="req-1"):
            with bind_request_context(correlation_id="inner", request_id="req-2"):
                assert _correlation_id() == "inner"
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["correlation_id"] == "outer"
            assert ctx["request_id"] == "req-1"

