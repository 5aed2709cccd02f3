"""Delivery context binding for structured logging.

Binds request-scoped context (correlation id, notification request id,
recipient) to every log entry emitted while one notification is processed,
including entries written by channel adapters.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(request_id=request.request_id, user_id="u-1"):
        logger.info("processing_notification")
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind delivery-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique identifier of the caller's operation.
            Auto-generated if not provided.
        request_id: Notification request id.
        user_id: Recipient user id.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.

    Example:
        with bind_request_context(request_id=req.request_id, kind="reminder"):
            executor.attempt_delivery(req)
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    if request_id is not None:
        context["request_id"] = request_id

    if user_id is not None:
        context["user_id"] = user_id

    context.update(extra_context)

    # Restore values bound by an enclosing block
    previous = {
        key: value
        for key, value in structlog.contextvars.get_contextvars().items()
        if key in context
    }
    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())
        if previous:
            structlog.contextvars.bind_contextvars(**previous)

