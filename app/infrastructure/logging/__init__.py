"""Structured logging infrastructure.

Centralized logging configuration for the notification engine using structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for delivery-scoped logging

Formatters:
    - add_app_info(): Processor to add app name/version
    - mask_sensitive_data(): Processor to redact credentials
    - mask_contact_details(): Processor to partially mask phone/email values
    - truncate_large_values(): Processor to limit string lengths

Example:
    from infrastructure.logging import get_module_logger, bind_request_context

    logger = get_module_logger()

    with bind_request_context(request_id="req-123"):
        logger.info("processing_notification")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_request_context,
)

from infrastructure.logging.formatters import (
    add_app_info,
    mask_contact,
    mask_contact_details,
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_request_context",
    # Formatters
    "add_app_info",
    "mask_contact",
    "mask_contact_details",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
