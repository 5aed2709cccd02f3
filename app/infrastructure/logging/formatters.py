"""Structlog processors for notification engine log entries.

Notification logs carry recipient contact details and rendered message
bodies. These processors keep credentials out of the logs, partially mask
phone numbers and email addresses, and cap the size of message bodies.

Usage:
    from infrastructure.logging.formatters import mask_contact_details
"""

from typing import Any

# Key fragments whose values are never logged
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "auth_token",
        "credential",
        "account_sid",
    }
)

# Keys holding recipient contact details
CONTACT_KEYS = frozenset({"phone", "phone_number", "address", "email", "to"})


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Create a processor that adds application info to log entries.

    Args:
        app_name: Name of the application.
        app_version: Version string (usually the git SHA).

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that replaces credential values.

    Matching is case-insensitive on the key: any key containing one of the
    patterns has its value replaced.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra key fragments to treat as sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        return {
            key: (
                mask_value
                if value is not None
                and any(pattern in key.lower() for pattern in patterns)
                else value
            )
            for key, value in event_dict.items()
        }

    return processor


def mask_contact(value: str) -> str:
    """Partially mask a phone number or email address.

    Examples:
        >>> mask_contact("+15551234567")
        '+1******4567'
        >>> mask_contact("jane@example.com")
        'j***@example.com'
    """
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    if len(value) <= 4:
        return "*" * len(value)
    keep = 2 if value.startswith("+") else 0
    return value[:keep] + "*" * (len(value) - keep - 4) + value[-4:]


def mask_contact_details():
    """Create a processor that partially masks recipient contact details.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key in CONTACT_KEYS.intersection(event_dict):
            value = event_dict[key]
            if isinstance(value, str) and value:
                event_dict[key] = mask_contact(value)
        return event_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Rendered message bodies can be long (email digests); this keeps a
    single log entry bounded.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
