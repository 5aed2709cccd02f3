"""Unit tests for infrastructure.logging.formatters module.

Tests cover:
- add_app_info processor
- mask_sensitive_data processor
- mask_contact and mask_contact_details
- truncate_large_values processor
"""

import pytest

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_contact,
    mask_contact_details,
    mask_sensitive_data,
    truncate_large_values,
)


@pytest.mark.unit
class TestAddAppInfo:
    """Test suite for add_app_info processor factory."""

    def test_adds_name_and_version(self):
        """Processor adds app_name and app_version to event dict."""
        processor = add_app_info("ChoreMinder", "abc123")
        event_dict = {"event": "delivery_succeeded", "channel": "sms"}

        result = processor(None, "info", event_dict)

        assert result["app_name"] == "ChoreMinder"
        assert result["app_version"] == "abc123"
        assert result["channel"] == "sms"

    def test_unknown_version(self):
        """Default version is 'unknown' if not provided."""
        result = add_app_info("ChoreMinder")(None, "info", {"event": "test"})
        assert result["app_version"] == "unknown"


@pytest.mark.unit
class TestMaskSensitiveData:
    """Test suite for mask_sensitive_data processor factory."""

    def test_masks_credentials(self):
        """Credential-like keys are redacted."""
        processor = mask_sensitive_data()
        event_dict = {
            "event": "twilio_request",
            "auth_token": "secret-token",
            "RESEND_API_KEY": "re_123",
            "account_sid": "AC123",
            "channel": "sms",
        }

        result = processor(None, "info", event_dict)

        assert result["auth_token"] == "***REDACTED***"
        assert result["RESEND_API_KEY"] == "***REDACTED***"
        assert result["account_sid"] == "***REDACTED***"
        assert result["channel"] == "sms"

    def test_none_values_kept(self):
        """Missing credentials stay None."""
        result = mask_sensitive_data()(None, "info", {"api_key": None})
        assert result["api_key"] is None

    def test_additional_patterns(self):
        """Extra key fragments can be added."""
        processor = mask_sensitive_data(additional_patterns=frozenset({"pin"}))
        result = processor(None, "info", {"pin_code": "1234"})
        assert result["pin_code"] == "***REDACTED***"

    def test_custom_mask(self):
        """The replacement value is configurable."""
        result = mask_sensitive_data(mask_value="[hidden]")(None, "info", {"password": "x"})
        assert result["password"] == "[hidden]"

    def test_patterns_cover_provider_credentials(self):
        """Twilio and Resend credential names are covered."""
        assert "auth_token" in SENSITIVE_PATTERNS
        assert "api_key" in SENSITIVE_PATTERNS


@pytest.mark.unit
class TestMaskContact:
    """Test suite for contact masking."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("+15551234567", "+1******4567"),
            ("5551234567", "******4567"),
            ("sam@example.com", "s***@example.com"),
            ("123", "***"),
        ],
    )
    def test_mask_contact(self, value, expected):
        """Phones keep their last four digits, emails their first letter and domain."""
        assert mask_contact(value) == expected

    def test_processor_masks_contact_keys(self):
        """Phone and email fields are partially masked."""
        event_dict = {
            "event": "twilio_message_sent",
            "phone": "+15551234567",
            "email": "sam@example.com",
            "user_id": "user-1",
        }

        result = mask_contact_details()(None, "info", event_dict)

        assert result["phone"] == "+1******4567"
        assert result["email"] == "s***@example.com"
        assert result["user_id"] == "user-1"

    def test_processor_ignores_non_strings(self):
        """Non-string and empty values are left alone."""
        result = mask_contact_details()(None, "info", {"phone": None, "email": ""})
        assert result == {"phone": None, "email": ""}


@pytest.mark.unit
class TestTruncateLargeValues:
    """Test suite for truncate_large_values processor factory."""

    def test_truncates_long_strings(self):
        """Strings over the limit are cut and annotated."""
        result = truncate_large_values(max_length=10)(None, "info", {"body": "x" * 25})
        assert result["body"] == "x" * 10 + "...[truncated, 25 chars total]"

    def test_short_strings_untouched(self):
        """Strings within the limit are unchanged."""
        result = truncate_large_values()(None, "info", {"body": "short"})
        assert result["body"] == "short"
