"""Test fixtures for notification infrastructure tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    ChannelName,
    ChannelSendResult,
    CommunicationPreferences,
    NotificationKind,
    NotificationOptions,
    NotificationPriority,
    NotificationRequest,
    QuietHours,
    Recipient,
)


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return now


@pytest.fixture
def fixed_now():
    """Tuesday noon UTC."""
    return datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    """Mutable clock starting at ``fixed_now``."""
    return FakeClock(fixed_now)


@pytest.fixture
def mock_settings():
    """Mock Settings instance for testing channels and the service.

    Returns:
        Mock settings with twilio, resend and messaging configurations
    """
    mock = MagicMock()
    mock.twilio.TWILIO_ACCOUNT_SID = "AC123"
    mock.twilio.TWILIO_AUTH_TOKEN = "auth-token"
    mock.twilio.TWILIO_PHONE_NUMBER = "+15550000000"
    mock.twilio.TWILIO_WHATSAPP_NUMBER = "+15559999999"
    mock.twilio.TWILIO_API_URL = "https://api.twilio.com/2010-04-01"
    mock.resend.RESEND_API_KEY = "re_test_key"
    mock.resend.RESEND_FROM_EMAIL = "ChoreMinder <noreply@choreminder.app>"
    mock.resend.RESEND_API_URL = "https://api.resend.com"
    mock.messaging.batch_size = 10
    mock.messaging.batch_delay_seconds = 1.0
    mock.messaging.sweep_interval_seconds = 60
    mock.messaging.deferral_seconds = 60
    mock.messaging.tracking_retention_seconds = 7 * 24 * 3600
    mock.messaging.channel_timeout_seconds = 10.0
    mock.messaging.app_name = "ChoreMinder"
    mock.messaging.app_url = "https://choreminder.test"
    mock.messaging.whatsapp_hourly_limit = 20
    mock.messaging.sms_hourly_limit = 10
    mock.messaging.email_hourly_limit = 50
    return mock


@pytest.fixture
def preferences_factory():
    """Factory for creating CommunicationPreferences instances.

    Example:
        prefs = preferences_factory(primary_channel=ChannelName.SMS)
        quiet = preferences_factory(quiet_hours={"enabled": True})
    """

    def _factory(
        quiet_hours: Optional[Dict[str, Any]] = None, **kwargs
    ) -> CommunicationPreferences:
        if quiet_hours is not None:
            kwargs["quiet_hours"] = QuietHours(**quiet_hours)
        return CommunicationPreferences(**kwargs)

    return _factory


@pytest.fixture
def recipient_factory():
    """Factory for creating Recipient instances.

    Example:
        recipient = recipient_factory(user_id="user-2", phone=None)
    """

    def _factory(
        user_id: str = "user-1",
        name: str = "Sam",
        email: Optional[str] = "sam@example.com",
        phone: Optional[str] = "+15551234567",
        preferences: Optional[CommunicationPreferences] = None,
    ) -> Recipient:
        return Recipient(
            user_id=user_id,
            name=name,
            email=email,
            phone=phone,
            preferences=preferences,
        )

    return _factory


@pytest.fixture
def request_factory(recipient_factory):
    """Factory for creating NotificationRequest instances.

    Option keywords (reason, schedule_at, force_channel, bypass_quiet_hours)
    are collected into NotificationOptions.

    Example:
        request = request_factory(priority=NotificationPriority.URGENT)
        forced = request_factory(force_channel=ChannelName.EMAIL)
    """

    def _factory(
        recipient: Optional[Recipient] = None,
        kind: NotificationKind = NotificationKind.REMINDER,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        **options,
    ) -> NotificationRequest:
        return NotificationRequest(
            recipient=recipient or recipient_factory(),
            kind=kind,
            priority=priority,
            context=context
            if context is not None
            else {"chore": {"title": "Feed the cat", "points": 5}},
            options=NotificationOptions(**options),
        )

    return _factory


@pytest.fixture
def mock_channel_factory():
    """Factory for creating mock channels.

    Example:
        sms = mock_channel_factory(ChannelName.SMS, success=False, error="down")
        whatsapp = mock_channel_factory(ChannelName.WHATSAPP, configured=False)
    """

    def _factory(
        name: ChannelName,
        success: bool = True,
        configured: bool = True,
        address: Optional[str] = "address",
        error: str = "provider error",
    ) -> MagicMock:
        channel = MagicMock(spec=NotificationChannel)
        channel.channel_name = name
        channel.is_configured.return_value = configured
        channel.resolve_address.return_value = address
        channel.service_info.return_value = {"configured": configured}
        if success:
            channel.send.return_value = ChannelSendResult.sent(
                external_id=f"{name.value}-msg-1"
            )
        else:
            channel.send.return_value = ChannelSendResult.failure(error)
        return channel

    return _factory


@pytest.fixture
def channels(mock_channel_factory):
    """All three channels, configured and succeeding."""
    return {name: mock_channel_factory(name) for name in ChannelName}
