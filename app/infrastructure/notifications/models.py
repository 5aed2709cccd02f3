"""Notification delivery engine core models.

Platform-agnostic models for deciding, attempting and reporting the delivery
of one chore notification to one family member.

Uses Pydantic BaseModel for:
- RFC 5322 compliant email validation (EmailStr)
- Runtime input validation (phone numbers, timezones, rate limits)
- Immutability of requests and results (frozen models)
"""

import re
import uuid
from datetime import datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import pytz
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def utc_now() -> datetime:
    """Default clock used across the engine."""
    return datetime.now(timezone.utc)


class ChannelName(str, Enum):
    """Communication transports a notification can be delivered through."""

    WHATSAPP = "whatsapp"
    SMS = "sms"
    EMAIL = "email"


class NotificationKind(str, Enum):
    """What happened to the chore that triggered the notification."""

    ASSIGNED = "assigned"
    REMINDER = "reminder"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"
    DIGEST = "digest"
    UPDATE = "update"


class NotificationPriority(str, Enum):
    """Notification priority levels.

    URGENT notifications are never deferred for quiet hours or rate limits.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class StatsWindow(str, Enum):
    """Time windows supported by delivery statistics."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"

    @property
    def seconds(self) -> int:
        return {"hour": 3600, "day": 86400, "week": 604800}[self.value]


class QuietHours(BaseModel):
    """Daily window during which only urgent notifications go out.

    A window whose start is later than its end wraps midnight
    (22:00-08:00). Times are interpreted in ``timezone``.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    start: time = time(22, 0)
    end: time = time(8, 0)
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject names pytz does not know."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


def _all_kinds_enabled() -> Dict[NotificationKind, bool]:
    return {kind: True for kind in NotificationKind}


class CommunicationPreferences(BaseModel):
    """Per-recipient delivery preferences.

    Owned by the recipient and read-only to the engine. The defaults are
    used for recipients that have never stored any preferences.

    Attributes:
        primary_channel: First channel to try
        fallback_channels: Channels tried, in order, when earlier ones fail
        quiet_hours: Window in which non-urgent notifications are deferred
        max_messages_per_hour: Rolling-hour cap on delivered notifications
        enabled_notifications: Per-kind opt-in flags (missing kinds are enabled)
    """

    model_config = ConfigDict(frozen=True)

    primary_channel: ChannelName = ChannelName.WHATSAPP
    fallback_channels: List[ChannelName] = Field(
        default_factory=lambda: [ChannelName.SMS, ChannelName.EMAIL]
    )
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    max_messages_per_hour: int = Field(default=10, ge=1)
    enabled_notifications: Dict[NotificationKind, bool] = Field(
        default_factory=_all_kinds_enabled
    )


_PHONE_CHARS = re.compile(r"[\s().-]")


class Recipient(BaseModel):
    """Family member a notification is addressed to.

    Attributes:
        user_id: Stable identifier; keys rate limits and deferred queues
        name: Display name used in message bodies
        email: Address for the email channel (optional)
        phone: Number for the SMS and WhatsApp channels (optional)
        preferences: Stored preferences, None to use the defaults
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    name: str = ""
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    preferences: Optional[CommunicationPreferences] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        """Strip formatting characters and check the digits."""
        if v is None:
            return v
        cleaned = _PHONE_CHARS.sub("", v.strip())
        if not cleaned:
            return None
        digits = cleaned[1:] if cleaned.startswith("+") else cleaned
        if not digits.isdigit() or not 7 <= len(digits) <= 15:
            raise ValueError(f"Invalid phone number: {v}")
        return cleaned


class NotificationOptions(BaseModel):
    """Per-request delivery options."""

    model_config = ConfigDict(frozen=True)

    reason: Optional[str] = None
    schedule_at: Optional[datetime] = None
    force_channel: Optional[ChannelName] = None
    bypass_quiet_hours: bool = False

    @field_validator("schedule_at")
    @classmethod
    def ensure_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive datetimes are taken to be UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class NotificationRequest(BaseModel):
    """One notification to deliver to one recipient.

    Immutable once accepted. A deferred copy is produced with
    ``with_schedule_at`` and keeps the same ``request_id`` so that it can be
    cancelled while it waits in the queue.

    Example:
        request = NotificationRequest(
            recipient=Recipient(user_id="u-1", name="Sam", phone="+15551234567"),
            kind=NotificationKind.ASSIGNED,
            priority=NotificationPriority.MEDIUM,
            context={"chore": {"title": "Feed the cat", "points": 5}},
        )
    """

    model_config = ConfigDict(frozen=True)

    recipient: Recipient
    kind: NotificationKind
    priority: NotificationPriority = NotificationPriority.MEDIUM
    context: Dict[str, Any] = Field(default_factory=dict)
    options: NotificationOptions = Field(default_factory=NotificationOptions)
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def user_id(self) -> str:
        return self.recipient.user_id

    def with_schedule_at(self, schedule_at: Optional[datetime]) -> "NotificationRequest":
        """Return a copy carrying a different send time."""
        options = self.options.model_copy(update={"schedule_at": schedule_at})
        return self.model_copy(update={"options": options})


class ChannelSendResult(BaseModel):
    """Outcome of one adapter ``send`` call."""

    model_config = ConfigDict(frozen=True)

    success: bool
    external_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def sent(cls, external_id: Optional[str] = None) -> "ChannelSendResult":
        return cls(success=True, external_id=external_id)

    @classmethod
    def failure(cls, error: str) -> "ChannelSendResult":
        return cls(success=False, error=error)


class ChannelAttempt(BaseModel):
    """Record of one channel tried for one request."""

    model_config = ConfigDict(frozen=True)

    channel: ChannelName
    success: bool
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
    external_id: Optional[str] = None


class DeliveryResult(BaseModel):
    """Final outcome of one notification request.

    Attributes:
        success: True when a channel accepted the message, or when the
            request was accepted for deferred delivery
        channel: Channel that succeeded, else the last one tried
        attempts: Ordered trail of channel attempts
        error: Failure description when not successful
        delivered_at: Time the result was produced
        scheduled_at: Send time when the request was deferred
        request_id: Id of the originating request
        skipped: True when the recipient disabled this kind of notification
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    channel: Optional[ChannelName] = None
    attempts: List[ChannelAttempt] = Field(default_factory=list)
    error: Optional[str] = None
    delivered_at: datetime = Field(default_factory=utc_now)
    scheduled_at: Optional[datetime] = None
    request_id: Optional[str] = None
    skipped: bool = False

    @property
    def is_deferred(self) -> bool:
        return self.scheduled_at is not None and not self.attempts


class DeliveryStats(BaseModel):
    """Aggregate delivery statistics over a time window."""

    window: StatsWindow
    total: int = 0
    successful: int = 0
    failed: int = 0
    by_channel: Dict[ChannelName, int] = Field(default_factory=dict)
    avg_attempts: float = 0.0


class ServiceStatus(BaseModel):
    """Snapshot of the delivery engine state."""

    per_channel: Dict[ChannelName, Dict[str, bool]]
    queue_size: int
    active_rate_limiters: int
    tracked_results: int
    sweeper_running: bool = False
