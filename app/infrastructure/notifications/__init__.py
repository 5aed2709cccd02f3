"""Multi-channel notification delivery engine.

Delivers chore notifications to family members over WhatsApp, SMS and
email with:
- Per-recipient channel preferences and ordered fallback
- Quiet hours and rolling-hour rate limits with deferred delivery
- Concurrent, rate-limited bulk sends
- In-memory delivery statistics

Usage:
    from infrastructure.notifications import (
        NotificationKind,
        NotificationRequest,
        Recipient,
    )
    from infrastructure.services import get_notification_service

    request = NotificationRequest(
        recipient=Recipient(user_id="u-1", name="Sam", phone="+15551234567"),
        kind=NotificationKind.REMINDER,
        context={"chore": {"title": "Take out the trash", "points": 3}},
    )
    result = get_notification_service().submit(request)
"""

# Models
from infrastructure.notifications.models import (
    ChannelAttempt,
    ChannelName,
    ChannelSendResult,
    CommunicationPreferences,
    DeliveryResult,
    DeliveryStats,
    NotificationKind,
    NotificationOptions,
    NotificationPriority,
    NotificationRequest,
    QuietHours,
    Recipient,
    ServiceStatus,
    StatsWindow,
)

# Components
from infrastructure.notifications.bulk import BulkDispatcher
from infrastructure.notifications.executor import DeliveryExecutor
from infrastructure.notifications.gate import DeliveryGate
from infrastructure.notifications.scheduler import NotificationScheduler
from infrastructure.notifications.tracker import DeliveryTracker
from infrastructure.notifications.preferences import (
    DEFAULT_PREFERENCES,
    resolve_channel_order,
    resolve_preferences,
)

# Channel interface
from infrastructure.notifications.channels.base import NotificationChannel

# Service
from infrastructure.notifications.service import NotificationService

__all__ = [
    # Models
    "ChannelAttempt",
    "ChannelName",
    "ChannelSendResult",
    "CommunicationPreferences",
    "DeliveryResult",
    "DeliveryStats",
    "NotificationKind",
    "NotificationOptions",
    "NotificationPriority",
    "NotificationRequest",
    "QuietHours",
    "Recipient",
    "ServiceStatus",
    "StatsWindow",
    # Components
    "BulkDispatcher",
    "DeliveryExecutor",
    "DeliveryGate",
    "NotificationScheduler",
    "DeliveryTracker",
    "DEFAULT_PREFERENCES",
    "resolve_channel_order",
    "resolve_preferences",
    # Channel interface
    "NotificationChannel",
    # Service
    "NotificationService",
]
