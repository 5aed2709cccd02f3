"""Notification service for dependency injection.

Provides a class-based facade over the delivery engine. One service owns
one instance of each component, so separate services (for example in tests)
never share rate limits, queues or statistics.
"""

import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union, TYPE_CHECKING

import structlog

from infrastructure.logging import bind_request_context
from infrastructure.notifications.bulk import BulkDispatcher
from infrastructure.notifications.executor import DeliveryExecutor
from infrastructure.notifications.gate import DeliveryGate
from infrastructure.notifications.models import (
    ChannelName,
    DeliveryResult,
    DeliveryStats,
    NotificationRequest,
    ServiceStatus,
    StatsWindow,
    utc_now,
)
from infrastructure.notifications.scheduler import NotificationScheduler
from infrastructure.notifications.tracker import DeliveryTracker

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from infrastructure.notifications.channels.base import NotificationChannel

logger = structlog.get_logger()


def build_default_channels(
    settings: "Settings",
) -> Dict[ChannelName, "NotificationChannel"]:
    """Create the Twilio and Resend channel adapters from settings."""
    # Import here to keep the HTTP adapters out of the core import graph
    from infrastructure.notifications.channels import (
        EmailChannel,
        SMSChannel,
        WhatsAppChannel,
    )

    channels = [WhatsAppChannel(settings), SMSChannel(settings), EmailChannel(settings)]
    return {channel.channel_name: channel for channel in channels}


class NotificationService:
    """Class-based notification delivery service.

    Usage:
        # Via the application-scoped provider
        from infrastructure.services import get_notification_service

        service = get_notification_service()
        result = service.submit(request)

        # Direct instantiation with test doubles
        service = NotificationService(
            settings,
            channels={ChannelName.SMS: fake_sms},
            clock=lambda: fixed_now,
        )
        with service:
            results = service.send_bulk(requests)
            stats = service.stats("hour")
    """

    def __init__(
        self,
        settings: "Settings",
        channels: Optional[Dict[ChannelName, "NotificationChannel"]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize notification service.

        Args:
            settings: Settings instance (required, passed from provider).
            channels: Optional lookup table of channel adapters. If not
                provided, creates the default channels from settings.
            clock: Optional callable returning the current aware datetime.
            sleep: Optional sleep function used between bulk batches.
        """
        messaging = settings.messaging
        if channels is None:
            channels = build_default_channels(settings)

        self._settings = settings
        self.clock = clock or utc_now
        self.channels = channels
        self.gate = DeliveryGate(
            clock=self.clock,
            deferral_seconds=messaging.deferral_seconds,
            channel_limits={
                ChannelName.WHATSAPP: messaging.whatsapp_hourly_limit,
                ChannelName.SMS: messaging.sms_hourly_limit,
                ChannelName.EMAIL: messaging.email_hourly_limit,
            },
        )
        self.tracker = DeliveryTracker(
            clock=self.clock, retention_seconds=messaging.tracking_retention_seconds
        )
        self.executor = DeliveryExecutor(
            channels=channels,
            gate=self.gate,
            tracker=self.tracker,
            clock=self.clock,
            app_name=messaging.app_name,
            app_url=messaging.app_url,
        )
        self.scheduler = NotificationScheduler(
            gate=self.gate,
            executor=self.executor,
            clock=self.clock,
            sweep_interval_seconds=messaging.sweep_interval_seconds,
        )
        self.bulk = BulkDispatcher(
            submit=self.submit,
            batch_size=messaging.batch_size,
            batch_delay_seconds=messaging.batch_delay_seconds,
            sleep=sleep or time.sleep,
            clock=self.clock,
        )

        logger.info(
            "initialized_notification_service",
            channels=[name.value for name in channels],
            configured=[
                name.value for name, channel in channels.items() if channel.is_configured()
            ],
        )

    def submit(self, request: NotificationRequest) -> DeliveryResult:
        """Deliver a notification now or schedule it for later.

        Args:
            request: Notification request

        Returns:
            DeliveryResult; deferred requests report ``success=True`` with
            ``scheduled_at`` set and no attempts
        """
        with bind_request_context(
            request_id=request.request_id, user_id=request.user_id
        ):
            return self.scheduler.submit(request)

    def send_bulk(self, requests: List[NotificationRequest]) -> List[DeliveryResult]:
        """Submit many requests in rate-limited batches.

        Returns:
            One DeliveryResult per request, in input order
        """
        return self.bulk.send_bulk(requests)

    def stats(self, window: Union[StatsWindow, str] = StatsWindow.DAY) -> DeliveryStats:
        """Delivery statistics over the last hour, day or week."""
        return self.tracker.stats(window)

    def service_status(self) -> ServiceStatus:
        """Snapshot of channel configuration and engine state."""
        return ServiceStatus(
            per_channel={
                name: channel.service_info() for name, channel in self.channels.items()
            },
            queue_size=self.scheduler.queue_size(),
            active_rate_limiters=self.gate.active_limiters(),
            tracked_results=len(self.tracker),
            sweeper_running=self.scheduler.is_running,
        )

    def cancel(self, request_id: str) -> bool:
        """Cancel a deferred notification that has not been sent yet."""
        return self.scheduler.cancel(request_id)

    def upcoming(self, hours: float = 24) -> List[NotificationRequest]:
        """Deferred notifications due within the next ``hours``, soonest first."""
        return self.scheduler.upcoming(hours)

    def process_scheduled(self, now: Optional[datetime] = None) -> int:
        """Run one sweep of the deferred queues immediately."""
        return self.scheduler.sweep(now)

    def start(self):
        """Start the background sweep of deferred notifications."""
        self.scheduler.start()

    def shutdown(self):
        """Stop the background sweep and release the bulk worker pool."""
        self.scheduler.stop()
        self.bulk.shutdown()
        logger.info("notification_service_shutdown")

    def __enter__(self) -> "NotificationService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
