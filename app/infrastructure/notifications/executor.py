"""Delivery executor: ordered multi-channel attempts with fallback.

Tries the recipient's channels in preference order and stops at the first
one that accepts the message. Unavailable channels (not registered, not
configured, no contact address for the recipient, or throttled for that
recipient) are recorded as failed attempts and skipped without calling the
provider.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.gate import DeliveryGate
from infrastructure.notifications.models import (
    ChannelAttempt,
    ChannelName,
    DeliveryResult,
    NotificationRequest,
    utc_now,
)
from infrastructure.notifications.preferences import (
    resolve_channel_order,
    resolve_preferences,
)
from infrastructure.notifications.templates import (
    DEFAULT_APP_NAME,
    render_body,
    render_subject,
)
from infrastructure.notifications.tracker import DeliveryTracker

logger = structlog.get_logger()

CHANNEL_UNAVAILABLE = "channel unavailable"
ALL_CHANNELS_FAILED = "all delivery channels failed"


class DeliveryExecutor:
    """Attempts delivery of one request across its channel chain.

    Attributes:
        channels: Lookup table of channel adapters
        gate: Gate charged once per delivery and once per channel send
        tracker: Tracker receiving every final result

    Example:
        executor = DeliveryExecutor(
            channels={ChannelName.SMS: sms_channel},
            gate=DeliveryGate(),
            tracker=DeliveryTracker(),
        )
        result = executor.attempt_delivery(request)
    """

    def __init__(
        self,
        channels: Dict[ChannelName, NotificationChannel],
        gate: DeliveryGate,
        tracker: DeliveryTracker,
        clock: Optional[Callable[[], datetime]] = None,
        app_name: str = DEFAULT_APP_NAME,
        app_url: str = "",
    ):
        self.channels = channels
        self.gate = gate
        self.tracker = tracker
        self.clock = clock or utc_now
        self.app_name = app_name
        self.app_url = app_url

    def attempt_delivery(
        self, request: NotificationRequest, rate_limit_charged: bool = False
    ) -> DeliveryResult:
        """Deliver a request through the first channel that accepts it.

        The recipient's rate limiter is charged once per call, whatever the
        outcome, unless the caller already charged it through
        ``DeliveryGate.try_acquire``. The final result is handed to the
        tracker.

        Args:
            request: Notification request to deliver now
            rate_limit_charged: True when the request was admitted with
                ``try_acquire``

        Returns:
            DeliveryResult with the full attempt trail
        """
        preferences = resolve_preferences(request.recipient, self.gate.default_preferences)
        order = resolve_channel_order(preferences, request.options.force_channel)

        attempts: List[ChannelAttempt] = []
        for channel_name in order:
            attempt = self._attempt(request, channel_name)
            attempts.append(attempt)
            if attempt.success:
                break

        succeeded = bool(attempts) and attempts[-1].success
        result = DeliveryResult(
            success=succeeded,
            channel=attempts[-1].channel if attempts else None,
            attempts=attempts,
            error=None if succeeded else ALL_CHANNELS_FAILED,
            delivered_at=self.clock(),
            request_id=request.request_id,
        )

        if not rate_limit_charged:
            self.gate.record_send(request.recipient)
        self.tracker.record(result, user_id=request.user_id)

        if succeeded:
            logger.info(
                "delivery_succeeded",
                user_id=request.user_id,
                request_id=request.request_id,
                kind=request.kind.value,
                channel=result.channel.value,
                attempts=len(attempts),
            )
        else:
            logger.warning(
                "all_channels_failed",
                user_id=request.user_id,
                request_id=request.request_id,
                kind=request.kind.value,
                channels=[a.channel.value for a in attempts],
            )
        return result

    def _attempt(
        self, request: NotificationRequest, channel_name: ChannelName
    ) -> ChannelAttempt:
        channel = self.channels.get(channel_name)
        address = None
        if channel is not None and channel.is_configured():
            address = channel.resolve_address(request.recipient)

        if not address:
            logger.info(
                "channel_unavailable",
                channel=channel_name.value,
                user_id=request.user_id,
                registered=channel is not None,
            )
            return self._failed(channel_name, CHANNEL_UNAVAILABLE)

        if not self.gate.try_acquire_channel(request.user_id, channel_name):
            logger.info(
                "channel_throttled",
                channel=channel_name.value,
                user_id=request.user_id,
                limit=self.gate.channel_limit(channel_name),
            )
            return self._failed(channel_name, CHANNEL_UNAVAILABLE)

        body = render_body(request, channel_name, self.app_name, self.app_url)
        subject = render_subject(request, self.app_name)
        try:
            outcome = channel.send(address, body, subject=subject)
        except Exception as e:
            logger.error(
                "channel_exception",
                channel=channel_name.value,
                user_id=request.user_id,
                error=str(e),
            )
            return self._failed(channel_name, str(e) or type(e).__name__)

        if not outcome.success:
            logger.warning(
                "channel_send_failed",
                channel=channel_name.value,
                user_id=request.user_id,
                error=outcome.error,
            )
        return ChannelAttempt(
            channel=channel_name,
            success=outcome.success,
            error=outcome.error,
            external_id=outcome.external_id,
            timestamp=self.clock(),
        )

    def _failed(self, channel_name: ChannelName, error: str) -> ChannelAttempt:
        return ChannelAttempt(
            channel=channel_name, success=False, error=error, timestamp=self.clock()
        )
