"""Email channel implementation using Resend."""

from typing import Optional, TYPE_CHECKING

import requests
import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    ChannelName,
    ChannelSendResult,
    Recipient,
)
from integrations.resend_api import send_email

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


class EmailChannel(NotificationChannel):
    """Email notification channel using the Resend API.

    Requires an API key. Recipient addresses are validated by the
    Recipient model (EmailStr).
    """

    def __init__(self, settings: "Settings"):
        """Initialize the Resend email channel.

        Args:
            settings: Settings instance with resend and messaging configuration.
        """
        self._resend = settings.resend
        self._timeout = settings.messaging.channel_timeout_seconds
        self._default_subject = f"{settings.messaging.app_name} notification"
        logger.info(
            "initialized_channel",
            channel=self.channel_name.value,
            backend="resend",
            configured=self.is_configured(),
        )

    @property
    def channel_name(self) -> ChannelName:
        """Channel identifier."""
        return ChannelName.EMAIL

    def is_configured(self) -> bool:
        """API key and sender address are present."""
        return bool(self._resend.RESEND_API_KEY and self._resend.RESEND_FROM_EMAIL)

    def resolve_address(self, recipient: Recipient) -> Optional[str]:
        """Recipient email address, if any."""
        return recipient.email or None

    def send(
        self, address: str, body: str, subject: Optional[str] = None
    ) -> ChannelSendResult:
        """Send one email through Resend.

        Args:
            address: Recipient email address
            body: Plain text body
            subject: Subject line (defaults to "<app> notification")

        Returns:
            ChannelSendResult with the Resend email id on success
        """
        try:
            response = send_email(
                self._resend,
                to=address,
                subject=subject or self._default_subject,
                text=body,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("resend_request_failed", email=address, error=str(e))
            return ChannelSendResult.failure(f"Resend request failed: {e}")

        if response.status_code in (200, 201):
            email_id = response.json().get("id")
            logger.info("resend_email_sent", email=address, email_id=email_id)
            return ChannelSendResult.sent(external_id=email_id)

        try:
            error = response.json().get("message")
        except ValueError:
            error = None
        error = error or f"Resend API error: HTTP {response.status_code}"
        logger.error(
            "resend_email_rejected",
            email=address,
            status_code=response.status_code,
            error=error,
        )
        return ChannelSendResult.failure(error)
