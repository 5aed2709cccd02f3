"""SMS channel implementation using Twilio."""

from typing import Optional, TYPE_CHECKING

import requests
import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    ChannelName,
    ChannelSendResult,
    Recipient,
)
from integrations.twilio_api import format_phone_number, send_message

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()

# Twilio rejects bodies longer than this
MAX_BODY_LENGTH = 1600


class SMSChannel(NotificationChannel):
    """SMS notification channel using the Twilio Messages API.

    Requires the account credentials and a sender phone number. Recipient
    phone numbers are normalised to E.164 before sending.
    """

    address_prefix = ""

    def __init__(self, settings: "Settings"):
        """Initialize the Twilio SMS channel.

        Args:
            settings: Settings instance with twilio and messaging configuration.
        """
        self._twilio = settings.twilio
        self._timeout = settings.messaging.channel_timeout_seconds
        logger.info(
            "initialized_channel",
            channel=self.channel_name.value,
            backend="twilio",
            configured=self.is_configured(),
        )

    @property
    def channel_name(self) -> ChannelName:
        """Channel identifier."""
        return ChannelName.SMS

    @property
    def sender(self) -> Optional[str]:
        """Sender number for this channel."""
        return self._twilio.TWILIO_PHONE_NUMBER

    def is_configured(self) -> bool:
        """Account credentials and sender number are all present."""
        return bool(
            self._twilio.TWILIO_ACCOUNT_SID
            and self._twilio.TWILIO_AUTH_TOKEN
            and self.sender
        )

    def resolve_address(self, recipient: Recipient) -> Optional[str]:
        """Recipient phone number in E.164 format, if any."""
        if not recipient.phone:
            return None
        return format_phone_number(recipient.phone)

    def send(
        self, address: str, body: str, subject: Optional[str] = None
    ) -> ChannelSendResult:
        """Send one message through Twilio.

        Args:
            address: E.164 phone number
            body: Message body (truncated to the Twilio limit)
            subject: Ignored by this channel

        Returns:
            ChannelSendResult with the Twilio message SID on success
        """
        if len(body) > MAX_BODY_LENGTH:
            logger.warning(
                "message_body_truncated",
                channel=self.channel_name.value,
                original_length=len(body),
            )
            body = body[: MAX_BODY_LENGTH - 3] + "..."

        try:
            response = send_message(
                self._twilio,
                to=self.address_prefix + address,
                from_=self.address_prefix + self.sender,
                body=body,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error(
                "twilio_request_failed",
                channel=self.channel_name.value,
                phone=address,
                error=str(e),
            )
            return ChannelSendResult.failure(f"Twilio request failed: {e}")

        if response.status_code in (200, 201):
            data = response.json()
            if data.get("status") == "failed":
                return ChannelSendResult.failure(
                    data.get("error_message") or "Twilio reported a failed message"
                )
            logger.info(
                "twilio_message_sent",
                channel=self.channel_name.value,
                phone=address,
                sid=data.get("sid"),
            )
            return ChannelSendResult.sent(external_id=data.get("sid"))

        error = _twilio_error(response)
        logger.error(
            "twilio_message_rejected",
            channel=self.channel_name.value,
            phone=address,
            status_code=response.status_code,
            error=error,
        )
        return ChannelSendResult.failure(error)


def _twilio_error(response) -> str:
    """Extract the error message from a Twilio error response."""
    try:
        message = response.json().get("message")
    except ValueError:
        message = None
    return message or f"Twilio API error: HTTP {response.status_code}"
