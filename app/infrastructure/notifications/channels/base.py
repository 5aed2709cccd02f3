"""Notification channel abstract base class.

All channel implementations (WhatsApp, SMS, Email) must implement this
interface. The delivery engine only ever sees a channel through it.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from infrastructure.notifications.models import (
    ChannelName,
    ChannelSendResult,
    Recipient,
)


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Each channel handles delivery through a single transport:
    - WhatsAppChannel: Twilio WhatsApp messages
    - SMSChannel: Twilio SMS
    - EmailChannel: Resend email

    Channels are selected through a lookup table keyed by ``ChannelName``,
    so adding a transport means adding one implementation.

    Example Implementation:
        class PagerChannel(NotificationChannel):

            @property
            def channel_name(self) -> ChannelName:
                return ChannelName.SMS

            def is_configured(self) -> bool:
                return bool(self._api_key)

            def resolve_address(self, recipient: Recipient) -> Optional[str]:
                return recipient.phone

            def send(self, address, body, subject=None) -> ChannelSendResult:
                ...
    """

    @property
    @abstractmethod
    def channel_name(self) -> ChannelName:
        """Channel identifier used for routing, logging and statistics."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check that the credentials and sender addressing are present.

        Returns:
            True if the channel can attempt a send
        """
        pass

    @abstractmethod
    def resolve_address(self, recipient: Recipient) -> Optional[str]:
        """Return the recipient's contact address for this channel.

        Returns:
            Phone number or email address, None when the recipient has none
        """
        pass

    @abstractmethod
    def send(
        self, address: str, body: str, subject: Optional[str] = None
    ) -> ChannelSendResult:
        """Send one message.

        Must handle provider failures (HTTP errors, timeouts, rejections)
        and return ``ChannelSendResult.failure`` rather than raising.
        Exceptions are reserved for programming errors.

        Args:
            address: Contact address returned by ``resolve_address``
            body: Rendered message body
            subject: Subject line, used by channels that support one

        Returns:
            ChannelSendResult with the provider message id on success
        """
        pass

    def service_info(self) -> Dict[str, bool]:
        """Status summary reported by the service status endpoint."""
        return {"configured": self.is_configured()}
