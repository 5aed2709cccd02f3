"""WhatsApp channel implementation using Twilio."""

from typing import Optional

from infrastructure.notifications.channels.sms import SMSChannel
from infrastructure.notifications.models import ChannelName


class WhatsAppChannel(SMSChannel):
    """WhatsApp notification channel using the Twilio Messages API.

    Same transport as SMS; Twilio routes the message to WhatsApp when both
    addresses carry the ``whatsapp:`` prefix. Uses its own sender number.
    """

    address_prefix = "whatsapp:"

    @property
    def channel_name(self) -> ChannelName:
        """Channel identifier."""
        return ChannelName.WHATSAPP

    @property
    def sender(self) -> Optional[str]:
        """WhatsApp-enabled sender number."""
        return self._twilio.TWILIO_WHATSAPP_NUMBER
