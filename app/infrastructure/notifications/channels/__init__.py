"""Notification channel implementations."""

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel
from infrastructure.notifications.channels.sms import SMSChannel
from infrastructure.notifications.channels.whatsapp import WhatsAppChannel

__all__ = [
    "NotificationChannel",
    "EmailChannel",
    "SMSChannel",
    "WhatsAppChannel",
]
