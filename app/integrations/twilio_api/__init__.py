"""Twilio module for sending SMS and WhatsApp messages."""

from .client import (
    format_phone_number,
    messages_url,
    send_message,
)
