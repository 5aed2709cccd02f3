"""Integration settings __init__ - exports all channel provider settings."""

from infrastructure.configuration.integrations.twilio import TwilioSettings
from infrastructure.configuration.integrations.resend import ResendSettings

__all__ = [
    "TwilioSettings",
    "ResendSettings",
]
