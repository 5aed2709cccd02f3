"""Infrastructure configuration module - public API.

Centralized configuration management for the notification engine using
Pydantic BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    MessagingSettings: Delivery engine settings class (for testing)
    TwilioSettings: Twilio provider settings class (for testing)
    ResendSettings: Resend provider settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    sweep_interval = settings.messaging.sweep_interval_seconds
    sms_sender = settings.twilio.TWILIO_PHONE_NUMBER
    ```
"""

from infrastructure.configuration.settings import Settings, settings
from infrastructure.configuration.infrastructure import MessagingSettings
from infrastructure.configuration.integrations import (
    ResendSettings,
    TwilioSettings,
)

__all__ = [
    "Settings",
    "settings",
    "MessagingSettings",
    "ResendSettings",
    "TwilioSettings",
]
