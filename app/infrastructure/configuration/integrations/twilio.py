"""Twilio integration settings (SMS and WhatsApp)."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class TwilioSettings(IntegrationSettings):
    """Twilio Messages API configuration.

    Both the SMS and the WhatsApp channel authenticate with the same account.
    A channel reports itself as configured only when the account credentials
    and its own sender number are present.

    Environment Variables:
        TWILIO_ACCOUNT_SID: Twilio account SID
        TWILIO_AUTH_TOKEN: Twilio auth token
        TWILIO_PHONE_NUMBER: Sender number for SMS (E.164)
        TWILIO_WHATSAPP_NUMBER: Sender number for WhatsApp (E.164)
        TWILIO_API_URL: Twilio REST API base URL

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        sid = settings.twilio.TWILIO_ACCOUNT_SID
        sender = settings.twilio.TWILIO_PHONE_NUMBER
        ```
    """

    TWILIO_ACCOUNT_SID: str | None = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN: str | None = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    TWILIO_PHONE_NUMBER: str | None = Field(default=None, alias="TWILIO_PHONE_NUMBER")
    TWILIO_WHATSAPP_NUMBER: str | None = Field(
        default=None, alias="TWILIO_WHATSAPP_NUMBER"
    )
    TWILIO_API_URL: str = Field(
        default="https://api.twilio.com/2010-04-01", alias="TWILIO_API_URL"
    )
