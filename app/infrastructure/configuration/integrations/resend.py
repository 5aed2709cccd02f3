"""Resend integration settings (email)."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class ResendSettings(IntegrationSettings):
    """Resend email API configuration.

    Environment Variables:
        RESEND_API_KEY: Resend API key
        RESEND_FROM_EMAIL: Sender address used for all notifications
        RESEND_API_URL: Resend REST API base URL
    """

    RESEND_API_KEY: str | None = Field(default=None, alias="RESEND_API_KEY")
    RESEND_FROM_EMAIL: str = Field(
        default="ChoreMinder <noreply@choreminder.app>", alias="RESEND_FROM_EMAIL"
    )
    RESEND_API_URL: str = Field(default="https://api.resend.com", alias="RESEND_API_URL")
