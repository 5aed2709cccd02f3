"""Notification delivery engine settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class MessagingSettings(InfrastructureSettings):
    """Delivery engine configuration.

    Controls bulk batching, deferral timing, the scheduled sweep and how
    long delivery results are kept for statistics.

    Environment Variables:
        MESSAGING_BATCH_SIZE: Requests dispatched concurrently per bulk batch (default: 10)
        MESSAGING_BATCH_DELAY_SECONDS: Pause between bulk batches (default: 1.0s)
        MESSAGING_SWEEP_INTERVAL_SECONDS: Interval of the deferred queue sweep (default: 60s)
        MESSAGING_DEFERRAL_SECONDS: Delay used when a rate-limited recipient has
            no quiet hours configured (default: 60s)
        MESSAGING_TRACKING_RETENTION_SECONDS: How long delivery results are
            kept for statistics (default: 604800s = 1 week)
        MESSAGING_CHANNEL_TIMEOUT_SECONDS: HTTP timeout for a single channel attempt (default: 10s)
        MESSAGING_WHATSAPP_HOURLY_LIMIT: WhatsApp sends per recipient per hour (default: 20)
        MESSAGING_SMS_HOURLY_LIMIT: SMS sends per recipient per hour (default: 10)
        MESSAGING_EMAIL_HOURLY_LIMIT: Emails per recipient per hour (default: 50)
        MESSAGING_APP_NAME: Product name used in message bodies
        MESSAGING_APP_URL: Base URL used for links in message bodies

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        batch_size = settings.messaging.batch_size
        interval = settings.messaging.sweep_interval_seconds
        ```
    """

    batch_size: int = Field(
        default=10,
        alias="MESSAGING_BATCH_SIZE",
        ge=1,
        description="Number of requests dispatched concurrently per bulk batch",
    )
    batch_delay_seconds: float = Field(
        default=1.0,
        alias="MESSAGING_BATCH_DELAY_SECONDS",
        ge=0,
        description="Pause between bulk batches (seconds)",
    )
    sweep_interval_seconds: int = Field(
        default=60,
        alias="MESSAGING_SWEEP_INTERVAL_SECONDS",
        ge=1,
        description="Interval between deferred queue sweeps (seconds)",
    )
    deferral_seconds: int = Field(
        default=60,
        alias="MESSAGING_DEFERRAL_SECONDS",
        ge=1,
        description="Deferral applied when no quiet hours window is configured",
    )
    tracking_retention_seconds: int = Field(
        default=7 * 24 * 3600,
        alias="MESSAGING_TRACKING_RETENTION_SECONDS",
        ge=3600,
        description="Retention of delivery results for statistics (seconds)",
    )
    channel_timeout_seconds: float = Field(
        default=10.0,
        alias="MESSAGING_CHANNEL_TIMEOUT_SECONDS",
        gt=0,
        description="HTTP timeout for a single channel attempt (seconds)",
    )
    whatsapp_hourly_limit: int = Field(
        default=20,
        alias="MESSAGING_WHATSAPP_HOURLY_LIMIT",
        ge=1,
        description="WhatsApp sends allowed per recipient per hour",
    )
    sms_hourly_limit: int = Field(
        default=10,
        alias="MESSAGING_SMS_HOURLY_LIMIT",
        ge=1,
        description="SMS sends allowed per recipient per hour",
    )
    email_hourly_limit: int = Field(
        default=50,
        alias="MESSAGING_EMAIL_HOURLY_LIMIT",
        ge=1,
        description="Emails allowed per recipient per hour",
    )
    app_name: str = Field(default="ChoreMinder", alias="MESSAGING_APP_NAME")
    app_url: str = Field(
        default="http://localhost:3000", alias="MESSAGING_APP_URL"
    )
