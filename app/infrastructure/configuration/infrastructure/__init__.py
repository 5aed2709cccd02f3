"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.messaging import MessagingSettings

__all__ = [
    "MessagingSettings",
]
