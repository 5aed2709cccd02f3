"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications.service import NotificationService


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process.

        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    All callers share the same rate limiters, deferred queues and delivery
    statistics. The background sweep is not started here; call ``start()``
    once at application startup and ``shutdown()`` on exit.

    Returns:
        NotificationService: Cached service wired with the default channels.

    Usage:
        service = get_notification_service()
        result = service.submit(request)
    """
    return NotificationService(settings=get_settings())
