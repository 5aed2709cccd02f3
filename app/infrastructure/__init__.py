"""Infrastructure modules for the ChoreMinder notification engine.

Centralized infrastructure components:
- configuration: Settings management (settings, MessagingSettings)
- logging: Structured logging (get_module_logger, bind_request_context)
- notifications: Multi-channel notification delivery engine
- services: Application-scoped providers (get_settings, get_notification_service)
"""

# Configuration
from infrastructure.configuration import settings

# Observability
from infrastructure.logging import get_module_logger

# Dependency Injection Services
from infrastructure.services import (
    get_settings,
    get_notification_service,
)

__all__ = [
    # Configuration
    "settings",
    # Observability
    "get_module_logger",
    # Dependency Injection Services
    "get_settings",
    "get_notification_service",
]
