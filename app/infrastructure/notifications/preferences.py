"""Recipient preference resolution.

Pure functions: no I/O, no hidden state. The same preferences always
resolve to the same channel order.
"""

from typing import List, Optional

from infrastructure.notifications.models import (
    ChannelName,
    CommunicationPreferences,
    NotificationKind,
    Recipient,
)

DEFAULT_PREFERENCES = CommunicationPreferences()


def resolve_preferences(
    recipient: Recipient,
    defaults: CommunicationPreferences = DEFAULT_PREFERENCES,
) -> CommunicationPreferences:
    """Return the recipient's stored preferences, or the defaults."""
    return recipient.preferences or defaults


def resolve_channel_order(
    preferences: CommunicationPreferences,
    forced_channel: Optional[ChannelName] = None,
) -> List[ChannelName]:
    """Compute the ordered fallback chain for one notification.

    An explicit override always wins and yields a single-element chain.
    Otherwise the chain is the primary channel followed by the fallbacks,
    keeping the first occurrence of any channel listed twice.

    Args:
        preferences: Recipient communication preferences
        forced_channel: Optional channel override from the request options

    Returns:
        Ordered, de-duplicated list of channels to attempt

    Example:
        >>> prefs = CommunicationPreferences(
        ...     primary_channel="sms", fallback_channels=["email", "sms"]
        ... )
        >>> resolve_channel_order(prefs)
        [<ChannelName.SMS: 'sms'>, <ChannelName.EMAIL: 'email'>]
    """
    if forced_channel is not None:
        return [forced_channel]

    order = [preferences.primary_channel, *preferences.fallback_channels]
    return list(dict.fromkeys(order))


def is_kind_enabled(
    preferences: CommunicationPreferences, kind: NotificationKind
) -> bool:
    """Check the recipient's opt-in flag for a notification kind.

    Kinds missing from the mapping are treated as enabled.
    """
    return preferences.enabled_notifications.get(kind, True)
