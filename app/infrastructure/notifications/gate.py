"""Delivery gate: quiet hours, per-recipient rate limiting and channel throttles.

Decides whether a notification may be attempted now or has to be deferred,
and computes when a deferred notification becomes eligible again.

Rate-limit accounting is serialized per recipient: every read-modify-write
of one recipient's counters happens under that recipient's lock, so two
concurrent sends to the same person never lose an increment and never both
slip under the limit. Different recipients use different locks and never
contend.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Hashable, Optional, Tuple

import pytz
import structlog

from infrastructure.notifications.models import (
    ChannelName,
    CommunicationPreferences,
    NotificationPriority,
    QuietHours,
    Recipient,
    utc_now,
)
from infrastructure.notifications.preferences import (
    DEFAULT_PREFERENCES,
    resolve_preferences,
)

logger = structlog.get_logger()

RATE_LIMIT_WINDOW = timedelta(hours=1)

# Sends per recipient and channel within one window
DEFAULT_CHANNEL_LIMITS: Dict[ChannelName, int] = {
    ChannelName.WHATSAPP: 20,
    ChannelName.SMS: 10,
    ChannelName.EMAIL: 50,
}
DEFAULT_CHANNEL_LIMIT = 10


@dataclass
class RateLimiterState:
    """Rolling-window send counter for one recipient.

    Attributes:
        count: Sends charged in the current window
        reset_at: End of the current window
    """

    count: int
    reset_at: datetime

    def expired(self, now: datetime) -> bool:
        return now >= self.reset_at


def is_within_window(quiet_hours: QuietHours, local_time) -> bool:
    """Check a time-of-day against a quiet hours window.

    A window with ``start > end`` wraps midnight. ``start == end`` is an
    empty window.
    """
    start, end = quiet_hours.start, quiet_hours.end
    if start <= end:
        return start <= local_time < end
    return local_time >= start or local_time < end


def _current(
    store: Dict[Hashable, RateLimiterState], key: Hashable, now: datetime
) -> Optional[RateLimiterState]:
    limiter = store.get(key)
    if limiter is not None and limiter.expired(now):
        del store[key]
        return None
    return limiter


def _charge(
    store: Dict[Hashable, RateLimiterState], key: Hashable, now: datetime
) -> RateLimiterState:
    limiter = _current(store, key, now)
    if limiter is None:
        limiter = store[key] = RateLimiterState(count=1, reset_at=now + RATE_LIMIT_WINDOW)
    else:
        limiter.count += 1
    return RateLimiterState(count=limiter.count, reset_at=limiter.reset_at)


class DeliveryGate:
    """Quiet hours, rate limit and channel throttle gate.

    Attributes:
        clock: Callable returning the current aware datetime
        default_preferences: Preferences used for recipients without any
        deferral: Delay used when quiet hours are disabled
        channel_limits: Hourly sends allowed per recipient on each channel

    Example:
        gate = DeliveryGate()

        if gate.try_acquire(recipient, NotificationPriority.LOW):
            ...
        else:
            send_at = gate.compute_next_available_time(recipient)
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        default_preferences: CommunicationPreferences = DEFAULT_PREFERENCES,
        deferral_seconds: int = 60,
        channel_limits: Optional[Dict[ChannelName, int]] = None,
    ):
        self.clock = clock or utc_now
        self.default_preferences = default_preferences
        self.deferral = timedelta(seconds=deferral_seconds)
        self.channel_limits = dict(DEFAULT_CHANNEL_LIMITS)
        if channel_limits:
            self.channel_limits.update(channel_limits)
        self._limiters: Dict[str, RateLimiterState] = {}
        self._throttles: Dict[Tuple[str, ChannelName], RateLimiterState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _preferences(self, recipient: Recipient) -> CommunicationPreferences:
        return resolve_preferences(recipient, self.default_preferences)

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    def should_send_now(
        self,
        recipient: Recipient,
        priority: NotificationPriority,
        bypass_quiet_hours: bool = False,
        now: Optional[datetime] = None,
    ) -> bool:
        """Decide whether a notification may be attempted immediately.

        Urgent notifications and explicit bypasses always go through, and
        skip the rate limiter as well. Otherwise a notification is held back
        while the recipient is inside quiet hours, or once the recipient's
        rolling-hour counter has reached its maximum.

        This is a read-only check. Use ``try_acquire`` to admit a
        notification and charge it in one step.

        Args:
            recipient: Notification recipient
            priority: Notification priority
            bypass_quiet_hours: Explicit override from the request options
            now: Reference time, defaults to the clock

        Returns:
            True if the notification may be sent now
        """
        if priority == NotificationPriority.URGENT or bypass_quiet_hours:
            return True

        now = now or self.clock()
        if self.is_within_quiet_hours(recipient, now):
            logger.debug("gate_quiet_hours", user_id=recipient.user_id)
            return False

        if self.is_rate_limited(recipient, now):
            logger.debug("gate_rate_limited", user_id=recipient.user_id)
            return False

        return True

    def try_acquire(
        self,
        recipient: Recipient,
        priority: NotificationPriority,
        bypass_quiet_hours: bool = False,
        now: Optional[datetime] = None,
    ) -> bool:
        """Admit a notification and charge the rate limiter atomically.

        Same decision as ``should_send_now``, but the limit check and the
        charge happen under the recipient's lock, so concurrent submissions
        for one recipient can never exceed ``max_messages_per_hour``. Urgent
        and bypassing notifications are always admitted and still charged.

        Returns:
            True if the notification was admitted and charged
        """
        now = now or self.clock()
        if priority == NotificationPriority.URGENT or bypass_quiet_hours:
            self.record_send(recipient, now)
            return True

        if self.is_within_quiet_hours(recipient, now):
            logger.debug("gate_quiet_hours", user_id=recipient.user_id)
            return False

        limit = self._preferences(recipient).max_messages_per_hour
        with self._lock_for(recipient.user_id):
            limiter = _current(self._limiters, recipient.user_id, now)
            if limiter is not None and limiter.count >= limit:
                logger.debug("gate_rate_limited", user_id=recipient.user_id)
                return False
            _charge(self._limiters, recipient.user_id, now)
        return True

    def is_within_quiet_hours(
        self, recipient: Recipient, now: Optional[datetime] = None
    ) -> bool:
        """Check whether the recipient is currently inside quiet hours.

        The current instant is converted to the recipient's timezone before
        comparing against the window.
        """
        quiet_hours = self._preferences(recipient).quiet_hours
        if not quiet_hours.enabled:
            return False

        now = now or self.clock()
        local_now = now.astimezone(pytz.timezone(quiet_hours.timezone))
        return is_within_window(quiet_hours, local_now.time())

    def is_rate_limited(
        self, recipient: Recipient, now: Optional[datetime] = None
    ) -> bool:
        """Check whether the recipient reached the rolling-hour maximum.

        Expired windows are dropped on the way.
        """
        now = now or self.clock()
        limit = self._preferences(recipient).max_messages_per_hour
        with self._lock_for(recipient.user_id):
            limiter = _current(self._limiters, recipient.user_id, now)
            return limiter is not None and limiter.count >= limit

    def record_send(
        self, recipient: Recipient, now: Optional[datetime] = None
    ) -> RateLimiterState:
        """Charge one send to the recipient's rate limiter.

        Opens a new one-hour window when none exists or the previous one
        expired.

        Returns:
            A copy of the recipient's limiter state after the charge
        """
        now = now or self.clock()
        with self._lock_for(recipient.user_id):
            return _charge(self._limiters, recipient.user_id, now)

    def channel_limit(self, channel: ChannelName) -> int:
        return self.channel_limits.get(channel, DEFAULT_CHANNEL_LIMIT)

    def is_channel_throttled(
        self, user_id: str, channel: ChannelName, now: Optional[datetime] = None
    ) -> bool:
        """Check whether one recipient used up a channel's hourly allowance."""
        now = now or self.clock()
        with self._lock_for(user_id):
            throttle = _current(self._throttles, (user_id, channel), now)
            return throttle is not None and throttle.count >= self.channel_limit(channel)

    def try_acquire_channel(
        self, user_id: str, channel: ChannelName, now: Optional[datetime] = None
    ) -> bool:
        """Charge one send on a channel unless the recipient is throttled there.

        Returns:
            True if the send was charged, False if the channel is throttled
        """
        now = now or self.clock()
        key = (user_id, channel)
        with self._lock_for(user_id):
            throttle = _current(self._throttles, key, now)
            if throttle is not None and throttle.count >= self.channel_limit(channel):
                return False
            _charge(self._throttles, key, now)
        return True

    def compute_next_available_time(
        self, recipient: Recipient, now: Optional[datetime] = None
    ) -> datetime:
        """Compute when a held-back notification should be retried.

        With quiet hours disabled this is a short deferral from now.
        Otherwise it is the next occurrence of the window's end time in the
        recipient's timezone: today if still ahead, else tomorrow.

        Returns:
            Aware datetime in UTC
        """
        now = now or self.clock()
        quiet_hours = self._preferences(recipient).quiet_hours
        if not quiet_hours.enabled:
            return now + self.deferral

        tz = pytz.timezone(quiet_hours.timezone)
        local_now = now.astimezone(tz)
        candidate_date = local_now.date()
        candidate = tz.localize(datetime.combine(candidate_date, quiet_hours.end))
        if candidate <= local_now:
            candidate = tz.localize(
                datetime.combine(candidate_date + timedelta(days=1), quiet_hours.end)
            )
        return candidate.astimezone(pytz.utc)

    def active_limiters(self) -> int:
        """Number of recipients with an unexpired rate limit window."""
        now = self.clock()
        with self._registry_lock:
            limiters = list(self._limiters.values())
        return sum(1 for limiter in limiters if not limiter.expired(now))
