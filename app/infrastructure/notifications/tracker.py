"""In-memory delivery tracking and windowed statistics.

Results are kept for a bounded retention period (one week by default) and
pruned when new results are recorded. Nothing is persisted across restarts.
"""

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Union

import structlog

from infrastructure.notifications.models import (
    ChannelName,
    DeliveryResult,
    DeliveryStats,
    StatsWindow,
    utc_now,
)

logger = structlog.get_logger()

DEFAULT_RETENTION_SECONDS = 7 * 24 * 3600


@dataclass(frozen=True)
class TrackedResult:
    tracking_id: str
    user_id: str
    result: DeliveryResult


class DeliveryTracker:
    """Append-only store of delivery results.

    Example:
        tracker = DeliveryTracker()
        tracking_id = tracker.record(result, user_id="u-1")
        stats = tracker.stats("hour")
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        retention_seconds: int = DEFAULT_RETENTION_SECONDS,
    ):
        self.clock = clock or utc_now
        self.retention = timedelta(seconds=retention_seconds)
        self._results: List[TrackedResult] = []
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def record(self, result: DeliveryResult, user_id: str) -> str:
        """Store one result and return its tracking id.

        Tracking ids have the form ``{user_id}_{epoch_ms}_{seq}``; the
        sequence number keeps ids unique within the same millisecond.
        """
        now = self.clock()
        with self._lock:
            tracking_id = (
                f"{user_id}_{int(now.timestamp() * 1000)}_{next(self._sequence)}"
            )
            self._results.append(TrackedResult(tracking_id, user_id, result))
            pruned = self._prune(now)

        if pruned:
            logger.debug("tracker_pruned", removed=pruned)
        return tracking_id

    def _prune(self, now: datetime) -> int:
        cutoff = now - self.retention
        kept = [t for t in self._results if t.result.delivered_at > cutoff]
        removed = len(self._results) - len(kept)
        if removed:
            self._results = kept
        return removed

    def stats(self, window: Union[StatsWindow, str] = StatsWindow.DAY) -> DeliveryStats:
        """Aggregate the results delivered within the window ending now.

        Args:
            window: "hour", "day" or "week"

        Returns:
            DeliveryStats with per-channel counts for every channel

        Raises:
            ValueError: If the window name is unknown
        """
        window = StatsWindow(window)
        cutoff = self.clock() - timedelta(seconds=window.seconds)
        with self._lock:
            recent = [
                t.result for t in self._results if t.result.delivered_at > cutoff
            ]

        by_channel = {channel: 0 for channel in ChannelName}
        for result in recent:
            if result.channel is not None:
                by_channel[result.channel] += 1

        successful = sum(1 for r in recent if r.success)
        total = len(recent)
        avg_attempts = (
            sum(len(r.attempts) for r in recent) / total if total else 0.0
        )
        return DeliveryStats(
            window=window,
            total=total,
            successful=successful,
            failed=total - successful,
            by_channel=by_channel,
            avg_attempts=avg_attempts,
        )

    def results_for(self, user_id: str) -> List[DeliveryResult]:
        """Tracked results of one recipient, oldest first."""
        with self._lock:
            return [t.result for t in self._results if t.user_id == user_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
