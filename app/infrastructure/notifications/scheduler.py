"""Deferred notification queue and periodic sweep.

Requests that may not be sent yet (future ``schedule_at``, quiet hours,
rate limit) wait in per-recipient in-memory queues. A sweep moves every due
entry back through ``submit`` so the gate decides again with fresh state.

The sweep runs on a private ``schedule.Scheduler`` driven by a daemon
thread. Queues live only in memory and are lost on restart.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import schedule
import structlog

from infrastructure.logging import bind_request_context
from infrastructure.notifications.executor import DeliveryExecutor
from infrastructure.notifications.gate import DeliveryGate
from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationRequest,
    utc_now,
)
from infrastructure.notifications.preferences import (
    is_kind_enabled,
    resolve_preferences,
)

logger = structlog.get_logger()

KIND_DISABLED = "notification kind disabled"


@dataclass(frozen=True)
class ScheduledEntry:
    """A deferred request and the time it becomes due."""

    request: NotificationRequest
    due_at: datetime

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now


class NotificationScheduler:
    """Decides now-vs-later for each request and owns the deferred queues.

    Attributes:
        gate: Quiet hours and rate limit gate
        executor: Executor used for immediate delivery
        sweep_interval_seconds: Period of the background sweep

    Example:
        scheduler = NotificationScheduler(gate, executor)
        scheduler.start()
        result = scheduler.submit(request)
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        gate: DeliveryGate,
        executor: DeliveryExecutor,
        clock: Optional[Callable[[], datetime]] = None,
        sweep_interval_seconds: int = 60,
    ):
        self.gate = gate
        self.executor = executor
        self.clock = clock or utc_now
        self.sweep_interval_seconds = sweep_interval_seconds
        self._queues: Dict[str, List[ScheduledEntry]] = {}
        self._lock = threading.Lock()
        self._jobs = schedule.Scheduler()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def submit(
        self, request: NotificationRequest, now: Optional[datetime] = None
    ) -> DeliveryResult:
        """Deliver a request now or enqueue it for later.

        Admission goes through ``DeliveryGate.try_acquire``, which checks and
        charges the recipient's rate limit in one step.

        Args:
            request: Notification request
            now: Reference time for the gate, defaults to the clock

        Returns:
            The executor's result for immediate sends. For deferred requests
            a successful result with no attempts and ``scheduled_at`` set.
            For kinds the recipient disabled, a skipped result.
        """
        preferences = resolve_preferences(
            request.recipient, self.gate.default_preferences
        )
        if not is_kind_enabled(preferences, request.kind):
            logger.info(
                "notification_skipped",
                user_id=request.user_id,
                request_id=request.request_id,
                kind=request.kind.value,
            )
            return DeliveryResult(
                success=False,
                error=KIND_DISABLED,
                skipped=True,
                delivered_at=self.clock(),
                request_id=request.request_id,
            )

        now = now or self.clock()
        schedule_at = request.options.schedule_at
        if schedule_at is not None and schedule_at > now:
            return self._enqueue(request, schedule_at, reason="scheduled")

        if not self.gate.try_acquire(
            request.recipient,
            request.priority,
            request.options.bypass_quiet_hours,
            now=now,
        ):
            due_at = self.gate.compute_next_available_time(request.recipient, now)
            return self._enqueue(
                request.with_schedule_at(due_at), due_at, reason="gated"
            )

        return self.executor.attempt_delivery(request, rate_limit_charged=True)

    def _enqueue(
        self, request: NotificationRequest, due_at: datetime, reason: str
    ) -> DeliveryResult:
        with self._lock:
            self._queues.setdefault(request.user_id, []).append(
                ScheduledEntry(request=request, due_at=due_at)
            )
        logger.info(
            "notification_deferred",
            user_id=request.user_id,
            request_id=request.request_id,
            kind=request.kind.value,
            scheduled_at=due_at.isoformat(),
            reason=reason,
        )
        return DeliveryResult(
            success=True,
            delivered_at=self.clock(),
            scheduled_at=due_at,
            request_id=request.request_id,
        )

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Resubmit every queued request that is due.

        Due entries are removed from the queues before any of them is
        resubmitted, so a second sweep at the same instant finds nothing.
        A resubmitted request that is still gated is enqueued again. The
        gate judges resubmissions at the same reference time.

        Args:
            now: Reference time, defaults to the clock

        Returns:
            Number of entries processed
        """
        now = now or self.clock()
        due: List[ScheduledEntry] = []
        with self._lock:
            for user_id in list(self._queues):
                pending = []
                for entry in self._queues[user_id]:
                    (due if entry.is_due(now) else pending).append(entry)
                if pending:
                    self._queues[user_id] = pending
                else:
                    del self._queues[user_id]

        for entry in due:
            try:
                with bind_request_context(
                    request_id=entry.request.request_id,
                    user_id=entry.request.user_id,
                ):
                    self.submit(entry.request.with_schedule_at(None), now)
            except Exception as e:
                logger.error(
                    "scheduled_delivery_failed",
                    user_id=entry.request.user_id,
                    request_id=entry.request.request_id,
                    error=str(e),
                )

        if due:
            logger.info("scheduled_sweep_complete", processed=len(due))
        return len(due)

    def cancel(self, request_id: str) -> bool:
        """Remove a pending request from the queues.

        Returns:
            True if the request was queued and has been removed
        """
        with self._lock:
            for user_id, entries in self._queues.items():
                for entry in entries:
                    if entry.request.request_id == request_id:
                        entries.remove(entry)
                        if not entries:
                            del self._queues[user_id]
                        logger.info(
                            "scheduled_notification_cancelled",
                            user_id=user_id,
                            request_id=request_id,
                        )
                        return True
        return False

    def queue_size(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._queues.values())

    def pending_for(self, user_id: str) -> List[NotificationRequest]:
        """Requests queued for one recipient, in enqueue order."""
        with self._lock:
            return [entry.request for entry in self._queues.get(user_id, [])]

    def upcoming(
        self, hours: float = 24, now: Optional[datetime] = None
    ) -> List[NotificationRequest]:
        """Queued requests due within the next ``hours``, soonest first.

        Overdue entries that no sweep has picked up yet are included.
        """
        cutoff = (now or self.clock()) + timedelta(hours=hours)
        with self._lock:
            entries = [
                entry
                for queue in self._queues.values()
                for entry in queue
                if entry.due_at <= cutoff
            ]
        entries.sort(key=lambda entry: entry.due_at)
        return [entry.request for entry in entries]

    def _run_sweep(self):
        try:
            self.sweep()
        except Exception as e:
            logger.error("scheduled_sweep_failed", error=str(e))

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Run the sweep every ``sweep_interval_seconds`` on a daemon thread.

        Missed runs are not caught up: a sweep that falls behind runs once.
        """
        if self.is_running:
            return

        self._jobs.every(self.sweep_interval_seconds).seconds.do(self._run_sweep)
        stop_event = threading.Event()
        poll_interval = min(1, self.sweep_interval_seconds)

        def run():
            while not stop_event.is_set():
                self._jobs.run_pending()
                stop_event.wait(poll_interval)

        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=run, name="notification-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(
            "scheduler_started", sweep_interval_seconds=self.sweep_interval_seconds
        )

    def stop(self, timeout: Optional[float] = 5.0):
        """Stop the background sweep and wait for the thread to exit."""
        if self._stop_event is None:
            return
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._jobs.clear()
        self._stop_event = None
        self._thread = None
        logger.info("scheduler_stopped", queue_size=self.queue_size())
