"""Bulk notification dispatch in fixed-size concurrent batches.

Every request in a batch is submitted concurrently; the next batch starts
only after the current one has fully settled, with a pause in between to
stay under provider rate limits. One failing request never affects the
others.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from datetime import datetime
from typing import Callable, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationRequest,
    utc_now,
)

logger = get_module_logger()

UNKNOWN_ERROR = "Unknown error"


class BulkDispatcher:
    """Sends many requests through a submit callable.

    Attributes:
        submit: Callable delivering or deferring one request
        batch_size: Requests processed concurrently per batch
        batch_delay_seconds: Pause between consecutive batches
        clock: Timestamps results of failed submissions
    """

    def __init__(
        self,
        submit: Callable[[NotificationRequest], DeliveryResult],
        batch_size: int = 10,
        batch_delay_seconds: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.submit = submit
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.sleep = sleep or time.sleep
        self.clock = clock or utc_now
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = Lock()
        self._shutdown = False

    def _get_or_create_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._shutdown:
                raise RuntimeError("bulk dispatcher has been shut down")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.batch_size,
                    thread_name_prefix="notification-bulk",
                )
                logger.debug("created_bulk_executor", max_workers=self.batch_size)
            return self._executor

    def send_bulk(self, requests: List[NotificationRequest]) -> List[DeliveryResult]:
        """Submit every request and return one result per request.

        Results keep the order of ``requests``. A request whose submission
        raises gets a failed result carrying the exception message.

        Args:
            requests: Requests to send

        Returns:
            List of DeliveryResult, same length and order as the input
        """
        if not requests:
            return []

        executor = self._get_or_create_executor()
        results: List[DeliveryResult] = []
        batches = [
            requests[i : i + self.batch_size]
            for i in range(0, len(requests), self.batch_size)
        ]

        for number, batch in enumerate(batches, start=1):
            futures = [executor.submit(self.submit, request) for request in batch]
            batch_results = []
            for request, future in zip(batch, futures):
                try:
                    batch_results.append(future.result())
                except Exception as e:
                    logger.error(
                        "bulk_request_failed",
                        user_id=request.user_id,
                        request_id=request.request_id,
                        error=str(e),
                    )
                    batch_results.append(
                        DeliveryResult(
                            success=False,
                            error=str(e) or UNKNOWN_ERROR,
                            delivered_at=self.clock(),
                            request_id=request.request_id,
                        )
                    )
            results.extend(batch_results)

            logger.info(
                "bulk_batch_complete",
                batch=number,
                batches=len(batches),
                size=len(batch),
                successful=sum(1 for r in batch_results if r.success),
            )
            if number < len(batches) and self.batch_delay_seconds > 0:
                self.sleep(self.batch_delay_seconds)

        return results

    def shutdown(self, wait: bool = True):
        """Shut down the worker pool. Idempotent."""
        with self._executor_lock:
            self._shutdown = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.debug("bulk_executor_shutdown")
