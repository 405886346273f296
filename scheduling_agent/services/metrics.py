"""CloudWatch metrics for scheduling backend calls, with background batching.

Every remote operation (availability, book, reschedule, cancel) is wrapped in
``metrics.track(...)`` by the scheduling clients, which records one request
count, one latency sample and, on failure, one error count keyed by the
exception type.

* Data points are buffered in memory under a lock.
* When ``METRICS_ENABLED=true`` a daemon thread pushes the buffer to
  CloudWatch every ``FLUSH_INTERVAL_SECONDS``; otherwise flushing just drops
  the buffer after logging it at DEBUG.

Usage
-----
>>> from scheduling_agent.services.metrics import metrics
>>> async with metrics.track("book"):
...     await client.book(...)
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "SchedulingAgent"
SERVICE_NAME = "scheduling_api"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


class MetricsClient:
    """Batched CloudWatch publisher for remote scheduling calls."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Recording ─────────────────────────────────────────────────────

    def record(
        self,
        operation: str,
        *,
        latency_ms: float,
        error_type: str | None = None,
    ) -> None:
        """Buffer the data points for one finished call."""
        now = datetime.now(UTC)
        outcome = "failure" if error_type else "success"
        dims = [
            {"Name": "Service", "Value": SERVICE_NAME},
            {"Name": "Operation", "Value": operation},
        ]

        points = [
            {
                "MetricName": "SchedulingAPI/RequestCount",
                "Dimensions": dims + [{"Name": "Status", "Value": outcome}],
                "Timestamp": now,
                "Value": 1,
                "Unit": "Count",
            },
            {
                "MetricName": "SchedulingAPI/Latency",
                "Dimensions": dims,
                "Timestamp": now,
                "Value": latency_ms,
                "Unit": "Milliseconds",
            },
        ]
        if error_type:
            points.append(
                {
                    "MetricName": "SchedulingAPI/ErrorCount",
                    "Dimensions": dims + [{"Name": "ErrorType", "Value": error_type}],
                    "Timestamp": now,
                    "Value": 1,
                    "Unit": "Count",
                }
            )

        with self._lock:
            self._buffer.extend(points)
        logger.debug(
            "Metric: %s %s latency=%.1fms error=%s",
            operation, outcome, latency_ms, error_type,
        )

    @asynccontextmanager
    async def track(self, operation: str) -> AsyncIterator[None]:
        """Time the enclosed remote call and record its outcome.

        Exceptions are recorded and then re-raised unchanged.
        """
        t0 = time.perf_counter()
        try:
            yield
        except Exception as exc:
            self.record(
                operation,
                latency_ms=(time.perf_counter() - t0) * 1000,
                error_type=type(exc).__name__,
            )
            raise
        self.record(operation, latency_ms=(time.perf_counter() - t0) * 1000)

    # ── Flushing ──────────────────────────────────────────────────────

    def flush(self) -> int:
        """Send buffered metrics to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info(
            "Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS,
        )


# ── Module-level singleton ──────────────────────────────────────────
metrics = MetricsClient()
