# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Gauge, Histogram

from authgate.domain.users.entities import PoolStats
from authgate.shared.config import ObservabilityConfig
from authgate.shared.logging import logger

REQUEST_LATENCY = Histogram(
    "authgate_request_latency_seconds",
    "Request latency",
    labelnames=("route",),
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_COUNTER = Counter(
    "authgate_requests_total",
    "Number of processed requests",
    labelnames=("route", "status"),
)
POOL_CONNECTIONS = Gauge(
    "authgate_db_pool_connections",
    "Database pool connections by state",
    labelnames=("state",),
)
ACTIVE_CONNECTIONS = Gauge("authgate_tcp_connections", "Client connections being handled")


class Metrics:
    def __init__(self, config: ObservabilityConfig) -> None:
        self.enabled = config.metrics_enabled

    @contextmanager
    def track_latency(self, route: str, status_getter: Callable[[], str]) -> Iterator[None]:
        if not self.enabled:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            REQUEST_LATENCY.labels(route=route).observe(duration)
            REQUEST_COUNTER.labels(route=route, status=status_getter()).inc()

    @contextmanager
    def track_connection(self) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        ACTIVE_CONNECTIONS.inc()
        try:
            yield
        finally:
            ACTIVE_CONNECTIONS.dec()

    def record_pool_stats(self, stats: PoolStats | None) -> None:
        if stats is None:
            return
        logger.debug(
            f"[DB POOL STATS] total={stats.size} idle={stats.idle} active={stats.active}"
        )
        if not self.enabled:
            return
        POOL_CONNECTIONS.labels(state="total").set(stats.size)
        POOL_CONNECTIONS.labels(state="idle").set(stats.idle)
        POOL_CONNECTIONS.labels(state="active").set(stats.active)


__all__ = [
    "ACTIVE_CONNECTIONS",
    "POOL_CONNECTIONS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "Metrics",
]
