"""Prometheus metrics for the phonebook service."""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from starlette.types import ASGIApp, Message, Receive, Scope, Send

BUCKETS = (0.1, 0.5, 1, 2, 5)
METRICS_PATH = "/metrics"


class Metrics:
    """
    Process-wide instruments, bound to their own registry.
    Built once by the app factory and shared through app.state.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None, *, namespace: str = "phonebook", default_collectors: bool = True):
        self.registry = registry if registry is not None else CollectorRegistry()
        if default_collectors:
            ProcessCollector(namespace=namespace, registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "route", "status_code"],
            buckets=BUCKETS,
            registry=self.registry,
        )
        self.error_rate = Counter(
            "http_request_errors_total",
            "Total number of HTTP request errors",
            ["method", "route", "status_code"],
            registry=self.registry,
        )
        self.database_operation_duration = Histogram(
            "database_operation_duration_seconds",
            "Duration of database operations in seconds",
            ["operation"],
            buckets=BUCKETS,
            registry=self.registry,
        )

    def time_db(self, operation: str):
        """Context manager timing one persistence interaction under `operation`."""
        return self.database_operation_duration.labels(operation=operation).time()

    def observe_request(self, method: str, route: str, status_code: int, seconds: float) -> None:
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.http_request_duration.labels(**labels).observe(seconds)
        if status_code >= 400:
            self.error_rate.labels(**labels).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)


class HTTPMetricsMiddleware:
    """
    Times every request (except the scrape endpoint) until its last body chunk is sent.
    Observes exactly once per request; a request that dies before a response starts counts as 500.
    """

    def __init__(self, app: ASGIApp, metrics: Metrics, skip_paths: tuple[str, ...] = (METRICS_PATH,)):
        self.app = app
        self.metrics = metrics
        self.skip_paths = skip_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # Avoid self-scrape noise
        if scope["type"] != "http" or scope["path"] in self.skip_paths:
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500
        finished = False

        def finish() -> None:
            nonlocal finished
            if finished:
                return
            finished = True
            # "route" is set on the scope by the router once a route matches
            route_obj = scope.get("route")
            route = getattr(route_obj, "path", None) or scope["path"]
            dur_s = max(0.0, time.perf_counter() - start)
            self.metrics.observe_request(scope["method"], route, status_code, dur_s)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = int(message["status"])
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                finish()

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            finish()
