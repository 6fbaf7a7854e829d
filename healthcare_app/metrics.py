from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GC_COLLECTOR,
    Histogram,
    PLATFORM_COLLECTOR,
    PROCESS_COLLECTOR,
    generate_latest,
)

# Dedicated registry so /metrics only exposes what this app registers
registry = CollectorRegistry()
for collector in (PROCESS_COLLECTOR, PLATFORM_COLLECTOR, GC_COLLECTOR):
    registry.register(collector)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    labelnames=["method", "route", "code"],
    buckets=[0.1, 0.3, 0.5, 0.7, 1, 3, 5, 7, 10],
    registry=registry,
)

http_request_total = Counter(
    "http_request_total",
    "Total number of HTTP requests",
    labelnames=["method", "route", "code"],
    registry=registry,
)


def route_label(path: str) -> str:
    """Collapse a path to its first two segments: /api/appointments/<id> -> /api/appointments."""
    return "/".join(path.split("/")[:3])


def observe_request(method: str, path: str, status_code: int, duration: float) -> None:
    route = route_label(path)
    http_request_duration_seconds.labels(method, route, str(status_code)).observe(duration)
    http_request_total.labels(method, route, str(status_code)).inc()


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(registry), CONTENT_TYPE_LATEST
