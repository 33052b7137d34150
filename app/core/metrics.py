"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
import time
from contextlib import contextmanager

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache'],
    registry=registry
)

provider_calls = Counter(
    'provider_calls_total',
    'Total provider quote calls',
    ['provider', 'status'],
    registry=registry
)

provider_call_duration = Histogram(
    'provider_call_duration_seconds',
    'Provider quote call duration in seconds',
    ['provider'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    ['client'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


@contextmanager
def track_provider_call(provider_id: str):
    """Observe how long a provider call takes, whatever its outcome"""
    start_time = time.time()
    try:
        yield
    finally:
        provider_call_duration.labels(provider=provider_id).observe(time.time() - start_time)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
