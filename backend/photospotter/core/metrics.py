"""
Prometheus Metrics Registry

Provides Prometheus-compatible metrics for:
- HTTP request counts and latencies
- Face ingestion attempts and outcomes
- Face directory call latencies
- Match reconciliation results
"""
import re
import time
import logging
from typing import Optional
from prometheus_client import (
    Counter, Histogram, Gauge, Info,
    CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
)

logger = logging.getLogger(__name__)

# Create a custom registry to avoid conflicts with default registry
REGISTRY = CollectorRegistry()

app_info = Info(
    'app',
    'Application information',
    registry=REGISTRY
)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status_code'],
    registry=REGISTRY
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY
)

# ============================================================================
# Face Ingestion / Directory Metrics
# ============================================================================

face_index_attempts_total = Counter(
    'face_index_attempts_total',
    'Face directory index attempts',
    ['outcome'],
    registry=REGISTRY
)

face_ingestions_total = Counter(
    'face_ingestions_total',
    'Completed face ingestions',
    ['kind', 'status'],
    registry=REGISTRY
)

face_directory_duration_seconds = Histogram(
    'face_directory_duration_seconds',
    'Face directory call duration in seconds',
    ['operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=REGISTRY
)

# ============================================================================
# Match Reconciliation Metrics
# ============================================================================

photo_matches_created_total = Counter(
    'photo_matches_created_total',
    'PhotoMatch rows created by reconciliation',
    registry=REGISTRY
)

match_candidates_skipped_total = Counter(
    'match_candidates_skipped_total',
    'Similarity candidates dropped during reconciliation',
    ['reason'],
    registry=REGISTRY
)

match_lookups_total = Counter(
    'match_lookups_total',
    'Match lookups by entry point and status',
    ['mode', 'status'],
    registry=REGISTRY
)

_start_time: Optional[float] = None

app_uptime_seconds = Gauge(
    'app_uptime_seconds',
    'Application uptime in seconds',
    registry=REGISTRY
)


def init_metrics(version: str = "1.0.0"):
    """
    Initialize metrics with application info.

    Args:
        version: Application version string
    """
    global _start_time
    _start_time = time.time()

    app_info.info({
        'version': version,
        'name': 'PhotoSpotter'
    })

    logger.info("Prometheus metrics initialized", extra={"version": version})


def record_request_metrics(
    method: str,
    path: str,
    status_code: int,
    response_time_seconds: float
):
    """
    Record HTTP request metrics.

    Args:
        method: HTTP method (GET, POST, etc.)
        path: Request path
        status_code: Response status code
        response_time_seconds: Response time in seconds
    """
    normalized_path = _normalize_path(path)

    http_requests_total.labels(
        method=method,
        path=normalized_path,
        status_code=str(status_code)
    ).inc()

    http_request_duration_seconds.labels(
        method=method,
        path=normalized_path
    ).observe(response_time_seconds)


def record_index_attempt(outcome: str):
    """Record one face directory index attempt (success, no_face, error, timeout)."""
    face_index_attempts_total.labels(outcome=outcome).inc()


def record_ingestion(kind: str, status: str):
    """Record a finished ingestion. kind is photo or selfie, status success or failed."""
    face_ingestions_total.labels(kind=kind, status=status).inc()


def record_face_directory_call(operation: str, duration_seconds: float):
    """Record the latency of a face directory call."""
    face_directory_duration_seconds.labels(operation=operation).observe(duration_seconds)


def record_match_created(count: int = 1):
    """Record newly persisted PhotoMatch rows."""
    if count > 0:
        photo_matches_created_total.inc(count)


def record_candidate_skipped(reason: str):
    """
    Record a reconciliation candidate that was dropped.

    Args:
        reason: missing_tag, duplicate, already_matched, photo_missing, other_event
    """
    match_candidates_skipped_total.labels(reason=reason).inc()


def record_match_lookup(mode: str, status: str):
    """Record a match lookup. mode is guest or probe."""
    match_lookups_total.labels(mode=mode, status=status).inc()


def get_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format metrics
    """
    if _start_time:
        app_uptime_seconds.set(time.time() - _start_time)
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


def _normalize_path(path: str) -> str:
    """
    Normalize request path to avoid high cardinality.

    Replaces UUIDs and numeric IDs with placeholders.
    """
    path = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{id}',
        path,
        flags=re.IGNORECASE
    )

    path = re.sub(r'/\d+', '/{id}', path)

    return path
