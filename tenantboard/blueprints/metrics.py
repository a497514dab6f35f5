"""
Prometheus metrics for the tenant board API.

Request traffic is labelled by blueprint so per-area load (auth, tenants,
users, projects, tasks) is visible without one series per endpoint.
Tenant-level counters track quota rejections, authentication failures and
audit entries that could not be written.
"""
import os
import time

from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share samples through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = REGISTRY

http_requests_total = Counter(
    'http_requests_total',
    'HTTP requests by API area and status class',
    ['area', 'method', 'status_class'],
    registry=_metric_registry,
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds by API area',
    ['area'],
    registry=_metric_registry,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

quota_rejections_total = Counter(
    'tenant_quota_rejections_total',
    'Creations refused because the tenant reached its plan limit',
    ['resource'],
    registry=_metric_registry,
)

auth_failures_total = Counter(
    'auth_failures_total',
    'Rejected logins and bearer tokens by error code',
    ['code'],
    registry=_metric_registry,
)

audit_write_failures_total = Counter(
    'audit_write_failures_total',
    'Audit log entries that failed to persist',
    registry=_metric_registry,
)


def request_area():
    """Blueprint name of the current request, 'unmatched' for 404s."""
    return request.blueprint or 'unmatched'


def setup_metrics_instrumentation(app):
    """Register before/after request hooks that feed the HTTP metrics."""

    @app.before_request
    def start_request_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def record_request_metrics(response):
        started = g.pop('request_started_at', None)
        if started is None:
            return response
        try:
            area = request_area()
            http_request_duration_seconds.labels(area=area).observe(time.perf_counter() - started)
            http_requests_total.labels(
                area=area,
                method=request.method,
                status_class=f"{response.status_code // 100}xx",
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    # Not authenticated; restrict by network rules in production
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
