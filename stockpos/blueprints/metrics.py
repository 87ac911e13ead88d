"""
Prometheus metrics for the sales API.

/metrics exposes per-endpoint request counts and latency plus the sale
counters. Restrict it to the monitoring network in production.
"""
import os
import time

from flask import Blueprint, Response, g, request
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client import multiprocess

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share metrics through PROMETHEUS_MULTIPROC_DIR
if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = REGISTRY

http_requests_total = Counter(
    'http_requests_total',
    'HTTP requests by endpoint and status',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

sales_created_total = Counter(
    'sales_created_total',
    'Sales committed',
    ['sale_type'],
    registry=_metric_registry
)

sales_rejected_total = Counter(
    'sales_rejected_total',
    'Sale requests rejected before commit',
    ['reason'],
    registry=_metric_registry
)


def setup_metrics_instrumentation(app):
    """Time every request and count it by endpoint and status."""

    @app.before_request
    def start_request_timer():
        g._request_started_at = time.time()

    @app.after_request
    def record_request_metrics(response):
        started_at = g.pop('_request_started_at', None)
        if started_at is None:
            return response

        endpoint = request.endpoint or 'unknown'
        try:
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.time() - started_at)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=response.status_code
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus text exposition."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
