"""
Core metrics collection for OPR Digital using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.config import settings
from core.logging import get_logger

# Create a global registry for the application
REGISTRY = CollectorRegistry()

# Application info
app_info = Info("opr_app", "OPR Digital application information", registry=REGISTRY)

# Request metrics
request_count = Counter(
    "opr_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "opr_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Report lifecycle metrics
reports_saved = Counter(
    "opr_reports_saved_total",
    "Total report saves",
    ["status"],
    registry=REGISTRY,
)

distributions = Counter(
    "opr_distributions_total",
    "Distribution operations by channel and outcome",
    ["channel", "outcome"],
    registry=REGISTRY,
)

render_duration = Histogram(
    "opr_render_duration_seconds",
    "Time taken to render a report artifact",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)

gateway_duration = Histogram(
    "opr_gateway_request_duration_seconds",
    "Remote sync gateway call duration",
    ["outcome"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=REGISTRY,
)

# Error metrics
error_count = Counter(
    "opr_errors_total",
    "Total number of errors",
    ["error_type", "domain"],
    registry=REGISTRY,
)


class MetricsCollector:
    """Helper class for collecting metrics"""

    def __init__(self):
        self.logger = get_logger("metrics")

        app_info.info({"version": settings.app_version, "environment": settings.environment})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        """Track HTTP request metrics"""
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_report_saved(self, status: str):
        reports_saved.labels(status=status).inc()

    def track_distribution(self, channel: str, outcome: str):
        distributions.labels(channel=channel, outcome=outcome).inc()

    def track_render(self, duration: float):
        render_duration.observe(duration)

    def track_gateway_call(self, duration: float, success: bool):
        gateway_duration.labels(outcome="success" if success else "failed").observe(duration)

    def track_error(self, error_type: str, domain: str):
        error_count.labels(error_type=error_type, domain=domain).inc()

    def get_metrics(self) -> bytes:
        """Get current metrics in Prometheus format"""
        return generate_latest(REGISTRY)


# Global metrics collector instance
metrics = MetricsCollector()


def get_metrics_response() -> tuple:
    """Get metrics response for Prometheus endpoint"""
    return metrics.get_metrics(), CONTENT_TYPE_LATEST
