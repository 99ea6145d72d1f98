"""
Prometheus metrics for the booking platform.

Service timings come from the @measure_operation decorator on BaseService;
auth-specific counters are incremented by the login and OTP services.
"""

import logging

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "drivingschool_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

service_operations_total = Counter(
    "drivingschool_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

login_attempts_total = Counter(
    "drivingschool_login_attempts_total",
    "Total login attempts by result",
    ["result"],  # success | invalid_credentials | rate_limited
    registry=REGISTRY,
)

otp_events_total = Counter(
    "drivingschool_otp_events_total",
    "One-time code lifecycle events",
    ["purpose", "event"],  # issued | checked | verified | rejected | expired
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers don't reach for individual collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(duration)
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

    @staticmethod
    def record_login_result(result: str) -> None:
        login_attempts_total.labels(result=result).inc()

    @staticmethod
    def record_otp_event(purpose: str, event: str) -> None:
        otp_events_total.labels(purpose=purpose, event=event).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
