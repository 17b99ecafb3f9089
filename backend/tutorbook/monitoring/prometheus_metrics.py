"""
Prometheus metrics module for Tutorbook.

This module provides Prometheus-compatible metrics fed by the
@measure_operation decorator and by the scheduling services. It follows
Prometheus naming conventions and keeps its own registry.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "tutorbook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "tutorbook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tutorbook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

slots_generated_total = Counter(
    "tutorbook_slots_generated_total",
    "Booking slots produced by slot generation",
    ["available"],
    registry=REGISTRY,
)

booking_rejections_total = Counter(
    "tutorbook_booking_rejections_total",
    "Requested booking ranges rejected by validation",
    ["code"],
    registry=REGISTRY,
)

availability_cache_total = Counter(
    "tutorbook_availability_cache_total",
    "Availability template cache lookups",
    ["result"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'create_booking')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_slots_generated(available: int, unavailable: int) -> None:
        if available:
            slots_generated_total.labels(available="true").inc(available)
        if unavailable:
            slots_generated_total.labels(available="false").inc(unavailable)

    @staticmethod
    def record_booking_rejection(code: str) -> None:
        booking_rejections_total.labels(code=code).inc()

    @staticmethod
    def record_cache_lookup(hit: bool) -> None:
        availability_cache_total.labels(result="hit" if hit else "miss").inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
