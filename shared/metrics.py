"""
Shared metrics configuration for the Kong Adapter.
"""

from typing import Dict, Any, Optional
import time
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, generate_latest


class MetricsCollector:
    """Prometheus metrics for synthesis runs and remote calls."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry lets several apps live in one process (tests)
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up the adapter metrics."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        self._metrics["synthesis_runs_total"] = Counter(
            "synthesis_runs_total",
            "Total synthesis runs",
            ["artifact", "status"],
            registry=self.registry
        )

        self._metrics["synthesis_duration_seconds"] = Histogram(
            "synthesis_duration_seconds",
            "Synthesis duration in seconds",
            ["artifact"],
            registry=self.registry
        )

        self._metrics["synthesized_objects"] = Gauge(
            "synthesized_objects",
            "Number of objects produced by the last successful synthesis",
            ["artifact"],
            registry=self.registry
        )

        self._metrics["remote_requests_total"] = Counter(
            "remote_requests_total",
            "Total requests against the portal and gateway",
            ["service", "method", "status_code"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

    def record_synthesis(self, artifact: str, status: str, duration: float):
        """Record the outcome of one synthesis run."""
        self._metrics["synthesis_runs_total"].labels(artifact=artifact, status=status).inc()
        self._metrics["synthesis_duration_seconds"].labels(artifact=artifact).observe(duration)

    def set_produced(self, artifact: str, count: int):
        """Set the number of objects the last synthesis produced."""
        self._metrics["synthesized_objects"].labels(artifact=artifact).set(count)

    def record_remote_request(self, service: str, method: str, status_code: Optional[int]):
        """Record a request against a remote service."""
        self._metrics["remote_requests_total"].labels(
            service=service,
            method=method,
            status_code=str(status_code) if status_code is not None else "error"
        ).inc()

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    @contextmanager
    def time_synthesis(self, artifact: str):
        """Time a synthesis run, recording failure if the block raises."""
        start_time = time.time()
        try:
            yield
        except Exception:
            self.record_synthesis(artifact, "error", time.time() - start_time)
            raise
        self.record_synthesis(artifact, "ok", time.time() - start_time)

    def exposition(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
