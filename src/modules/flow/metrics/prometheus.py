from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

from .aggregator import MetricsSnapshot, RecordSnapshot
from .base import MetricsCollector
from ...logging import BaseLogger

class PrometheusMetricsCollector(MetricsCollector):
    """Collector that sends metrics to a Prometheus push gateway."""
    
    def __init__(self, push_gateway: str, job_name: str, logger: Optional[BaseLogger] = None):
        """Initialize the Prometheus collector.
        
        Args:
            push_gateway: URL of the Prometheus push gateway
            job_name: Name of the job for the metrics
            logger: Logger used to report push failures
        """
        self.push_gateway = push_gateway
        self.job_name = job_name
        self.logger = logger
        self.registry = CollectorRegistry()
        self._has_data = False
        
        self.completed = Gauge(
            'stressflow_completed_instances',
            'Number of flow instances completed so far',
            registry=self.registry
        )
        self.executions = Gauge(
            'stressflow_executions_total',
            'Number of executions by level and outcome',
            ['level', 'name', 'outcome'],
            registry=self.registry
        )
        self.latency = Gauge(
            'stressflow_latency_milliseconds',
            'Latency statistics of successful executions',
            ['level', 'name', 'stat'],
            registry=self.registry
        )
        self.success_rate = Gauge(
            'stressflow_success_rate',
            'Percentage of successful executions',
            ['level', 'name'],
            registry=self.registry
        )
        self.duration = Gauge(
            'stressflow_run_duration_seconds',
            'Total duration of the run in seconds',
            registry=self.registry
        )

    def _record(self, level: str, name: str, record: RecordSnapshot) -> None:
        self.executions.labels(level=level, name=name, outcome="success").set(record.success_count)
        self.executions.labels(level=level, name=name, outcome="failure").set(record.failure_count)
        self.executions.labels(level=level, name=name, outcome="assertion_failure").set(record.assertion_failures)
        self.success_rate.labels(level=level, name=name).set(record.success_rate)
        for stat in ("min_ms", "max_ms", "avg_ms"):
            value = getattr(record, stat)
            if value is not None:
                self.latency.labels(level=level, name=name, stat=stat[:-3]).set(value)
    
    def record_progress(self, completed: int, total: int) -> None:
        """Record wave progress."""
        self.completed.set(completed)
    
    def record_run(self, snapshot: MetricsSnapshot) -> None:
        """Record run metrics."""
        self.duration.set(snapshot.duration_ms / 1000.0)
        self._record("run", "all", snapshot.run)
        self._record("flow", "all", snapshot.flows)
        for step in snapshot.steps:
            self._record("step", step.name, step.record)
        self._has_data = True
    
    def finalize(self) -> None:
        """Push all collected metrics to the Prometheus gateway."""
        if not self._has_data:
            return
        try:
            push_to_gateway(
                self.push_gateway,
                job=self.job_name,
                registry=self.registry
            )
        except OSError as e:
            # Log the error but don't raise it, the run itself already completed
            if self.logger:
                self.logger.log_error(f"Failed to push metrics to Prometheus gateway: {e}")
