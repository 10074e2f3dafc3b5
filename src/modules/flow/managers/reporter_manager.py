"""Fan-out of run progress and results to the configured reporting sinks."""
from typing import List
from src.modules.logging import BaseLogger
from src.modules.flow.config import LoadTestConfig, MetricsCollectorType
from src.modules.flow.metrics import MetricsCollector, MetricsSnapshot, create_metrics_collector
from src.modules.flow.metrics.console import ConsoleMetricsCollector

class ReporterManager:
    """Manages the reporting sinks of a load test."""
    
    def __init__(self, collectors: List[MetricsCollector], logger: BaseLogger):
        """Initialize reporter manager.
        
        Args:
            collectors: Reporting sinks notified in order
            logger: Logger instance
        """
        self.collectors = collectors
        self.logger = logger

    @classmethod
    def from_config(cls, config: LoadTestConfig, logger: BaseLogger, label: str = "Flows") -> 'ReporterManager':
        """Console output is always on; a json or prometheus collector is added when configured."""
        collectors: List[MetricsCollector] = [ConsoleMetricsCollector(label, verbose=config.verbose)]
        if config.metrics.collector != MetricsCollectorType.CONSOLE:
            collectors.append(create_metrics_collector(config.metrics, logger, label))
            logger.log_info(f"Metrics collection enabled with collector type: {config.metrics.collector.value}")
        return cls(collectors, logger)

    def notify_progress(self, completed: int, total: int) -> None:
        """Notify all collectors that a wave finished."""
        for collector in self.collectors:
            collector.record_progress(completed, total)

    def notify_run(self, snapshot: MetricsSnapshot) -> None:
        """Hand the final snapshot to all collectors."""
        for collector in self.collectors:
            collector.record_run(snapshot)

    def cleanup(self) -> None:
        """Finalize all collectors, logging failures instead of raising them."""
        for collector in self.collectors:
            try:
                collector.finalize()
            except Exception as e:
                self.logger.log_warning(f"Error finalizing {type(collector).__name__}: {str(e)}")
