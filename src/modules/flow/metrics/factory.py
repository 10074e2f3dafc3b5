from typing import Dict, Optional, Type

from src.modules.flow.config import MetricsConfig, MetricsCollectorType
from src.modules.flow.metrics.base import MetricsCollector
from src.modules.flow.metrics.json import JsonMetricsCollector
from src.modules.flow.metrics.prometheus import PrometheusMetricsCollector
from src.modules.flow.metrics.console import ConsoleMetricsCollector
from src.modules.logging import BaseLogger

def create_metrics_collector(
    config: MetricsConfig,
    logger: Optional[BaseLogger] = None,
    label: str = "Flows",
    verbose: bool = False
) -> MetricsCollector:
    """Create a metrics collector based on the configuration.
    
    Args:
        config: The metrics configuration
        logger: Logger passed to collectors that report their own failures
        label: Name of one execution in console output
        verbose: List step assertions in console output
        
    Returns:
        A metrics collector instance
        
    Raises:
        ValueError: If the collector type is not supported
    """
    collector_types: Dict[MetricsCollectorType, Type[MetricsCollector]] = {
        MetricsCollectorType.JSON: JsonMetricsCollector,
        MetricsCollectorType.PROMETHEUS: PrometheusMetricsCollector,
        MetricsCollectorType.CONSOLE: ConsoleMetricsCollector,
    }
    
    if config.collector not in collector_types:
        raise ValueError(f"Unsupported metrics collector type: {config.collector}")
    
    if config.collector == MetricsCollectorType.JSON:
        if not config.output_file:
            raise ValueError("output_file is required for JSON collector")
        return JsonMetricsCollector(config.output_file)
        
    elif config.collector == MetricsCollectorType.PROMETHEUS:
        if not config.push_gateway:
            raise ValueError("push_gateway is required for Prometheus collector")
        return PrometheusMetricsCollector(config.push_gateway, config.job_name, logger)
        
    elif config.collector == MetricsCollectorType.CONSOLE:
        return ConsoleMetricsCollector(label, verbose=verbose)
    
    raise ValueError(f"Unsupported metrics collector type: {config.collector}")
