from .aggregator import (
    MetricsAggregator,
    MetricsRecord,
    MetricsSnapshot,
    RecordSnapshot,
    StepSnapshot
)
from .base import MetricsCollector, snapshot_to_dict
from .factory import create_metrics_collector

__all__ = [
    'MetricsAggregator',
    'MetricsRecord',
    'MetricsSnapshot',
    'RecordSnapshot',
    'StepSnapshot',
    'MetricsCollector',
    'snapshot_to_dict',
    'create_metrics_collector'
]
