from abc import ABC, abstractmethod
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict

from .aggregator import MetricsSnapshot, RecordSnapshot


def record_to_dict(record: RecordSnapshot) -> Dict[str, Any]:
    data = asdict(record)
    data["total"] = record.total
    data["success_rate"] = round(record.success_rate, 2)
    return data


def snapshot_to_dict(snapshot: MetricsSnapshot) -> Dict[str, Any]:
    """Serialize a snapshot to plain JSON-compatible types."""
    def _serialize_datetime(dt: datetime) -> str:
        return dt.isoformat()

    return {
        "start_time": _serialize_datetime(snapshot.start_time),
        "end_time": _serialize_datetime(snapshot.end_time),
        "duration_ms": snapshot.duration_ms,
        "total_instances": snapshot.total_instances,
        "completed_instances": snapshot.completed_instances,
        "run": record_to_dict(snapshot.run),
        "flows": record_to_dict(snapshot.flows),
        "steps": [
            {
                "index": step.index,
                "name": step.name,
                "method": step.method,
                "url": step.url,
                **record_to_dict(step.record),
                "assertions": list(step.assertions),
            }
            for step in snapshot.steps
        ],
    }


class MetricsCollector(ABC):
    """Base class for reporting sinks receiving progress and the final snapshot."""
    
    @abstractmethod
    def record_progress(self, completed: int, total: int) -> None:
        """Record that a wave finished and `completed` instances are done."""
        pass
    
    @abstractmethod
    def record_run(self, snapshot: MetricsSnapshot) -> None:
        """Record the metrics of the finished run."""
        pass
    
    @abstractmethod
    def finalize(self) -> None:
        """Finalize metrics collection."""
        pass
