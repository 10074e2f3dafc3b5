import json
from typing import Any, Dict, List, Optional
from pathlib import Path

from .aggregator import MetricsSnapshot
from .base import MetricsCollector, snapshot_to_dict

class JsonMetricsCollector(MetricsCollector):
    """Collector that saves metrics to a JSON file."""
    
    def __init__(self, output_file: str):
        """Initialize the JSON collector.
        
        Args:
            output_file: Path to the output JSON file
        """
        self.output_file = Path(output_file)
        self.progress: List[Dict[str, int]] = []
        self.snapshot: Optional[Dict[str, Any]] = None
    
    def record_progress(self, completed: int, total: int) -> None:
        """Record wave progress."""
        self.progress.append({"completed": completed, "total": total})
    
    def record_run(self, snapshot: MetricsSnapshot) -> None:
        """Record run metrics."""
        self.snapshot = snapshot_to_dict(snapshot)
    
    def finalize(self) -> None:
        """Save all collected metrics to the JSON file."""
        # Ensure the output directory exists
        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        
        with open(self.output_file, 'w') as f:
            json.dump({"waves": self.progress, "metrics": self.snapshot}, f, indent=2)
