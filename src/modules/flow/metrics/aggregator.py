"""Run, flow and step level aggregation of execution outcomes."""
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..assertions import describe_assertion
from ..config import StepConfig
from ..context.execution_context import FlowOutcome, StepOutcome


@dataclass
class MetricsRecord:
    """Mutable counters for one aggregation level.

    Latency statistics only count successful observations; min and max hold
    sentinels until the first one.
    """
    success_count: int = 0
    failure_count: int = 0
    assertion_failures: int = 0
    latency_sum_ms: float = 0.0
    min_ms: float = math.inf
    max_ms: float = 0.0

    def observe(self, success: bool, latency_ms: float, assertion_failed: bool = False) -> None:
        if success:
            self.success_count += 1
            self.latency_sum_ms += latency_ms
            self.min_ms = min(self.min_ms, latency_ms)
            self.max_ms = max(self.max_ms, latency_ms)
        else:
            self.failure_count += 1
            if assertion_failed:
                self.assertion_failures += 1

    def snapshot(self) -> 'RecordSnapshot':
        has_samples = self.success_count > 0
        return RecordSnapshot(
            success_count=self.success_count,
            failure_count=self.failure_count,
            assertion_failures=self.assertion_failures,
            latency_sum_ms=self.latency_sum_ms,
            min_ms=self.min_ms if has_samples else None,
            max_ms=self.max_ms if has_samples else None,
            avg_ms=self.latency_sum_ms / self.success_count if has_samples else None,
        )


@dataclass(frozen=True)
class RecordSnapshot:
    success_count: int
    failure_count: int
    assertion_failures: int
    latency_sum_ms: float
    min_ms: Optional[float]
    max_ms: Optional[float]
    avg_ms: Optional[float]

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def success_rate(self) -> float:
        """Percentage of successful observations, 0 when nothing was observed."""
        if self.total == 0:
            return 0.0
        return self.success_count / self.total * 100


@dataclass(frozen=True)
class StepSnapshot:
    index: int
    name: str
    method: str
    url: str
    record: RecordSnapshot
    assertions: List[str] = field(default_factory=list)  # descriptions, in evaluation order


@dataclass(frozen=True)
class MetricsSnapshot:
    """Immutable view of a finished run."""
    start_time: datetime
    end_time: datetime
    duration_ms: float
    total_instances: int
    completed_instances: int
    run: RecordSnapshot  # every flow instance of the run
    flows: RecordSnapshot  # every flow instance, latency is the flow elapsed time
    steps: List[StepSnapshot] = field(default_factory=list)


class MetricsAggregator:
    """Accumulates outcomes of one run.

    Instances of a wave report concurrently, so every update is serialized
    with a lock and never awaits.
    """

    def __init__(self, steps: List[StepConfig], total_instances: int):
        self.step_configs = list(steps)
        self.step_names = [step.name or f"Step {index + 1}" for index, step in enumerate(self.step_configs)]
        self.total_instances = total_instances
        self.run = MetricsRecord()
        self.flows = MetricsRecord()
        self.steps: List[MetricsRecord] = [MetricsRecord() for _ in self.step_configs]
        self.completed_instances = 0
        self.start_time = datetime.now()
        self._lock = threading.Lock()

    def start(self) -> None:
        self.start_time = datetime.now()

    def record_step(self, index: int, outcome: StepOutcome) -> None:
        """Fold one step outcome into its positional step record."""
        with self._lock:
            self.steps[index].observe(outcome.success, outcome.latency_ms, outcome.failed_assertions)

    def record_flow(self, outcome: FlowOutcome) -> None:
        """Fold one flow outcome into the run and flow records."""
        with self._lock:
            self.run.observe(outcome.success, outcome.elapsed_ms, outcome.assertion_failures > 0)
            self.flows.observe(outcome.success, outcome.elapsed_ms, outcome.assertion_failures > 0)
            self.completed_instances += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            end_time = datetime.now()
            return MetricsSnapshot(
                start_time=self.start_time,
                end_time=end_time,
                duration_ms=(end_time - self.start_time).total_seconds() * 1000,
                total_instances=self.total_instances,
                completed_instances=self.completed_instances,
                run=self.run.snapshot(),
                flows=self.flows.snapshot(),
                steps=[
                    StepSnapshot(
                        index=index,
                        name=self.step_names[index],
                        method=step.method.value,
                        url=step.url,
                        record=record.snapshot(),
                        assertions=[describe_assertion(assertion) for assertion in step.assertions],
                    )
                    for index, (step, record) in enumerate(zip(self.step_configs, self.steps))
                ],
            )
