from typing import Any, Optional

import click

from .aggregator import MetricsSnapshot, RecordSnapshot
from .base import MetricsCollector

class ConsoleMetricsCollector(MetricsCollector):
    """Collector that shows a progress bar and prints a summary to the console."""
    
    def __init__(self, label: str = "Flows", show_progress: bool = True, verbose: bool = False):
        """Initialize the console collector.
        
        Args:
            label: What a single instance is called in the output (Flows, Requests)
            show_progress: Whether to draw a progress bar while waves complete
            verbose: List the assertions of every step in the step statistics
        """
        self.label = label
        self.show_progress = show_progress
        self.verbose = verbose
        self._progress_bar: Optional[Any] = None
        self._last_completed = 0
    
    def record_progress(self, completed: int, total: int) -> None:
        """Advance the progress bar to the completed count."""
        if not self.show_progress:
            return
        if self._progress_bar is None:
            self._progress_bar = click.progressbar(length=total, label="Progress", show_pos=True)
            self._progress_bar.__enter__()
        self._progress_bar.update(completed - self._last_completed)
        self._last_completed = completed

    def _close_progress(self) -> None:
        if self._progress_bar is not None:
            self._progress_bar.__exit__(None, None, None)
            self._progress_bar = None

    @staticmethod
    def _latency_lines(record: RecordSnapshot, indent: str = "") -> list[str]:
        if record.success_count == 0:
            return []
        return [
            f"{indent}Minimum: {record.min_ms:.2f}ms",
            f"{indent}Maximum: {record.max_ms:.2f}ms",
            f"{indent}Average: {record.avg_ms:.2f}ms",
        ]
    
    def record_run(self, snapshot: MetricsSnapshot) -> None:
        """Print the run summary."""
        self._close_progress()
        flows = snapshot.flows
        label = self.label

        click.echo(click.style("\nTest Results:", fg="green"))
        click.echo(click.style("============", fg="green"))
        click.echo(f"Total {label}: {snapshot.total_instances}")
        click.echo(click.style(f"Successful {label}: {flows.success_count}", fg="green"))
        click.echo(click.style(f"Failed {label}: {flows.failure_count}", fg="red"))
        if flows.assertion_failures:
            click.echo(click.style(f"{label} With Assertion Failures: {flows.assertion_failures}", fg="yellow"))
        click.echo(f"Success Rate: {flows.success_rate:.2f}%")
        click.echo(f"Duration: {snapshot.duration_ms / 1000:.2f}s")

        if flows.success_count > 0:
            click.echo(click.style("\nTime Statistics:", fg="yellow"))
            for line in self._latency_lines(flows):
                click.echo(line)

        if len(snapshot.steps) > 1 or (self.verbose and any(step.assertions for step in snapshot.steps)):
            click.echo(click.style("\nStep-by-Step Statistics:", fg="yellow"))
            for step in snapshot.steps:
                record = step.record
                click.echo(f"\n{step.name} ({step.method} {step.url}):")
                click.echo(f"  Success: {record.success_count}, Failures: {record.failure_count}")
                if record.assertion_failures:
                    click.echo(click.style(f"  Assertion Failures: {record.assertion_failures}", fg="yellow"))
                for line in self._latency_lines(record, indent="  "):
                    click.echo(line)
                if self.verbose and step.assertions:
                    click.echo(f"  Assertions: {len(step.assertions)}")
                    for number, description in enumerate(step.assertions, start=1):
                        click.echo(f"    {number}. {description}")
    
    def finalize(self) -> None:
        self._close_progress()
