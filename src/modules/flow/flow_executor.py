import time
from typing import List

from ..logging import BaseLogger
from .config import StepConfig
from .context.execution_context import FlowContext, FlowOutcome, FlowState, StepOutcome
from .metrics.aggregator import MetricsAggregator
from .step_executor import StepExecutor


class FlowExecutor:
    """Runs the steps of a flow sequentially against one private context."""

    def __init__(
        self,
        steps: List[StepConfig],
        step_executor: StepExecutor,
        metrics: MetricsAggregator,
        logger: BaseLogger,
        verbose: bool = False
    ):
        """
        Initialize the flow executor.

        Args:
            steps: The flow definition
            step_executor: Executor for individual steps
            metrics: Aggregator receiving the flow outcome
            logger: Logger instance
            verbose: Log assertion failures as warnings instead of debug messages
        """
        self.steps = steps
        self.step_executor = step_executor
        self.metrics = metrics
        self.logger = logger
        self.verbose = verbose

    async def execute(self) -> FlowOutcome:
        """Execute one flow instance and fold its outcome into the metrics."""
        context = FlowContext()
        start = time.perf_counter()
        success = True
        assertion_failures = 0
        outcomes: List[StepOutcome] = []

        context.transition(FlowState.RUNNING)
        for index, step in enumerate(self.steps):
            outcome = await self.step_executor.execute(step, index, context.variables)
            outcomes.append(outcome)
            step_name = step.name or f"Step {index + 1}"

            if not outcome.success:
                success = False
                if outcome.assertion_errors:
                    assertion_failures += 1
                    self._report_assertion_failures(step_name, outcome.assertion_errors)
                elif outcome.error:
                    self.logger.log_debug(f"Step {step_name} failed: {outcome.error}")

            if outcome.success and step.save_as:
                context.save_body(step.save_as, outcome.body)

            if step.save_response_as:
                context.save_envelope(step.save_response_as, outcome)

            if not outcome.success and step.stop_on_failure:
                context.transition(FlowState.ABORTED)
                break
        else:
            context.transition(FlowState.COMPLETED)

        elapsed_ms = (time.perf_counter() - start) * 1000
        result = FlowOutcome(
            success=success,
            elapsed_ms=elapsed_ms,
            assertion_failures=assertion_failures,
            state=context.state,
            steps=outcomes,
        )
        self.metrics.record_flow(result)
        context.transition(FlowState.REPORTED)
        return result

    def _report_assertion_failures(self, step_name: str, errors: List[str]) -> None:
        if self.verbose:
            self.logger.log_assertion_failures(step_name, errors)
        else:
            self.logger.log_debug(f"Assertion failure in step {step_name}: {'; '.join(errors)}")
