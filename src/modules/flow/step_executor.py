import time
from typing import Any, Dict

from ..logging import BaseLogger
from ..request.errors import HttpStatusError, TransportError
from ..request.transport import Transport
from .assertions import AssertionEvaluator
from .config import StepConfig
from .context.execution_context import StepOutcome
from .metrics.aggregator import MetricsAggregator
from .template_renderer import TemplateRenderer


class StepExecutor:
    """Executes one step: render, send, time, assert, record."""

    def __init__(
        self,
        transport: Transport,
        renderer: TemplateRenderer,
        evaluator: AssertionEvaluator,
        metrics: MetricsAggregator,
        logger: BaseLogger
    ):
        """
        Initialize the step executor.

        Args:
            transport: Transport used to send the rendered request
            renderer: Template renderer for URL, headers and body
            evaluator: Evaluator for the step's assertions
            metrics: Aggregator receiving one observation per execution
            logger: Logger instance
        """
        self.transport = transport
        self.renderer = renderer
        self.evaluator = evaluator
        self.metrics = metrics
        self.logger = logger

    async def execute(self, step: StepConfig, index: int, context: Dict[str, Any]) -> StepOutcome:
        """
        Execute a step against the given flow context.

        Transport, render and any other step failures are captured in the
        outcome. Every call records exactly one observation for the step index.
        """
        try:
            outcome = await self._run(step, index, context)
        except Exception as e:
            self.logger.log_error(f"Step {index + 1} failed unexpectedly: {str(e)}")
            outcome = StepOutcome(success=False, latency_ms=0.0, error=str(e))
        self.metrics.record_step(index, outcome)
        return outcome

    async def _run(self, step: StepConfig, index: int, context: Dict[str, Any]) -> StepOutcome:
        try:
            url = self.renderer.render_template(step.url, context)
            headers = self.renderer.render_headers(step.headers, context)
            body = self.renderer.render_body(step.body, context)
        except ValueError as e:
            self.logger.log_debug(f"Step {index + 1} could not be rendered: {str(e)}")
            return StepOutcome(success=False, latency_ms=0.0, error=str(e))

        self.logger.log_step(index + 1, step.method.value, url)

        start = time.perf_counter()
        try:
            response = await self.transport.send(step.method.value, url, headers, body)
        except TransportError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self.logger.log_debug(f"Step {index + 1} transport failure: {str(e)}")
            if isinstance(e, HttpStatusError):
                return StepOutcome(success=False, latency_ms=latency_ms, body=e.body, status_code=e.status, error=str(e))
            return StepOutcome(success=False, latency_ms=latency_ms, error=str(e))
        latency_ms = (time.perf_counter() - start) * 1000

        self.logger.log_status(response.status, latency_ms)
        assertion_errors = self.evaluator.evaluate_all(step.assertions, response, context, latency_ms)
        return StepOutcome.from_response(response, latency_ms, assertion_errors)
