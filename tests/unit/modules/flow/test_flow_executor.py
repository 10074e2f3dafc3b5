import pytest
from unittest.mock import AsyncMock, Mock
from src.modules.flow.assertions import AssertionEvaluator
from src.modules.flow.config import StepConfig
from src.modules.flow.context.execution_context import FlowState
from src.modules.flow.flow_executor import FlowExecutor
from src.modules.flow.metrics import MetricsAggregator
from src.modules.flow.step_executor import StepExecutor
from src.modules.flow.template_renderer import TemplateRenderer
from src.modules.request.errors import HttpStatusError
from src.modules.request.transport import Transport, TransportResponse
from tests.utils.test_logger import create_test_logger


class RoutingTransport(Transport):
    """Transport answering by URL and remembering every request."""

    def __init__(self, routes):
        self.routes = routes
        self.sent = []

    async def send(self, method, url, headers=None, body=None):
        self.sent.append((method, url, headers, body))
        response = self.routes[url]
        if isinstance(response, Exception):
            raise response
        return response


def build(steps, transport, verbose=False):
    logger = create_test_logger()
    metrics = MetricsAggregator(steps, total_instances=1)
    step_executor = StepExecutor(transport, TemplateRenderer(logger), AssertionEvaluator(), metrics, logger)
    return FlowExecutor(steps, step_executor, metrics, logger, verbose), metrics, logger


def steps_from(*definitions):
    return [StepConfig.model_validate(definition) for definition in definitions]


OK = TransportResponse(status=200, body={"status": "ok"})


@pytest.mark.asyncio
async def test_failed_step_without_stop_continues():
    """Test that step 3 runs when step 2 fails with stopOnFailure disabled."""
    steps = steps_from(
        {"url": "/one"},
        {"url": "/two", "stopOnFailure": False, "assertions": [{"type": "statusCode", "value": 201}]},
        {"url": "/three"},
    )
    transport = RoutingTransport({"/one": OK, "/two": OK, "/three": OK})
    executor, metrics = build(steps, transport)[:2]

    outcome = await executor.execute()

    assert [sent[1] for sent in transport.sent] == ["/one", "/two", "/three"]
    assert outcome.success is False
    assert outcome.assertion_failures == 1
    assert outcome.state == FlowState.COMPLETED
    assert [step.success for step in outcome.steps] == [True, False, True]
    snapshot = metrics.snapshot()
    assert snapshot.flows.failure_count == 1
    assert snapshot.flows.assertion_failures == 1
    assert snapshot.steps[2].record.success_count == 1


@pytest.mark.asyncio
async def test_failed_step_aborts_by_default():
    """Test that later steps are skipped when a failing step stops the flow."""
    steps = steps_from({"url": "/one"}, {"url": "/two"}, {"url": "/three"})
    transport = RoutingTransport({"/one": OK, "/two": HttpStatusError(500), "/three": OK})
    executor, metrics = build(steps, transport)[:2]

    outcome = await executor.execute()

    assert [sent[1] for sent in transport.sent] == ["/one", "/two"]
    assert outcome.success is False
    assert outcome.state == FlowState.ABORTED
    assert len(outcome.steps) == 2
    snapshot = metrics.snapshot()
    assert snapshot.steps[2].record.total == 0
    assert snapshot.completed_instances == 1


@pytest.mark.asyncio
async def test_successful_flow():
    """Test a flow where every step succeeds."""
    steps = steps_from({"url": "/one"}, {"url": "/two"})
    transport = RoutingTransport({"/one": OK, "/two": OK})
    executor, metrics = build(steps, transport)[:2]

    outcome = await executor.execute()

    assert outcome.success is True
    assert outcome.state == FlowState.COMPLETED
    assert outcome.elapsed_ms >= 0
    assert metrics.snapshot().flows.success_count == 1


@pytest.mark.asyncio
async def test_save_as_threads_body_into_later_steps():
    """Test that a saved body is visible to later step templates."""
    steps = steps_from(
        {"url": "/login", "saveAs": "login"},
        {"url": "/users/{{login.id}}", "headers": {"Authorization": "Bearer {{login.token}}"}},
    )
    transport = RoutingTransport({
        "/login": TransportResponse(status=200, body={"id": 9, "token": "abc"}),
        "/users/9": OK,
    })
    executor = build(steps, transport)[0]

    outcome = await executor.execute()

    assert outcome.success is True
    assert transport.sent[1][1] == "/users/9"
    assert transport.sent[1][2] == {"Authorization": "Bearer abc"}


@pytest.mark.asyncio
async def test_save_as_skipped_on_failure():
    """Test that the body of a failed step is not saved."""
    steps = steps_from(
        {"url": "/login", "saveAs": "login", "stopOnFailure": False,
         "assertions": [{"type": "statusCode", "value": 201}]},
        {"url": "/users/{{login.id}}"},
    )
    transport = RoutingTransport({
        "/login": TransportResponse(status=200, body={"id": 9}),
        "/users/{{login.id}}": OK,
    })
    executor = build(steps, transport)[0]

    await executor.execute()

    assert transport.sent[1][1] == "/users/{{login.id}}"


@pytest.mark.asyncio
async def test_save_response_as_stores_envelope_even_on_failure():
    """Test that the response envelope is saved whether or not the step succeeded."""
    steps = steps_from(
        {"url": "/login", "saveResponseAs": "login", "stopOnFailure": False},
        {"url": "/status/{{login.status}}"},
    )
    transport = RoutingTransport({
        "/login": HttpStatusError(401, {"error": "denied"}),
        "/status/401": OK,
    })
    executor = build(steps, transport)[0]

    outcome = await executor.execute()

    assert transport.sent[1][1] == "/status/401"
    assert outcome.steps[0].success is False
    assert outcome.steps[1].success is True


@pytest.mark.asyncio
async def test_instances_do_not_share_context():
    """Test that each execution starts from an empty context."""
    steps = steps_from({"url": "/a/{{first.n}}", "saveAs": "first"})
    transport = RoutingTransport({"/a/{{first.n}}": TransportResponse(status=200, body={"n": 1}), "/a/1": OK})
    executor = build(steps, transport)[0]

    await executor.execute()
    await executor.execute()

    assert [sent[1] for sent in transport.sent] == ["/a/{{first.n}}", "/a/{{first.n}}"]


@pytest.mark.asyncio
async def test_verbose_logs_assertion_failures():
    """Test that verbose mode reports every assertion failure."""
    steps = steps_from({"name": "Check", "url": "/x", "assertions": [{"type": "statusCode", "value": 201}]})
    transport = RoutingTransport({"/x": OK})
    executor, _, logger = build(steps, transport, verbose=True)

    await executor.execute()

    assert "ASSERTION Check: Expected status 201, got 200" in logger.get_logs()


@pytest.mark.asyncio
async def test_quiet_mode_logs_assertion_failures_at_debug():
    """Test that assertion failures are only debug output without verbose."""
    steps = steps_from({"name": "Check", "url": "/x", "assertions": [{"type": "statusCode", "value": 201}]})
    transport = RoutingTransport({"/x": OK})
    executor, _, logger = build(steps, transport)

    await executor.execute()

    logs = logger.get_logs()
    assert not any(log.startswith("ASSERTION") for log in logs)
    assert "DEBUG: Assertion failure in step Check: Expected status 201, got 200" in logs
