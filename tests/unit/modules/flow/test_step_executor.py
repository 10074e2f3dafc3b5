import pytest
from unittest.mock import AsyncMock, Mock
from src.modules.flow.assertions import AssertionEvaluator
from src.modules.flow.config import StepConfig
from src.modules.flow.metrics import MetricsAggregator
from src.modules.flow.step_executor import StepExecutor
from src.modules.flow.template_renderer import TemplateRenderer
from src.modules.request.errors import ConnectionFailedError, HttpStatusError
from src.modules.request.transport import Transport, TransportResponse
from tests.utils.test_logger import create_test_logger


@pytest.fixture
def logger():
    return create_test_logger()


@pytest.fixture
def transport():
    transport = Mock(spec=Transport)
    transport.send = AsyncMock(return_value=TransportResponse(
        status=200,
        headers={"Content-Type": "application/json"},
        body={"status": "ok", "token": "abc"}
    ))
    return transport


def make_executor(transport, logger, steps):
    metrics = MetricsAggregator(steps, total_instances=1)
    executor = StepExecutor(transport, TemplateRenderer(logger), AssertionEvaluator(), metrics, logger)
    return executor, metrics


def step(**kwargs):
    return StepConfig.model_validate(kwargs)


@pytest.mark.asyncio
async def test_successful_step_records_once(transport, logger):
    """Test a successful step without assertions."""
    steps = [step(url="http://localhost/health")]
    executor, metrics = make_executor(transport, logger, steps)

    outcome = await executor.execute(steps[0], 0, {})

    assert outcome.success is True
    assert outcome.status_code == 200
    assert outcome.body == {"status": "ok", "token": "abc"}
    assert outcome.latency_ms >= 0
    record = metrics.snapshot().steps[0].record
    assert record.success_count == 1
    assert record.failure_count == 0
    assert "STEP 1: GET http://localhost/health" in logger.get_logs()


@pytest.mark.asyncio
async def test_request_is_rendered_from_context(transport, logger):
    """Test that URL, headers and body are rendered before sending."""
    steps = [step(
        method="POST",
        url="http://localhost/users/{{login.id}}",
        headers={"Authorization": "Bearer {{login.token}}"},
        data={"name": "{{login.name}}"},
    )]
    executor, _ = make_executor(transport, logger, steps)
    context = {"login": {"id": 7, "token": "abc", "name": "alice"}}

    await executor.execute(steps[0], 0, context)

    transport.send.assert_awaited_once_with(
        "POST",
        "http://localhost/users/7",
        {"Authorization": "Bearer abc"},
        {"name": "alice"}
    )


@pytest.mark.asyncio
async def test_assertion_failures_fail_the_step(transport, logger):
    """Test that every failed assertion reason is kept on the outcome."""
    steps = [step(url="/x", assertions=[
        {"type": "statusCode", "value": 201},
        {"type": "jsonPath", "path": "status", "value": "fail"},
    ])]
    executor, metrics = make_executor(transport, logger, steps)

    outcome = await executor.execute(steps[0], 0, {})

    assert outcome.success is False
    assert len(outcome.assertion_errors) == 2
    assert outcome.status_code == 200
    record = metrics.snapshot().steps[0].record
    assert record.failure_count == 1
    assert record.assertion_failures == 1


@pytest.mark.asyncio
async def test_transport_error_is_captured(transport, logger):
    """Test that transport failures become failed outcomes."""
    transport.send.side_effect = ConnectionFailedError("Connection error: refused")
    steps = [step(url="/x")]
    executor, metrics = make_executor(transport, logger, steps)

    outcome = await executor.execute(steps[0], 0, {})

    assert outcome.success is False
    assert outcome.error == "Connection error: refused"
    assert outcome.status_code is None
    snapshot = metrics.snapshot()
    assert snapshot.steps[0].record.failure_count == 1
    assert snapshot.steps[0].record.min_ms is None


@pytest.mark.asyncio
async def test_http_status_error_keeps_status_and_body(transport, logger):
    """Test that a rejected non-2xx response keeps its status and body."""
    transport.send.side_effect = HttpStatusError(404, {"error": "not found"})
    steps = [step(url="/x")]
    executor, _ = make_executor(transport, logger, steps)

    outcome = await executor.execute(steps[0], 0, {})

    assert outcome.success is False
    assert outcome.status_code == 404
    assert outcome.body == {"error": "not found"}
    assert outcome.error == "Request failed with status code 404"
    assert outcome.envelope() == {"body": {"error": "not found"}, "headers": {}, "status": 404}


@pytest.mark.asyncio
async def test_unrenderable_body_is_not_sent(transport, logger):
    """Test that a body that is not valid JSON after rendering fails without a request."""
    steps = [step(url="/x", data={"raw": "{{value}}"})]
    executor, metrics = make_executor(transport, logger, steps)
    renderer = executor.renderer
    renderer.render_body = Mock(side_effect=ValueError("Rendered body is not valid JSON: x"))

    outcome = await executor.execute(steps[0], 0, {"value": "v"})

    assert outcome.success is False
    assert outcome.latency_ms == 0.0
    assert "not valid JSON" in outcome.error
    transport.send.assert_not_awaited()
    assert metrics.snapshot().steps[0].record.failure_count == 1


@pytest.mark.asyncio
async def test_unexpected_error_is_recorded(transport, logger):
    """Test that an error outside the transport hierarchy still records a failed attempt."""
    transport.send.side_effect = RuntimeError("boom")
    steps = [step(url="/x")]
    executor, metrics = make_executor(transport, logger, steps)

    outcome = await executor.execute(steps[0], 0, {})

    assert outcome.success is False
    assert outcome.error == "boom"
    assert metrics.snapshot().steps[0].record.failure_count == 1
    assert "ERROR: Step 1 failed unexpectedly: boom" in logger.get_logs()
