import pytest
from src.modules.flow.context.execution_context import FlowContext, FlowState, StepOutcome
from src.modules.request.transport import TransportResponse


def test_context_starts_pending_and_empty():
    """Test a new flow context."""
    context = FlowContext()
    assert context.state == FlowState.PENDING
    assert context.variables == {}
    assert context.id != FlowContext().id


@pytest.mark.parametrize("final", [FlowState.COMPLETED, FlowState.ABORTED])
def test_valid_transitions(final):
    """Test the lifecycle of a flow instance."""
    context = FlowContext()
    context.transition(FlowState.RUNNING)
    context.transition(final)
    context.transition(FlowState.REPORTED)
    assert context.state == FlowState.REPORTED


@pytest.mark.parametrize("path", [
    [FlowState.COMPLETED],
    [FlowState.RUNNING, FlowState.REPORTED],
    [FlowState.RUNNING, FlowState.ABORTED, FlowState.RUNNING],
])
def test_invalid_transitions(path):
    """Test that states cannot be skipped or re-entered."""
    context = FlowContext()
    with pytest.raises(RuntimeError):
        for state in path:
            context.transition(state)


def test_save_body_and_envelope():
    """Test storing step results in the context."""
    context = FlowContext()
    outcome = StepOutcome.from_response(
        TransportResponse(status=201, headers={"Location": "/users/1"}, body={"id": 1}), 12.5, []
    )

    context.save_body("created", outcome.body)
    context.save_envelope("response", outcome)

    assert context.variables["created"] == {"id": 1}
    assert context.variables["response"] == {"body": {"id": 1}, "headers": {"Location": "/users/1"}, "status": 201}


def test_outcome_from_response_with_assertion_errors():
    """Test that assertion errors make the outcome unsuccessful."""
    outcome = StepOutcome.from_response(TransportResponse(status=200), 1.0, ["bad"])
    assert outcome.success is False
    assert outcome.failed_assertions is True
