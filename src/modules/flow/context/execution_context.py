from dataclasses import dataclass, field
from enum import Enum
import uuid
from typing import Any, Dict, List, Optional

from src.modules.request.transport import TransportResponse


class FlowState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    REPORTED = "reported"


_TRANSITIONS = {
    FlowState.PENDING: {FlowState.RUNNING},
    FlowState.RUNNING: {FlowState.COMPLETED, FlowState.ABORTED},
    FlowState.COMPLETED: {FlowState.REPORTED},
    FlowState.ABORTED: {FlowState.REPORTED},
    FlowState.REPORTED: set(),
}


@dataclass
class StepOutcome:
    """Result of one step execution."""
    success: bool
    latency_ms: float
    body: Any = None
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    assertion_errors: List[str] = field(default_factory=list)
    error: Optional[str] = None  # transport or render failure

    @property
    def failed_assertions(self) -> bool:
        return bool(self.assertion_errors)

    def envelope(self) -> Dict[str, Any]:
        return {"body": self.body, "headers": dict(self.headers), "status": self.status_code}

    @classmethod
    def from_response(cls, response: TransportResponse, latency_ms: float, assertion_errors: List[str]) -> 'StepOutcome':
        return cls(
            success=not assertion_errors,
            latency_ms=latency_ms,
            body=response.body,
            status_code=response.status,
            headers=dict(response.headers),
            assertion_errors=assertion_errors,
        )


@dataclass
class FlowOutcome:
    """Result of one flow instance."""
    success: bool
    elapsed_ms: float
    assertion_failures: int
    state: FlowState
    steps: List[StepOutcome] = field(default_factory=list)


@dataclass
class FlowContext:
    """Per-instance state of a flow execution.

    The variables mapping is owned by exactly one flow instance.
    """
    variables: Dict[str, Any] = field(default_factory=dict)
    state: FlowState = FlowState.PENDING
    
    def __post_init__(self):
        self.id = str(uuid.uuid4())

    def transition(self, state: FlowState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid flow state transition {self.state.value} -> {state.value}")
        self.state = state

    def save_body(self, key: str, body: Any) -> None:
        self.variables[key] = body

    def save_envelope(self, key: str, outcome: StepOutcome) -> None:
        self.variables[key] = outcome.envelope()
