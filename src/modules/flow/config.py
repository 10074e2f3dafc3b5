import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..request.transport import TransportConfig

class MethodConfig(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

class JsonPathOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    MATCH = "match"


class _AssertionBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

class StatusCodeAssertion(_AssertionBase):
    type: Literal["statusCode"] = "statusCode"
    expected: int = Field(..., alias="value")

class JsonPathAssertion(_AssertionBase):
    type: Literal["jsonPath"] = "jsonPath"
    path: str
    operator: JsonPathOperator = JsonPathOperator.EQUALS
    value: Any = None

class ResponseTimeAssertion(_AssertionBase):
    type: Literal["responseTime"] = "responseTime"
    threshold_ms: float = Field(..., alias="value", ge=0)

class HeaderAssertion(_AssertionBase):
    type: Literal["header"] = "header"
    name: str
    value: Optional[str] = None

class CustomAssertion(_AssertionBase):
    type: Literal["custom"] = "custom"
    predicate: str  # registered predicate name or "module:function"

AssertionConfig = Annotated[
    Union[StatusCodeAssertion, JsonPathAssertion, ResponseTimeAssertion, HeaderAssertion, CustomAssertion],
    Field(discriminator="type")
]


def _decode_headers(v: Any) -> Any:
    """Headers may be given as a JSON encoded object. Values become strings, null is rejected."""
    if v is None:
        return {}
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"headers is not valid JSON: {str(e)}")
        if not isinstance(v, dict):
            raise ValueError("headers must decode to a JSON object")
    if isinstance(v, dict):
        for key, value in v.items():
            if value is None:
                raise ValueError(f"header '{key}' must not be null")
        return {str(key): str(value) for key, value in v.items()}
    return v

class StepConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Optional[str] = None
    method: MethodConfig = MethodConfig.GET  # Defaults to GET if not provided.
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Union[Dict[str, Any], List[Any], str]] = Field(None, alias="data")
    assertions: List[AssertionConfig] = Field(default_factory=list)
    save_as: Optional[str] = Field(None, alias="saveAs")
    save_response_as: Optional[str] = Field(None, alias="saveResponseAs")
    stop_on_failure: bool = Field(True, alias="stopOnFailure")

    @model_validator(mode="before")
    @classmethod
    def accept_body_key(cls, data: Any) -> Any:
        """Accept 'body' as well as 'data' for the request body."""
        if isinstance(data, dict) and "body" in data and "data" not in data:
            data = {**data, "data": data["body"]}
            del data["body"]
        return data

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("headers", mode="before")
    @classmethod
    def decode_headers(cls, v: Any) -> Any:
        return _decode_headers(v)

class MetricsCollectorType(str, Enum):
    CONSOLE = "console"
    JSON = "json"
    PROMETHEUS = "prometheus"

class MetricsConfig(BaseModel):
    collector: MetricsCollectorType = MetricsCollectorType.CONSOLE
    # JSON collector specific config
    output_file: Optional[str] = None
    # Prometheus collector specific config
    push_gateway: Optional[str] = None
    job_name: str = "stressflow"

    @model_validator(mode='after')
    def validate_collector_config(self) -> 'MetricsConfig':
        """Validate collector-specific configuration."""
        if self.collector == MetricsCollectorType.JSON and not self.output_file:
            raise ValueError("output_file is required when using JSON collector")
            
        if self.collector == MetricsCollectorType.PROMETHEUS and not self.push_gateway:
            raise ValueError("push_gateway is required when using Prometheus collector")
            
        return self

class LoadTestConfig(BaseModel):
    """Settings shared by flow mode and single-request mode."""
    number: int = Field(100, ge=1)  # total executions
    concurrent: int = Field(10, ge=1)  # executions per wave
    verbose: bool = False
    success_threshold: Optional[float] = Field(None, ge=0, le=100)  # percent of successful executions
    transport: TransportConfig = TransportConfig()
    metrics: MetricsConfig = MetricsConfig()

class FlowConfig(LoadTestConfig):
    name: Optional[str] = None
    flow: List[StepConfig]

    @field_validator("flow", mode="before")
    @classmethod
    def require_steps(cls, v: Any) -> Any:
        if not isinstance(v, list) or not v:
            raise ValueError("Flow configuration is required and must be a non-empty list of steps")
        return v

    def step_names(self) -> List[str]:
        return [step.name or f"Step {index + 1}" for index, step in enumerate(self.flow)]

class RequestModeConfig(LoadTestConfig):
    url: str = Field(..., min_length=1)
    method: MethodConfig = MethodConfig.GET
    data: Optional[Union[Dict[str, Any], List[Any], str]] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("headers", mode="before")
    @classmethod
    def decode_headers(cls, v: Any) -> Any:
        return _decode_headers(v)

    def to_flow(self) -> FlowConfig:
        """Single-request mode runs as a one-step flow without assertions."""
        step = StepConfig(
            name=f"{self.method.value} {self.url}",
            method=self.method,
            url=self.url,
            headers=self.headers,
            body=self.data,
        )
        return FlowConfig(
            number=self.number,
            concurrent=self.concurrent,
            verbose=self.verbose,
            success_threshold=self.success_threshold,
            transport=self.transport,
            metrics=self.metrics,
            flow=[step],
        )
