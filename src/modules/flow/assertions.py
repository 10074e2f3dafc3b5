import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, assert_never

from ..request.transport import TransportResponse
from .config import (
    AssertionConfig, CustomAssertion, HeaderAssertion, JsonPathAssertion,
    JsonPathOperator, ResponseTimeAssertion, StatusCodeAssertion, StepConfig
)
from .path import NOT_FOUND, lookup_path
from .predicates import Predicate, PredicateRegistry
from .template_renderer import to_text


@dataclass(frozen=True)
class AssertionResult:
    passed: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> 'AssertionResult':
        return cls(True)

    @classmethod
    def fail(cls, reason: str) -> 'AssertionResult':
        return cls(False, reason)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equals(actual: Any, expected: Any) -> bool:
    """Equality without Python's bool/int conflation."""
    if _is_number(actual) and _is_number(expected):
        return actual == expected
    if type(actual) is not type(expected):
        return False
    return actual == expected


def _to_number(value: Any) -> float:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise ValueError(f"{_display(value)} is not numeric")


def _display(value: Any) -> str:
    if value is NOT_FOUND:
        return "undefined"
    return to_text(value) if not isinstance(value, str) else repr(value)


def describe_assertion(assertion: AssertionConfig) -> str:
    """One-line description of what an assertion expects."""
    if isinstance(assertion, StatusCodeAssertion):
        return f"Status code should be {assertion.expected}"
    elif isinstance(assertion, JsonPathAssertion):
        expected = "" if assertion.value is None else f" {to_text(assertion.value)}"
        return f"{assertion.path} should {assertion.operator.value}{expected}"
    elif isinstance(assertion, ResponseTimeAssertion):
        return f"Response time should be <= {assertion.threshold_ms:g}ms"
    elif isinstance(assertion, HeaderAssertion):
        if assertion.value is not None:
            return f"Header '{assertion.name}' should equal '{assertion.value}'"
        return f"Header '{assertion.name}' should exist"
    elif isinstance(assertion, CustomAssertion):
        return f"Custom assertion '{assertion.predicate}'"
    else:
        assert_never(assertion)


class AssertionEvaluator:
    """Evaluates step assertions against a response."""

    def __init__(self, predicates: Optional[Mapping[str, Predicate]] = None):
        """
        Args:
            predicates: Custom predicates keyed by the reference used in the configuration
        """
        self.predicates: Dict[str, Predicate] = dict(predicates or {})

    @classmethod
    def for_steps(cls, steps: Iterable[StepConfig], registry: PredicateRegistry) -> 'AssertionEvaluator':
        """Build an evaluator with every custom predicate of the flow resolved up front.

        Raises:
            ConfigError: If a custom predicate cannot be resolved
        """
        refs = [
            assertion.predicate
            for step in steps
            for assertion in step.assertions
            if isinstance(assertion, CustomAssertion)
        ]
        return cls(registry.resolve_all(refs))

    def evaluate_all(
        self,
        assertions: Iterable[AssertionConfig],
        response: TransportResponse,
        context: Dict[str, Any],
        latency_ms: float
    ) -> List[str]:
        """Run every assertion in order and return the failure reasons."""
        errors = []
        for assertion in assertions:
            result = self.evaluate(assertion, response, context, latency_ms)
            if not result.passed:
                errors.append(result.reason or "Assertion failed")
        return errors

    def evaluate(
        self,
        assertion: AssertionConfig,
        response: TransportResponse,
        context: Dict[str, Any],
        latency_ms: float
    ) -> AssertionResult:
        """Evaluate one assertion. Never raises: internal errors become failed results."""
        try:
            if isinstance(assertion, StatusCodeAssertion):
                return self._status_code(assertion, response)
            elif isinstance(assertion, JsonPathAssertion):
                return self._json_path(assertion, response)
            elif isinstance(assertion, ResponseTimeAssertion):
                return self._response_time(assertion, latency_ms)
            elif isinstance(assertion, HeaderAssertion):
                return self._header(assertion, response)
            elif isinstance(assertion, CustomAssertion):
                return self._custom(assertion, response, context)
            else:
                assert_never(assertion)
        except Exception as e:
            return AssertionResult.fail(f"Assertion error: {str(e)}")

    def _status_code(self, assertion: StatusCodeAssertion, response: TransportResponse) -> AssertionResult:
        if response.status == assertion.expected:
            return AssertionResult.ok()
        return AssertionResult.fail(f"Expected status {assertion.expected}, got {response.status}")

    def _json_path(self, assertion: JsonPathAssertion, response: TransportResponse) -> AssertionResult:
        path = assertion.path
        expected = assertion.value
        try:
            value = lookup_path(response.body, path)
        except ValueError as e:
            return AssertionResult.fail(f"Failed to evaluate path {path}: {str(e)}")

        operator = assertion.operator
        if operator == JsonPathOperator.EQUALS:
            if _strict_equals(value, expected):
                return AssertionResult.ok()
            return AssertionResult.fail(
                f"Expected {path} to equal {_display(expected)}, got {_display(value)}"
            )

        elif operator == JsonPathOperator.CONTAINS:
            if isinstance(value, str):
                if not isinstance(expected, str):
                    return AssertionResult.fail(
                        f"Expected {path} to contain {_display(expected)}, but a string can only contain text"
                    )
                passed = expected in value
            elif isinstance(value, list):
                passed = any(_strict_equals(item, expected) for item in value)
            elif isinstance(value, dict):
                passed = isinstance(expected, str) and expected in value
            else:
                return AssertionResult.fail(
                    f"Expected {path} to contain {_display(expected)}, but {_display(value)} does not support containment"
                )
            if passed:
                return AssertionResult.ok()
            return AssertionResult.fail(
                f"Expected {path} to contain {_display(expected)}, got {_display(value)}"
            )

        elif operator == JsonPathOperator.EXISTS:
            if value is not NOT_FOUND:
                return AssertionResult.ok()
            return AssertionResult.fail(f"Expected {path} to exist")

        elif operator == JsonPathOperator.NOT_EXISTS:
            if value is NOT_FOUND:
                return AssertionResult.ok()
            return AssertionResult.fail(f"Expected {path} to not exist, got {_display(value)}")

        elif operator in (JsonPathOperator.GREATER_THAN, JsonPathOperator.LESS_THAN):
            if value is NOT_FOUND:
                return AssertionResult.fail(f"Expected {path} to be numeric, but the path was not found")
            try:
                actual_number = _to_number(value)
                expected_number = _to_number(expected)
            except ValueError as e:
                return AssertionResult.fail(f"Cannot compare {path}: {str(e)}")
            if operator == JsonPathOperator.GREATER_THAN:
                if actual_number > expected_number:
                    return AssertionResult.ok()
                return AssertionResult.fail(
                    f"Expected {path} to be greater than {_display(expected)}, got {_display(value)}"
                )
            if actual_number < expected_number:
                return AssertionResult.ok()
            return AssertionResult.fail(
                f"Expected {path} to be less than {_display(expected)}, got {_display(value)}"
            )

        elif operator == JsonPathOperator.MATCH:
            if value is NOT_FOUND:
                return AssertionResult.fail(f"Expected {path} to match {expected}, but the path was not found")
            try:
                pattern = re.compile(str(expected))
            except re.error as e:
                return AssertionResult.fail(f"Invalid pattern {expected!r} for {path}: {str(e)}")
            text = to_text(value)
            if pattern.search(text):
                return AssertionResult.ok()
            return AssertionResult.fail(f"Expected {path} to match {expected}, got {text}")

        else:
            assert_never(operator)

    def _response_time(self, assertion: ResponseTimeAssertion, latency_ms: float) -> AssertionResult:
        if latency_ms <= assertion.threshold_ms:
            return AssertionResult.ok()
        return AssertionResult.fail(
            f"Response time {latency_ms:.0f}ms exceeded threshold {assertion.threshold_ms:g}ms"
        )

    def _header(self, assertion: HeaderAssertion, response: TransportResponse) -> AssertionResult:
        header_value = response.headers.get(assertion.name)
        if assertion.value is not None:
            if header_value == assertion.value:
                return AssertionResult.ok()
            return AssertionResult.fail(
                f"Expected header {assertion.name} to be {assertion.value}, got {header_value}"
            )
        if header_value is not None:
            return AssertionResult.ok()
        return AssertionResult.fail(f"Expected header {assertion.name} to exist")

    def _custom(
        self,
        assertion: CustomAssertion,
        response: TransportResponse,
        context: Dict[str, Any]
    ) -> AssertionResult:
        predicate = self.predicates.get(assertion.predicate)
        if predicate is None:
            return AssertionResult.fail(f"Custom predicate '{assertion.predicate}' was not resolved")
        try:
            result = predicate(response, context)
        except Exception as e:
            return AssertionResult.fail(f"Custom assertion error: {str(e)}")
        if result is True:
            return AssertionResult.ok()
        if isinstance(result, str):
            return AssertionResult.fail(result)
        return AssertionResult.fail("Custom assertion failed")
