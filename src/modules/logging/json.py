import sys
from typing import Any, List
from .base import BaseLogger


class JsonLogger(BaseLogger):
    """Logger that outputs JSON for machine parsing."""
    
    def __init__(self, log_level: str = "INFO"):
        super().__init__(log_level)
        # Configure loguru for JSON output
        self.logger.configure(
            handlers=[{
                "sink": sys.stderr,
                "serialize": True,  # JSON output
                "format": "{time} | {level} | {message}",
                "level": log_level
            }]
        )

    def _emit(self, level: str, message: str, **fields: Any):
        # Structured fields end up in record.extra of the serialized line
        self.logger.bind(**fields).log(level, message)
    
    def log_step(self, step_number: int, method: str, endpoint: str):
        self._emit("DEBUG", f"Step {step_number}: {method} {endpoint}",
                   type="step", step_number=step_number, method=method, endpoint=endpoint)

    def log_status(self, status_code: int, latency_ms: float):
        self._emit("DEBUG", f"Status: {status_code}",
                   type="status", code=status_code, latency_ms=latency_ms)

    def log_assertion_failures(self, step_name: str, errors: List[str]):
        self._emit("WARNING", f"Assertion failure in step {step_name}",
                   type="assertion_failure", step=step_name, errors=errors)

    def log_error(self, message: str):
        self._emit("ERROR", message, type="error")

    def log_warning(self, message: str):
        self._emit("WARNING", message, type="warning")

    def log_info(self, message: str):
        self._emit("INFO", message, type="info")

    def log_debug(self, message: str):
        self._emit("DEBUG", message, type="debug")
