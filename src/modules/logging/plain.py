import sys
from typing import List
from .base import BaseLogger


class PlainLogger(BaseLogger):
    """Logger that outputs plain text, suitable for CI/file output."""
    
    def __init__(self, log_level: str = "INFO"):
        super().__init__(log_level)
        # Configure loguru for plain output
        self.logger.configure(
            handlers=[{
                "sink": sys.stderr,
                "format": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}",
                "colorize": False,
                "level": log_level
            }]
        )
    
    def log_step(self, step_number: int, method: str, endpoint: str):
        self.logger.debug(f"Step {step_number}: {method} {endpoint}")

    def log_status(self, status_code: int, latency_ms: float):
        self.logger.debug(f"Status: {status_code} ({latency_ms:.2f}ms)")

    def log_assertion_failures(self, step_name: str, errors: List[str]):
        self.logger.warning(f"Assertion failure in step {step_name}:")
        for error in errors:
            self.logger.warning(f"  - {error}")

    def log_error(self, message: str):
        self.logger.error(message)

    def log_warning(self, message: str):
        self.logger.warning(message)

    def log_info(self, message: str):
        self.logger.info(message)

    def log_debug(self, message: str):
        self.logger.debug(message)
