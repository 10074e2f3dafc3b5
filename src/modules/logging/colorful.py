import click
from typing import List
from .base import BaseLogger
import sys


class ColorfulLogger(BaseLogger):
    """Logger that outputs colorful text for CLI usage."""
    
    def __init__(self, log_level: str = "INFO"):
        super().__init__(log_level)
        # Configure loguru for colored output
        self.logger.configure(
            handlers=[{
                "sink": sys.stderr,
                "colorize": True,
                "format": "<cyan>{time:YYYY-MM-DD HH:mm:ss.SSS}</cyan> | "
                         "<level>{level: <8}</level> | "
                         "<white>{message}</white>",
                "level": log_level
            }]
        )
    
    def log_step(self, step_number: int, method: str, endpoint: str):
        self.logger.debug(click.style(f"Step {step_number}: {method} {endpoint}", fg="cyan"))

    def log_status(self, status_code: int, latency_ms: float):
        if status_code >= 500:
            color = "red"
        elif status_code >= 400:
            color = "yellow"
        elif status_code >= 300:
            color = "blue"
        elif status_code >= 200:
            color = "green"
        else:
            color = "white"
            
        self.logger.debug(click.style(f"Status: {status_code} ({latency_ms:.2f}ms)", fg=color))

    def log_assertion_failures(self, step_name: str, errors: List[str]):
        self.logger.warning(click.style(f"Assertion failure in step {step_name}:", fg="yellow", bold=True))
        for error in errors:
            self.logger.warning(click.style(f"  - {error}", fg="yellow"))

    def log_error(self, message: str):
        self.logger.error(click.style(message, fg="red", bold=True))

    def log_warning(self, message: str):
        self.logger.warning(click.style(message, fg="yellow", bold=True))

    def log_info(self, message: str):
        self.logger.info(click.style(message, fg="white"))

    def log_debug(self, message: str):
        self.logger.debug(click.style(message, fg="blue"))
