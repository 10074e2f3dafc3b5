import asyncio
import sys
from typing import Any, Dict, Optional, TextIO, Tuple
from ...logging import BaseLogger
from ..errors import ConfigError
from ..load_test import LoadTest
from ..metrics import MetricsSnapshot
from ..predicates import load_predicate_modules

EXIT_CONFIG_ERROR = 1
EXIT_THRESHOLD_NOT_MET = 2


class RunCommand:
    """Command class for handling flow load test execution."""
    
    def __init__(self, logger: BaseLogger):
        """
        Initialize the run command.
        
        Args:
            logger: Logger instance
        """
        self.logger = logger
        
    def _read_flow_content(self, flow_file: Optional[TextIO]) -> str:
        """Read flow content from file or stdin."""
        if flow_file is None:
            if sys.stdin.isatty():
                raise ConfigError("Please provide a flow file or pipe YAML content")
            return sys.stdin.read()
        
        content = flow_file.read()
        flow_file.seek(0)  # Reset file pointer for potential reuse
        return content

    def _log_summary(self, snapshot: MetricsSnapshot) -> None:
        """Log execution timing information."""
        self.logger.log_info(
            f"Execution completed in {snapshot.duration_ms / 1000:.2f} seconds "
            f"({snapshot.flows.success_count}/{snapshot.total_instances} successful)"
        )

    def execute_load_test(self, load_test: LoadTest) -> int:
        """Run a prepared load test and return the process exit code."""
        try:
            snapshot = asyncio.run(load_test.execute())
        except KeyboardInterrupt:
            self.logger.log_info("Execution interrupted by user")
            return 130
        self._log_summary(snapshot)
        if not load_test.threshold_met(snapshot):
            self.logger.log_error(
                f"Success rate {snapshot.flows.success_rate:.2f}% is below the threshold "
                f"of {load_test.config.success_threshold}%"
            )
            return EXIT_THRESHOLD_NOT_MET
        return 0

    def run(
        self,
        flow_file: Optional[TextIO],
        overrides: Dict[str, Any],
        predicate_modules: Tuple[str, ...] = ()
    ) -> None:
        """
        Run the flow command and exit with its status.
        
        Args:
            flow_file: File containing the flow YAML or JSON
            overrides: Settings that replace the file's values
            predicate_modules: Modules to import so their custom predicates register
        """
        try:
            load_predicate_modules(predicate_modules)
            content = self._read_flow_content(flow_file)
            load_test = LoadTest.from_yaml(content, self.logger, overrides)
        except ConfigError as err:
            self.logger.log_error(f"Configuration error: {str(err)}")
            sys.exit(EXIT_CONFIG_ERROR)

        exit_code = self.execute_load_test(load_test)
        if exit_code:
            sys.exit(exit_code)
