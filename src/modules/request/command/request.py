import sys
from typing import Any, Dict

from ...logging import BaseLogger
from ...flow.errors import ConfigError
from ...flow.load_test import LoadTest
from ...flow.validator import RequestModeValidator
from ...flow.command.run import RunCommand, EXIT_CONFIG_ERROR


class RequestCommand:
    """Command class for load testing a single HTTP request."""
    
    SUPPORTED_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'HEAD', 'OPTIONS']
    
    def __init__(self, logger: BaseLogger):
        """
        Initialize the request command.
        
        Args:
            logger: Logger instance
        """
        self.logger = logger

    def _log_request_details(self, options: Dict[str, Any]) -> None:
        self.logger.log_debug("Request Details:")
        self.logger.log_debug(f"Method: {options.get('method')}")
        self.logger.log_debug(f"URL: {options.get('url')}")
        if options.get("headers"):
            self.logger.log_debug(f"Headers: {options['headers']}")
        if options.get("data"):
            self.logger.log_debug(f"Data: {options['data']}")

    def run(self, options: Dict[str, Any]) -> None:
        """
        Run the same request `number` times in waves of `concurrent` requests.
        
        Args:
            options: Raw CLI options; 'data' and 'headers' are JSON strings
        """
        self._log_request_details(options)
        try:
            config = RequestModeValidator.validate_and_load(options)
            load_test = LoadTest.create(config.to_flow(), self.logger, label="Requests")
        except ConfigError as err:
            self.logger.log_error(f"Configuration error: {str(err)}")
            sys.exit(EXIT_CONFIG_ERROR)

        exit_code = RunCommand(self.logger).execute_load_test(load_test)
        if exit_code:
            sys.exit(exit_code)
