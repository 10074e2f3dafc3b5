import json
from typing import Any, Dict, List
from pydantic import ValidationError
from pydantic_core import ErrorDetails
import yaml
from .config import FlowConfig, RequestModeConfig
from .errors import ConfigError

def _build_validation_error_message(errors: List[ErrorDetails]) -> str:
    """Build a readable message from a list of Pydantic validation errors."""
    messages = []
    for error in errors:
        field_path = " -> ".join(str(loc) for loc in error['loc'])
        msg = error['msg']
        messages.append(f"Error in field '{field_path}': {msg}")

    return "\n".join(messages)

class FlowFileValidator:
    """Validates flow file content and creates FlowConfig instances."""

    @classmethod
    def validate_and_load(cls, content: str, overrides: Dict[str, Any] | None = None) -> FlowConfig:
        """
        Validate YAML (or JSON) content and create a FlowConfig instance.
        
        Args:
            content: The flow file content. Either a list of steps or an object with a 'flow' key
            overrides: Top-level settings that replace the file's values (e.g. from CLI options)
            
        Returns:
            FlowConfig: The validated flow configuration
            
        Raises:
            ConfigError: If the content is invalid
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML format: {str(e)}")

        if isinstance(data, list):
            data = {"flow": data}
        if not isinstance(data, dict):
            raise ConfigError("Flow configuration is required and must be a non-empty list of steps")

        data = {**data, **{key: value for key, value in (overrides or {}).items() if value is not None}}
        return cls.validate_data(data)

    @classmethod
    def validate_data(cls, data: Dict[str, Any]) -> FlowConfig:
        """Validate an already parsed flow configuration."""
        try:
            return FlowConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(_build_validation_error_message(e.errors()))


class RequestModeValidator:
    """Validates single-request mode options."""

    @classmethod
    def validate_and_load(cls, options: Dict[str, Any]) -> RequestModeConfig:
        """
        Create a RequestModeConfig from CLI options. 'data' and 'headers' may be JSON strings.

        Raises:
            ConfigError: If an option is missing or not valid JSON
        """
        values = {key: value for key, value in options.items() if value is not None}
        for key in ("data", "headers"):
            if isinstance(values.get(key), str):
                values[key] = cls._decode_json(key, values[key])
        try:
            return RequestModeConfig.model_validate(values)
        except ValidationError as e:
            raise ConfigError(_build_validation_error_message(e.errors()))

    @staticmethod
    def _decode_json(name: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Option '{name}' is not valid JSON: {str(e)}")
