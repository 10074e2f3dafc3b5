import json
import re
from typing import Any, Callable, Dict, Optional

from ..logging import BaseLogger
from ..request.transport import RequestBody
from .path import NOT_FOUND, lookup_path

PLACEHOLDER = re.compile(r"\{\{([^}]+)\}\}")


def to_text(value: Any) -> str:
    """Text form of a context value: strings as-is, everything else as JSON."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)


class TemplateRenderer:
    """Substitutes {{dotted.path}} placeholders using a flow context.

    Unresolvable placeholders are left untouched.
    """
    
    def __init__(self, logger: BaseLogger):
        """
        Initialize the template renderer.
        
        Args:
            logger: Logger instance for reporting unresolved placeholders
        """
        self.logger = logger
    
    def render_template(
        self,
        template_str: str,
        context: Dict[str, Any],
        escape: Optional[Callable[[str], str]] = None
    ) -> str:
        """
        Render a template string with the given context.
        
        Args:
            template_str: The template string to render
            context: The flow context
            escape: Optional function applied to every substituted value
            
        Returns:
            str: The rendered string
        """
        if not template_str or "{{" not in template_str:
            return template_str

        def substitute(match: re.Match) -> str:
            key = match.group(1).strip()
            try:
                value = lookup_path(context, key)
            except ValueError:
                value = NOT_FOUND
            if value is NOT_FOUND or value is None:
                self.logger.log_debug(f"Unresolved placeholder '{match.group(0)}' left unchanged")
                return match.group(0)
            text = to_text(value)
            return escape(text) if escape else text

        return PLACEHOLDER.sub(substitute, template_str)

    def render_headers(self, headers: Dict[str, str], context: Dict[str, Any]) -> Dict[str, str]:
        """Render every header value."""
        return {name: self.render_template(value, context) for name, value in headers.items()}

    def render_body(self, body: RequestBody, context: Dict[str, Any]) -> RequestBody:
        """
        Render a request body. Structured bodies are serialized, rendered and
        parsed back so placeholders behave the same as in string bodies.
        
        Raises:
            ValueError: If a structured body is not valid JSON after rendering
        """
        if body is None:
            return None
        if isinstance(body, str):
            return self.render_template(body, context)

        serialized = json.dumps(body)
        rendered = self.render_template(serialized, context, escape=_json_string_escape)
        try:
            return json.loads(rendered)
        except json.JSONDecodeError as e:
            raise ValueError(f"Rendered body is not valid JSON: {str(e)}")


def _json_string_escape(text: str) -> str:
    # Placeholders in serialized JSON always sit inside a string literal
    return json.dumps(text)[1:-1]
