"""Tool registry shared by the file tool handlers."""
import json
from typing import Any, Callable, Dict, Literal, Protocol

from ..logging import get_logger

logger = get_logger(__name__)


class ToolExecutor(Protocol):
    """Protocol for tool executor implementations.

    A tool executor takes a tool name and input parameters, runs the
    matching handler, and returns its JSON string result.
    """

    def __call__(self, tool_name: str, tool_input: Dict[str, Any]) -> str:
        ...


class ToolRegistry:
    """Registry mapping tool names to handlers and their schemas.

    Handlers registered here always answer with a JSON string, including
    when the tool is unknown or called with bad arguments.
    """

    def __init__(self):
        self.tools: Dict[str, Callable[..., str]] = {}
        self.schemas: list[dict] = []

    def register(self, name: str, func: Callable[..., str], schema: dict) -> None:
        """Register a tool with its function and schema.

        Raises:
            ValueError: If ``name`` is already registered.
        """
        if name in self.tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self.tools[name] = func
        self.schemas.append(schema)

    def register_tools(self, tools: list[Callable[..., str]]) -> None:
        """Register functions carrying a ``__tool_schema__`` attribute.

        Raises:
            ValueError: If a function is missing the ``__tool_schema__`` attribute.
        """
        for func in tools:
            if not hasattr(func, "__tool_schema__"):
                raise ValueError(
                    f"Function '{func.__name__}' is missing __tool_schema__ attribute."
                )
            schema = func.__tool_schema__
            self.register(schema["name"], func, schema)

    def execute(self, tool_name: str, tool_input: Dict[str, Any]) -> str:
        """Execute a registered tool by name."""
        if tool_name not in self.tools:
            return json.dumps({"status": "error", "error": f"Unknown tool: {tool_name}"})

        try:
            return self.tools[tool_name](**tool_input)
        except TypeError as e:
            logger.warning("tool_bad_arguments", tool=tool_name, error=str(e))
            return json.dumps(
                {
                    "status": "error",
                    "error": f"Invalid arguments for {tool_name}: {e}",
                    "hint": "Check the tool's input schema for required arguments.",
                }
            )

    def get_schemas(self, schema_type: Literal["anthropic", "openai"] = "anthropic") -> list[dict]:
        """Get registered tool schemas in the requested format.

        Args:
            schema_type:
                - ``anthropic`` returns the raw schema dictionaries (default)
                - ``openai`` wraps each schema as an OpenAI function-call payload
        """
        if schema_type == "anthropic":
            return self.schemas.copy()

        if schema_type == "openai":
            return [
                {
                    "type": "function",
                    "function": {
                        "name": schema["name"],
                        "description": schema["description"],
                        "parameters": schema["input_schema"],
                    },
                }
                for schema in self.schemas
            ]

        raise ValueError(f"Unsupported schema_type '{schema_type}'. Expected 'anthropic' or 'openai'.")
