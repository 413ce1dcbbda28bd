"""
Tool methods for the demo MCP server.

- tools/list: the registered tool table, in registration order
- tools/call: validate the arguments and run the tool implementation
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mcp_demo.calculator import call_calculator
from mcp_demo.context import RequestContext
from mcp_demo.errors import InvalidArgumentError, NotFoundError
from mcp_demo.logging import get_logger
from mcp_demo.validation import describe_errors

logger = get_logger(__name__)

ToolImplementation = Callable[[dict[str, Any]], dict[str, Any]]

TOOL_IMPLEMENTATIONS: dict[str, ToolImplementation] = {
    "calculator_arithmetic": call_calculator,
}


async def handle_tools_list(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """Return ``{"tools": [...]}`` for every registered tool."""
    return {"tools": [tool.to_dict() for tool in ctx.state.descriptors.tools]}


async def handle_tools_call(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """
    Invoke a tool.

    Args:
        ctx: The request context.
        params: ``{"name": str, "arguments": object}``.

    Returns:
        The tool result ``{"content": [...], "meta": {...}}``.

    Raises:
        NotFoundError: If the tool is unknown.
        InvalidArgumentError: If the arguments fail validation.
        DomainError: If the tool rejects well-formed arguments (e.g. division by zero).
    """
    name = params.get("name")
    tool = ctx.state.descriptors.get_tool(name) if isinstance(name, str) else None
    implementation = TOOL_IMPLEMENTATIONS.get(name) if tool is not None else None
    if implementation is None:
        raise NotFoundError(
            message=f"Tool not found: {name}",
            details={"tool": name},
        )

    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidArgumentError(
            message="Invalid parameters",
            details={"expected": "arguments must be an object"},
        )

    validator = ctx.state.validators.get_tool_validator(tool.name)
    if validator is not None and not validator(arguments):
        raise InvalidArgumentError(
            message="Invalid parameters",
            details=describe_errors(validator.errors),
        )

    logger.debug("Calling tool", extra={"tool": tool.name})
    return implementation(arguments)
