"""
Prompt methods for the demo MCP server.

- prompts/list: name, title, description and input schema of each prompt
- prompts/get: check the arguments and render the template
"""

from __future__ import annotations

from typing import Any

from mcp_demo.context import RequestContext
from mcp_demo.errors import InvalidArgumentError, NotFoundError
from mcp_demo.rendering import render_template
from mcp_demo.validation import describe_errors


async def handle_prompts_list(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """Return ``{"prompts": [...]}`` without the template text."""
    return {
        "prompts": [prompt.to_dict() for prompt in ctx.state.descriptors.prompts]
    }


async def handle_prompts_get(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """
    Render a prompt.

    Required arguments are checked for presence first, so the error names
    them; the compiled validator then checks the argument values.

    Args:
        ctx: The request context.
        params: ``{"name": str, "arguments": object}``.

    Returns:
        ``{"prompt": {"name", "messages": [{"role": "system", "content"}]}}``.

    Raises:
        NotFoundError: If the prompt is unknown.
        InvalidArgumentError: If arguments are missing or invalid.
    """
    name = params.get("name")
    prompt = ctx.state.descriptors.get_prompt(name) if isinstance(name, str) else None
    if prompt is None:
        raise NotFoundError(
            message=f"Prompt not found: {name}",
            details={"prompt": name},
        )

    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidArgumentError(
            message="Invalid prompt arguments",
            details={"expected": "arguments must be an object"},
        )

    required = prompt.required_arguments
    missing = [key for key in required if key not in arguments]
    if missing:
        raise InvalidArgumentError(
            message="Missing arguments for prompt",
            details={"required": required, "missing": missing},
        )

    validator = ctx.state.validators.get_prompt_validator(prompt.name)
    if validator is not None and not validator(arguments):
        raise InvalidArgumentError(
            message="Invalid prompt arguments",
            details=describe_errors(validator.errors),
        )

    return {
        "prompt": {
            "name": prompt.name,
            "messages": [
                {"role": "system", "content": render_template(prompt.template, arguments)}
            ],
        }
    }
