"""
Resource methods for the demo MCP server.

- resources/list: rescan the roots and describe every readable file
- resources/read: read one file, if it lies under a configured root
"""

from __future__ import annotations

from typing import Any

from mcp_demo.context import RequestContext


async def handle_resources_list(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """Return ``{"resources": [...]}``; the roots are scanned on every call."""
    return {
        "resources": [resource.to_dict() for resource in ctx.state.scanner.list()]
    }


async def handle_resources_read(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """
    Read a resource.

    Args:
        ctx: The request context.
        params: ``{"uri": "file://<absolute path>"}``.

    Returns:
        ``{"contents": [{"mimeType", "uri", "text"}]}``.

    Raises:
        InvalidArgumentError: If the URI is missing or not a file URI.
        BoundaryViolationError: If the file is outside the configured roots.
        ResourceReadError: If the file cannot be read.
    """
    return {"contents": [ctx.state.scanner.read(params.get("uri"))]}
