"""
Lifecycle methods for the demo MCP server.

- initialize: capability handshake; schedules one round of list_changed
  notifications to demonstrate dynamic updates
"""

from __future__ import annotations

from typing import Any

from mcp_demo.context import RequestContext
from mcp_demo.logging import get_logger

logger = get_logger(__name__)

LIST_CHANGED_NOTIFICATIONS: tuple[str, ...] = (
    "notifications/tools/list_changed",
    "notifications/resources/list_changed",
    "notifications/prompts/list_changed",
)


def _send_list_changed(ctx: RequestContext) -> None:
    for method in LIST_CHANGED_NOTIFICATIONS:
        ctx.notify(method, {})


async def handle_initialize(
    ctx: RequestContext, params: dict[str, Any]
) -> dict[str, Any]:
    """
    Handle the initialize handshake.

    The client's ``clientInfo`` is only logged; a missing or malformed value
    is ignored. The reply always carries the fixed protocol version, the
    server identity and ``listChanged`` capabilities for tools, resources and
    prompts.

    Args:
        ctx: The request context.
        params: May contain ``clientInfo`` and ``protocolVersion``.

    Returns:
        ``{"protocolVersion", "serverInfo", "capabilities"}``.
    """
    client_info = params.get("clientInfo")
    if isinstance(client_info, dict):
        logger.info(
            "Client initializing",
            extra={
                "client_name": client_info.get("name"),
                "client_version": client_info.get("version"),
                "client_protocol_version": params.get("protocolVersion"),
            },
        )

    server = ctx.state.config.server
    result = {
        "protocolVersion": server.protocol_version,
        "serverInfo": {"name": server.name, "version": server.version},
        "capabilities": {
            "tools": {"listChanged": True},
            "resources": {"listChanged": True},
            "prompts": {"listChanged": True},
        },
    }

    notifications = ctx.state.config.notifications
    if notifications.list_changed_enabled:
        ctx.schedule(
            notifications.list_changed_delay_seconds,
            lambda: _send_list_changed(ctx),
        )

    return result
