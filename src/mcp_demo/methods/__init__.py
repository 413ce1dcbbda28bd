"""
JSON-RPC method handlers for the demo MCP server.

Modules:
- lifecycle: initialize
- tools: tools/list, tools/call
- resources: resources/list, resources/read
- prompts: prompts/list, prompts/get
"""

from mcp_demo.methods.lifecycle import handle_initialize
from mcp_demo.methods.prompts import handle_prompts_get, handle_prompts_list
from mcp_demo.methods.resources import handle_resources_list, handle_resources_read
from mcp_demo.methods.tools import handle_tools_call, handle_tools_list
from mcp_demo.routing import MethodRegistry

METHOD_TABLE = {
    "initialize": handle_initialize,
    "tools/list": handle_tools_list,
    "tools/call": handle_tools_call,
    "resources/list": handle_resources_list,
    "resources/read": handle_resources_read,
    "prompts/list": handle_prompts_list,
    "prompts/get": handle_prompts_get,
}


def create_method_registry() -> MethodRegistry:
    """Return a MethodRegistry holding every method this server answers."""
    registry = MethodRegistry()
    for name, handler in METHOD_TABLE.items():
        registry.register(name, handler)
    return registry


__all__ = [
    "METHOD_TABLE",
    "create_method_registry",
    "handle_initialize",
    "handle_prompts_get",
    "handle_prompts_list",
    "handle_resources_list",
    "handle_resources_read",
    "handle_tools_call",
    "handle_tools_list",
]
