"""
Method routing for the demo MCP server.

This module provides:
- MethodRegistry: a registry mapping JSON-RPC method names to handlers
- Handler dispatch with error handling
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from mcp_demo.errors import InternalError, NotFoundError, ToolError

if TYPE_CHECKING:
    from mcp_demo.context import RequestContext

# A handler receives the request context and params and returns the result
MethodHandler = Callable[["RequestContext", dict[str, Any]], Awaitable[Any]]


class MethodRegistry:
    """
    Registry for mapping method names to handler functions.

    Example:
        >>> registry = MethodRegistry()
        >>> registry.register("tools/list", handle_tools_list)
        >>> result = await registry.invoke("tools/list", ctx, {})
    """

    def __init__(self) -> None:
        """Initialize an empty method registry."""
        self._handlers: dict[str, MethodHandler] = {}

    def register(self, name: str, handler: MethodHandler) -> None:
        """
        Register a handler for a method.

        Args:
            name: JSON-RPC method name (e.g. "resources/read").
            handler: Async function that handles the call.

        Raises:
            ValueError: If a handler is already registered for the name.
        """
        if name in self._handlers:
            raise ValueError(f"Method '{name}' is already registered")
        self._handlers[name] = handler

    def get_handler(self, name: str) -> MethodHandler | None:
        """
        Get the handler for a method by name.

        Args:
            name: Method name to look up.

        Returns:
            The handler function, or None if not found.
        """
        return self._handlers.get(name)

    def list_methods(self) -> list[str]:
        """Return the registered method names in registration order."""
        return list(self._handlers)

    async def invoke(
        self,
        name: str,
        ctx: RequestContext,
        params: dict[str, Any],
    ) -> Any:
        """
        Invoke a method handler by name.

        Args:
            name: Method name to invoke.
            ctx: RequestContext for the request.
            params: Parameters to pass to the handler.

        Returns:
            The handler's return value.

        Raises:
            NotFoundError: If no handler is registered for the method.
            ToolError: If the handler raises one.
            InternalError: If the handler raises anything else.
        """
        handler = self.get_handler(name)
        if handler is None:
            raise NotFoundError(
                message=f"Method not found: {name}",
                details={"method": name},
            )

        try:
            return await handler(ctx, params)
        except ToolError:
            raise
        except Exception as e:
            raise InternalError(
                message="Internal error",
                details={"message": str(e), "exception_type": type(e).__name__},
            ) from e

    def __contains__(self, name: str) -> bool:
        """Check if a method is registered (for 'in' operator)."""
        return name in self._handlers

    def __len__(self) -> int:
        """Return the number of registered methods."""
        return len(self._handlers)
