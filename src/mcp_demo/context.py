"""
Request context for the demo MCP server.

This module defines:
- ServerState: the read-only tables every handler consults (descriptors,
  validators, resource scanner, configuration), built once at startup
- RequestContext: the context of a single JSON-RPC call, including the
  notification sink handlers use to emit or schedule notifications
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from mcp_demo.config import AppConfig
    from mcp_demo.descriptors import DescriptorTables
    from mcp_demo.protocol import JSONRPCRequest, RequestId
    from mcp_demo.resources import ResourceScanner
    from mcp_demo.validation import ValidatorRegistry


class NotificationSink(Protocol):
    """Outgoing notification channel supplied by the server."""

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Write a notification immediately."""
        ...

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Run ``callback`` once after ``delay`` seconds; the handle can cancel it."""
        ...


@dataclass(frozen=True)
class ServerState:
    """
    Process-wide read-only state shared by all handlers.

    Attributes:
        config: Application configuration.
        descriptors: Tool and prompt tables.
        validators: Compiled input-schema validators.
        scanner: Resource scanner over the configured roots.
    """

    config: AppConfig
    descriptors: DescriptorTables
    validators: ValidatorRegistry
    scanner: ResourceScanner


@dataclass
class RequestContext:
    """
    Encapsulates the context of a single JSON-RPC call.

    Attributes:
        method: Method name (e.g., "tools/call").
        request_id: Request identifier, None for notifications.
        state: Shared ServerState.
        sink: Notification sink for the current connection.
        is_notification: True when no reply will be written.
        timestamp: When the request was received (UTC).
    """

    method: str
    request_id: RequestId
    state: ServerState
    sink: NotificationSink
    is_notification: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification through the sink."""
        self.sink.notify(method, params)

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Schedule a deferred callback through the sink."""
        return self.sink.schedule(delay, callback)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the context to a dictionary for logging.

        Returns:
            Dictionary with context information.
        """
        return {
            "method": self.method,
            "request_id": self.request_id,
            "is_notification": self.is_notification,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_request(
        cls,
        request: JSONRPCRequest,
        state: ServerState,
        sink: NotificationSink,
    ) -> RequestContext:
        """
        Create a RequestContext from a parsed JSON-RPC request.

        Args:
            request: The parsed JSONRPCRequest.
            state: Shared ServerState.
            sink: Notification sink.

        Returns:
            A RequestContext instance for the request.
        """
        return cls(
            method=request.method,
            request_id=request.id,
            state=state,
            sink=sink,
            is_notification=request.is_notification,
        )
