"""
MCP Server implementation for the demo MCP server.

This module implements the MCPServer class that communicates via JSON-RPC 2.0
over stdio (stdin/stdout), processes one request line at a time, and
dispatches to method handlers.

Request flow per line: Received -> Parsed -> Routed -> Handled -> Replied,
or Errored at any step. Every request with an id gets exactly one reply or
error; notifications never get either.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Callable
from typing import Any, Protocol, TextIO

from mcp_demo.config import AppConfig, load_config
from mcp_demo.context import NotificationSink, RequestContext, ServerState
from mcp_demo.descriptors import load_descriptors
from mcp_demo.errors import InternalError, ToolError
from mcp_demo.logging import get_logger, setup_logging
from mcp_demo.methods import create_method_registry
from mcp_demo.protocol import (
    PARSE_ERROR,
    JSONRPCError,
    JSONRPCNotification,
    RequestId,
    create_internal_error,
    format_error_response,
    format_success_response,
    parse_request,
    tool_error_to_jsonrpc_error,
)
from mcp_demo.resources import ResourceScanner
from mcp_demo.routing import MethodRegistry
from mcp_demo.validation import ValidatorRegistry, select_provider

logger = get_logger(__name__)


class LineReader(Protocol):
    """Anything that yields one line of bytes per call, and b"" at EOF."""

    async def readline(self) -> bytes: ...


def build_state(config: AppConfig) -> ServerState:
    """
    Build the read-only server state from configuration.

    Descriptor tables and validators are built here once; nothing mutates
    them afterwards.

    Args:
        config: Application configuration.

    Returns:
        ServerState shared by every request.
    """
    descriptors = load_descriptors(config)
    provider = select_provider(config.validation.provider)
    validators = ValidatorRegistry.initialize(
        descriptors.tools, descriptors.prompts, provider
    )
    scanner = ResourceScanner(
        config.resources.roots,
        description=config.resources.description,
        default_mime_type=config.resources.default_mime_type,
    )

    logger.info(
        "Server state ready",
        extra={
            "tools_count": len(descriptors.tools),
            "prompts_count": len(descriptors.prompts),
            "validator_provider": provider.name,
            "roots": list(scanner.roots),
        },
    )
    return ServerState(
        config=config,
        descriptors=descriptors,
        validators=validators,
        scanner=scanner,
    )


async def process_request(
    request_json: str,
    registry: MethodRegistry,
    state: ServerState,
    sink: NotificationSink,
) -> str | None:
    """
    Process a single JSON-RPC line and return the response.

    Args:
        request_json: Raw JSON string containing the request.
        registry: MethodRegistry with the method handlers.
        state: Shared ServerState.
        sink: Notification sink handed to the handlers.

    Returns:
        JSON string containing the response, or None for notifications.
    """
    request_id: RequestId = None

    try:
        request = parse_request(request_json)
        request_id = request.id
        ctx = RequestContext.from_request(request, state, sink)

        if request.is_notification:
            if request.method not in registry:
                logger.debug(
                    "Dropping notification for unknown method",
                    extra={"method": request.method},
                )
                return None
            try:
                await registry.invoke(request.method, ctx, request.params)
            except Exception as e:
                logger.warning(
                    "Error processing notification",
                    extra={"method": request.method, "error": str(e)},
                )
            return None

        logger.debug("Handling request", extra=ctx.to_dict())
        result = await registry.invoke(request.method, ctx, request.params)
        return format_success_response(request_id, result).to_json()

    except JSONRPCError as e:
        if e.notification:
            logger.debug(
                "Dropping invalid notification", extra={"error": e.message}
            )
            return None
        if request_id is None:
            request_id = e.request_id
        return format_error_response(request_id, e).to_json()

    except ToolError as e:
        if isinstance(e, InternalError):
            logger.error(
                "Handler failed",
                exc_info=e.__cause__ or e,
                extra={"request_id": request_id, "error": e.to_dict()},
            )
        jsonrpc_error = tool_error_to_jsonrpc_error(e)
        return format_error_response(request_id, jsonrpc_error).to_json()

    except Exception as e:
        logger.exception(
            "Unexpected error processing request",
            extra={"request_id": request_id, "error": str(e)},
        )
        jsonrpc_error = create_internal_error(
            "Internal error",
            details={"message": str(e), "exception_type": type(e).__name__},
        )
        return format_error_response(request_id, jsonrpc_error).to_json()


class MCPServer:
    """
    MCP Server that communicates via JSON-RPC 2.0 over stdio.

    The server reads one request per line from stdin, handles it completely,
    and writes at most one response line to stdout before reading the next.
    It also acts as the notification sink: handlers may write notifications
    directly or schedule them on the event loop.

    Example:
        >>> server = MCPServer(build_state(load_config(cli_args=[])))
        >>> await server.run()

    Attributes:
        state: Shared read-only ServerState.
        registry: MethodRegistry with the method handlers.
        running: Whether the server is currently running.
    """

    def __init__(
        self,
        state: ServerState,
        registry: MethodRegistry | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """
        Initialize the MCP Server.

        Args:
            state: Shared ServerState.
            registry: Optional MethodRegistry. Uses every built-in method if not provided.
            stdin: Optional stdin stream. Uses sys.stdin if not provided.
            stdout: Optional stdout stream. Uses sys.stdout if not provided.
        """
        self.state = state
        self.registry = registry if registry is not None else create_method_registry()
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.running = False
        self._pending: set[asyncio.TimerHandle] = set()

    # -------------------------------------------------------------------------
    # Notification sink
    # -------------------------------------------------------------------------

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Write a notification line."""
        self._write_line(JSONRPCNotification(method, params or {}).to_json())

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """
        Run ``callback`` once after ``delay`` seconds on the running loop.

        Returns:
            The timer handle; cancelling it prevents the callback.
        """
        loop = asyncio.get_running_loop()

        def fire() -> None:
            self._pending.discard(handle)
            try:
                callback()
            except Exception:
                logger.exception("Deferred notification failed")

        handle = loop.call_later(delay, fire)
        self._pending.add(handle)
        return handle

    @property
    def pending_notifications(self) -> int:
        """Number of scheduled callbacks that have not fired yet."""
        return len(self._pending)

    def cancel_pending_notifications(self) -> int:
        """
        Cancel every scheduled callback that has not fired yet.

        Returns:
            The number of callbacks cancelled.
        """
        count = len(self._pending)
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
        return count

    # -------------------------------------------------------------------------
    # Request handling
    # -------------------------------------------------------------------------

    async def handle_request(self, request_json: str) -> str | None:
        """
        Handle a single JSON-RPC request.

        Args:
            request_json: Raw JSON string containing the request.

        Returns:
            JSON string containing the response, or None for notifications.
        """
        return await process_request(request_json, self.registry, self.state, self)

    async def handle_line(self, line: bytes | str) -> None:
        """
        Handle one raw input line and write the response, if any.

        Args:
            line: The line as read from the transport.
        """
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning(
                    "Invalid UTF-8 encoding in request",
                    extra={"error": str(e)},
                )
                error = JSONRPCError(
                    code=PARSE_ERROR,
                    message="Parse error",
                    data={"message": "Invalid request encoding: UTF-8 required"},
                )
                self._write_line(format_error_response(None, error).to_json())
                return

        request_json = line.strip()
        if not request_json:
            return

        response = await self.handle_request(request_json)
        if response:
            self._write_line(response)

    async def serve(self, reader: LineReader) -> None:
        """
        Serve requests from ``reader`` until EOF or stop().

        Args:
            reader: Source of input lines.
        """
        self.running = True
        logger.info(
            "MCP Server starting",
            extra={"methods": self.registry.list_methods()},
        )

        try:
            while self.running:
                line = await reader.readline()
                if not line:
                    break

                try:
                    await self.handle_line(line)
                except Exception as e:
                    logger.exception(
                        "Error in server loop",
                        extra={"error": str(e)},
                    )
                    error = create_internal_error(
                        "Internal error", details={"message": str(e)}
                    )
                    self._write_line(format_error_response(None, error).to_json())
        finally:
            self.running = False
            logger.info("MCP Server stopped")

    async def run(self, *, install_signal_handlers: bool = False) -> None:
        """
        Run the server, reading from stdin and writing to stdout.

        Args:
            install_signal_handlers: Exit immediately on SIGINT/SIGTERM,
                abandoning any scheduled notifications.
        """
        loop = asyncio.get_running_loop()
        if install_signal_handlers:
            self._install_signal_handlers(loop)

        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, self._stdin)

        await self.serve(reader)

    def stop(self) -> None:
        """Stop reading after the current line."""
        self.running = False

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._exit_now, sig)
            except (ValueError, NotImplementedError, RuntimeError):
                # Signal handling not supported on this platform
                pass

    def _exit_now(self, sig: signal.Signals) -> None:
        logger.info(
            "Received shutdown signal",
            extra={"signal": sig.name, "abandoned_notifications": len(self._pending)},
        )
        self.running = False
        raise SystemExit(0)

    def _write_line(self, message_json: str) -> None:
        """Write one message line to stdout."""
        self._stdout.write(message_json + "\n")
        self._stdout.flush()


def create_server(config: AppConfig | None = None) -> MCPServer:
    """
    Create and configure an MCP Server instance.

    Args:
        config: Optional configuration. Uses built-in defaults if not provided.

    Returns:
        Configured MCPServer instance.
    """
    if config is None:
        config = AppConfig()
    return MCPServer(build_state(config))


def main(argv: list[str] | None = None) -> int:
    """
    Console entry point: load configuration and serve stdio until EOF.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Process exit code.
    """
    config = load_config(cli_args=argv)
    setup_logging(config.logging)
    server = create_server(config)
    try:
        asyncio.run(server.run(install_signal_handlers=True))
    except KeyboardInterrupt:
        pass
    return 0
