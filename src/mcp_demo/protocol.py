"""
JSON-RPC 2.0 protocol handling for the demo MCP server.

This module implements JSON-RPC 2.0 request parsing and response formatting
for the newline-delimited stdio transport.

Features:
- JSON-RPC 2.0 request parsing (requests and notifications)
- JSON-RPC 2.0 response and notification formatting
- ToolError to JSON-RPC error code mapping
- Graceful handling of malformed lines

Error Code Mapping:
- -32700: Parse error (malformed JSON)
- -32600: Invalid Request (the line is JSON but not an object)
- -32601: Method not found (unknown method, tool or prompt)
- -32602: Invalid params (parameter validation failed)
- -32603: Internal error (unexpected exception)
- -32000: Domain error (division by zero)
- -32001: Resource outside the configured roots
- -32002: Resource read failure
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from mcp_demo.errors import ToolError

RequestId = str | int | float | None

# =============================================================================
# JSON-RPC Error Codes
# =============================================================================

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server error codes
DOMAIN_ERROR = -32000
BOUNDARY_VIOLATION = -32001
RESOURCE_READ_FAILED = -32002

ERROR_CODE_MAP: dict[str, int] = {
    "invalid_argument": INVALID_PARAMS,
    "not_found": METHOD_NOT_FOUND,
    "domain": DOMAIN_ERROR,
    "boundary_violation": BOUNDARY_VIOLATION,
    "read_failed": RESOURCE_READ_FAILED,
    "internal": INTERNAL_ERROR,
}

# Default error code for unmapped error codes
DEFAULT_SERVER_ERROR = INTERNAL_ERROR


# =============================================================================
# Data Classes
# =============================================================================


class JSONRPCError(Exception):
    """
    Represents a JSON-RPC 2.0 error object.

    This class is both an Exception (so it can be raised) and a data container
    for JSON-RPC error information.

    Attributes:
        code: Integer JSON-RPC 2.0 error code.
        message: Human-readable error message.
        data: Optional structured error data.
        request_id: Id of the offending request, when it could be read.
        notification: True when the offending message carried no id, in
            which case no error must be written back.
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: Any | None = None,
        *,
        request_id: RequestId = None,
        notification: bool = False,
    ) -> None:
        """
        Initialize a JSONRPCError.

        Args:
            code: Integer error code.
            message: Human-readable error message.
            data: Optional structured error data.
            request_id: Id of the request the error belongs to.
            notification: Whether the offending message was a notification.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.request_id = request_id
        self.notification = notification

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and optionally data.
        """
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"JSONRPCError(code={self.code}, "
            f"message={self.message!r}, "
            f"data={self.data!r})"
        )


@dataclass
class JSONRPCRequest:
    """
    Represents a parsed JSON-RPC 2.0 request or notification.

    Attributes:
        jsonrpc: Protocol version ("2.0").
        id: Request identifier (string or number; may be null).
        method: The method to invoke (empty string when the message had none).
        params: Parameters for the method (empty dict when absent).
        is_notification: True when the message carried no ``id`` member at all.
    """

    jsonrpc: str
    id: RequestId
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    is_notification: bool = False


@dataclass
class JSONRPCResponse:
    """
    Represents a JSON-RPC 2.0 response.

    Either result or error must be present, but not both.

    Attributes:
        jsonrpc: Protocol version (always "2.0").
        id: Request identifier (matches request, or null for parse errors).
        result: Success result (if not an error).
        error: Error object (if an error occurred).
    """

    jsonrpc: str
    id: RequestId
    result: Any | None = None
    error: JSONRPCError | None = None

    @property
    def is_error(self) -> bool:
        """Check if this is an error response."""
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the response to a dictionary for JSON serialization.

        Returns:
            Dictionary with jsonrpc, id, and either result or error.
        """
        response: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
        }
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        """
        Serialize the response to a JSON string.

        Returns:
            JSON string representation of the response.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False)


@dataclass
class JSONRPCNotification:
    """
    Represents an outgoing JSON-RPC 2.0 notification (no id, no reply).

    Attributes:
        method: Notification method name.
        params: Notification parameters.
    """

    method: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize the notification to a JSON string."""
        return json.dumps(
            {"jsonrpc": "2.0", "method": self.method, "params": self.params},
            separators=(",", ":"),
            allow_nan=False,
        )


# =============================================================================
# Request Parsing
# =============================================================================


def parse_request(request_json: str) -> JSONRPCRequest:
    """
    Parse a JSON-RPC 2.0 request from one line of input.

    A missing ``jsonrpc`` member is tolerated. A missing or non-string
    ``method`` is kept as an empty method name so that routing reports it as
    an unknown method (or drops it silently for a notification).

    Args:
        request_json: Raw JSON string containing the request.

    Returns:
        Parsed JSONRPCRequest object.

    Raises:
        JSONRPCError: If the line is not JSON, not an object, or carries
            params that are not an object.

    Example:
        >>> request = parse_request('{"jsonrpc":"2.0","id":1,"method":"tools/list"}')
        >>> print(request.method)
        tools/list
    """
    try:
        data = json.loads(request_json)
    except json.JSONDecodeError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message="Parse error",
            data={"message": e.msg},
        ) from e

    if not isinstance(data, dict):
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message="Invalid Request: Request must be a JSON object",
        )

    is_notification = "id" not in data
    request_id = data.get("id")

    jsonrpc = data.get("jsonrpc", "2.0")
    if jsonrpc != "2.0":
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message=f"Invalid Request: jsonrpc must be '2.0', got '{jsonrpc}'",
            request_id=request_id,
            notification=is_notification,
        )

    method = data.get("method")
    if not isinstance(method, str):
        method = ""

    params = data.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise JSONRPCError(
            code=INVALID_PARAMS,
            message="Invalid params: 'params' must be an object",
            data={"expected": "object"},
            request_id=request_id,
            notification=is_notification,
        )

    return JSONRPCRequest(
        jsonrpc="2.0",
        id=request_id,
        method=method,
        params=params,
        is_notification=is_notification,
    )


# =============================================================================
# Response Formatting
# =============================================================================


def format_success_response(
    request_id: RequestId,
    result: Any,
) -> JSONRPCResponse:
    """
    Format a successful JSON-RPC 2.0 response.

    Args:
        request_id: The request ID to include in the response.
        result: The result value to include in the response.

    Returns:
        JSONRPCResponse object representing a success response.

    Example:
        >>> response = format_success_response(1, {"tools": []})
        >>> print(response.to_json())
        {"jsonrpc":"2.0","id":1,"result":{"tools":[]}}
    """
    return JSONRPCResponse(
        jsonrpc="2.0",
        id=request_id,
        result=result,
        error=None,
    )


def format_error_response(
    request_id: RequestId,
    error: JSONRPCError,
) -> JSONRPCResponse:
    """
    Format a JSON-RPC 2.0 error response.

    Args:
        request_id: The request ID (may be None for parse errors).
        error: The JSONRPCError object describing the error.

    Returns:
        JSONRPCResponse object representing an error response.
    """
    return JSONRPCResponse(
        jsonrpc="2.0",
        id=request_id,
        result=None,
        error=error,
    )


# =============================================================================
# ToolError to JSON-RPC Error Mapping
# =============================================================================


def tool_error_to_jsonrpc_error(tool_error: ToolError) -> JSONRPCError:
    """
    Convert a ToolError to a JSONRPCError.

    The error details become the JSON-RPC ``data`` member; an error without
    details carries no ``data`` at all.

    Args:
        tool_error: The ToolError to convert.

    Returns:
        JSONRPCError with appropriate code and structured data.

    Example:
        >>> from mcp_demo.errors import DomainError
        >>> jsonrpc_err = tool_error_to_jsonrpc_error(DomainError("Division by zero"))
        >>> print(jsonrpc_err.code)
        -32000
    """
    jsonrpc_code = ERROR_CODE_MAP.get(tool_error.error_code, DEFAULT_SERVER_ERROR)

    return JSONRPCError(
        code=jsonrpc_code,
        message=tool_error.message,
        data=tool_error.details or None,
    )


def create_internal_error(
    message: str, details: dict[str, Any] | None = None
) -> JSONRPCError:
    """
    Create an internal error for unexpected exceptions.

    Args:
        message: Error message describing what went wrong.
        details: Optional additional details.

    Returns:
        JSONRPCError with code -32603.
    """
    return JSONRPCError(
        code=INTERNAL_ERROR,
        message=message,
        data=details or None,
    )
