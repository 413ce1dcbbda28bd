"""
Error types for the demo MCP server.

This module defines the ToolError base class and subclasses for domain-specific errors.
Method handlers raise ToolError (or subclasses) instead of building JSON-RPC error
objects directly; the protocol layer maps each error_code to a JSON-RPC error code.
"""

from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """
    Base exception class for method handler errors.

    ToolError instances are caught at the entry layer and mapped to JSON-RPC
    errors using ``mcp_demo.protocol.ERROR_CODE_MAP``.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "not_found", "domain", "boundary_violation", "read_failed", "internal").
        message: Human-readable error message.
        details: Structured details sent as the JSON-RPC error ``data`` field.

    Example:
        >>> raise ToolError(
        ...     error_code="invalid_argument",
        ...     message="Invalid parameters",
        ...     details={"expected": "numbers a,b"},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize a ToolError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for logging.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(ToolError):
    """
    Error raised when a method receives missing or wrongly typed parameters.

    The details should always say what was expected (e.g. ``expected``,
    ``allowed``, ``required`` or schema ``errors``).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InvalidArgumentError."""
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class NotFoundError(ToolError):
    """Error raised for an unknown method, tool or prompt."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a NotFoundError."""
        super().__init__(error_code="not_found", message=message, details=details)


class DomainError(ToolError):
    """
    Error raised when the arguments are well-formed but the operation is undefined.

    Division by zero is the canonical case. It is kept apart from
    InvalidArgumentError so callers can tell the two apart by code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a DomainError."""
        super().__init__(error_code="domain", message=message, details=details)


class BoundaryViolationError(ToolError):
    """Error raised when a resource path lies outside every configured root."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a BoundaryViolationError."""
        super().__init__(
            error_code="boundary_violation", message=message, details=details
        )


class ResourceReadError(ToolError):
    """Error raised when a resource inside the roots cannot be read."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a ResourceReadError."""
        super().__init__(error_code="read_failed", message=message, details=details)


class InternalError(ToolError):
    """
    Error raised for unexpected internal errors.

    This error maps to the "internal" error code and should be used for
    unexpected exceptions that should be logged with full stack traces.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InternalError."""
        super().__init__(error_code="internal", message=message, details=details)
