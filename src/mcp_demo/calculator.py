"""
The built-in ``calculator_arithmetic`` tool.
"""

from __future__ import annotations

import math
import operator
from typing import Any

from mcp_demo.descriptors import ARITHMETIC_OPERATIONS
from mcp_demo.errors import DomainError, InvalidArgumentError
from mcp_demo.rendering import stringify
from mcp_demo.validation.structural import is_number

_OPERATORS = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "div": operator.truediv,
}


def _is_finite_number(value: Any) -> bool:
    # json.loads accepts Infinity, which cannot be written back out
    return is_number(value) and not (isinstance(value, float) and math.isinf(value))


def arithmetic(op: Any, a: Any, b: Any) -> int | float:
    """
    Apply ``op`` to ``a`` and ``b``.

    Args:
        op: One of "add", "sub", "mul", "div".
        a: Left operand.
        b: Right operand.

    Returns:
        The computed value.

    Raises:
        InvalidArgumentError: If an operand is not a number or ``op`` is unknown.
        DomainError: On division by zero or when the result is not a finite
            float.
    """
    if not _is_finite_number(a) or not _is_finite_number(b):
        raise InvalidArgumentError(
            message="Invalid parameters",
            details={"expected": "numbers a,b"},
        )

    func = _OPERATORS.get(op) if isinstance(op, str) else None
    if func is None:
        raise InvalidArgumentError(
            message="Invalid operation",
            details={"allowed": list(ARITHMETIC_OPERATIONS)},
        )

    if op == "div" and b == 0:
        raise DomainError(message="Division by zero")

    try:
        value = func(a, b)
    except OverflowError as e:
        raise DomainError(message="Result out of range", details={"op": op}) from e

    if isinstance(value, float) and not math.isfinite(value):
        raise DomainError(message="Result out of range", details={"op": op})
    return value


def call_calculator(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Run the calculator tool and wrap the value in a tool result.

    Returns:
        ``{"content": [{"type": "text", "text": ...}], "meta": {"value": ...}}``
    """
    value = arithmetic(arguments.get("op"), arguments.get("a"), arguments.get("b"))
    return {
        "content": [{"type": "text", "text": stringify(value)}],
        "meta": {"value": value},
    }
