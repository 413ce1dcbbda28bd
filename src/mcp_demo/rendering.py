"""
Text rendering helpers shared by tool results and prompt templates.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def stringify(value: Any) -> str:
    """
    Return the string form a JSON client expects for ``value``.

    Integral floats drop the fractional part (``2.0`` -> ``"2"``), booleans
    are lower-case and None renders as an empty string.

    Example:
        >>> stringify(6 / 3)
        '2'
        >>> stringify(0.5)
        '0.5'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def render_template(template: str, arguments: Mapping[str, Any]) -> str:
    """
    Substitute every ``{{key}}`` placeholder with the matching argument.

    Placeholders without an argument render as an empty string.

    Example:
        >>> render_template("Hello, {{name}}!", {"name": "Ada"})
        'Hello, Ada!'
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda match: stringify(arguments.get(match.group(1))), template
    )
