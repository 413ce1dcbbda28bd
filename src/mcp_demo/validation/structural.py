"""
Embedded structural validator.

Checks a value against the schema subset used by the descriptor tables:
``type`` (object, string, number), ``required``, ``enum`` and nested
``properties``. Error records use the same shape and messages as the
jsonschema-backed provider so callers cannot tell the two apart.
"""

from __future__ import annotations

import math
from typing import Any

SchemaErrorRecord = dict[str, Any]


def escape_json_pointer(token: str) -> str:
    """Escape one JSON Pointer reference token (``~`` -> ``~0``, ``/`` -> ``~1``)."""
    return token.replace("~", "~0").replace("/", "~1")


def is_number(value: Any) -> bool:
    """Return True for JSON numbers: int or float, excluding bool and NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _json_equal(left: Any, right: Any) -> bool:
    # JSON equality: true is not 1, but 1 equals 1.0
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def _type_error(path: str, expected: str) -> SchemaErrorRecord:
    return {
        "instancePath": path,
        "keyword": "type",
        "params": {"type": expected},
        "message": f"must be {expected}",
    }


def schema_problem(schema: Any, path: str = "#") -> str | None:
    """
    Describe the first malformed part of ``schema``, or return None.

    Only the keywords the validator reads are checked: ``properties`` must map
    names to schemas, ``required`` and ``enum`` must be arrays.
    """
    if not isinstance(schema, dict):
        return f"{path}: schema must be an object, got {type(schema).__name__}"

    for keyword in ("required", "enum"):
        if keyword in schema and not isinstance(schema[keyword], list):
            return f"{path}/{keyword}: must be an array"

    properties = schema.get("properties")
    if properties is None:
        return None
    if not isinstance(properties, dict):
        return f"{path}/properties: must be an object"
    for key, child_schema in properties.items():
        problem = schema_problem(
            child_schema, f"{path}/properties/{escape_json_pointer(key)}"
        )
        if problem:
            return problem
    return None


def validate_against_schema(
    value: Any,
    schema: dict[str, Any] | None,
    path: str = "",
    errors: list[SchemaErrorRecord] | None = None,
) -> bool:
    """
    Validate ``value`` against ``schema`` depth-first, appending to ``errors``.

    Args:
        value: The instance to check.
        schema: Schema in the supported subset; None accepts anything.
        path: JSON Pointer of ``value`` within the root instance.
        errors: List that receives SchemaErrorRecords.

    Returns:
        True when no error was found at or below ``path``.
    """
    if errors is None:
        errors = []
    if not schema:
        return True

    schema_type = schema.get("type")

    if schema_type == "object":
        if not isinstance(value, dict):
            errors.append(_type_error(path, "object"))
            return False

        valid = True
        required = schema.get("required")
        for key in required if isinstance(required, list) else []:
            if key not in value:
                errors.append(
                    {
                        "instancePath": path,
                        "keyword": "required",
                        "params": {"missingProperty": key},
                        "message": f"must have required property '{key}'",
                    }
                )
                valid = False

        for key, child_schema in (schema.get("properties") or {}).items():
            if key in value:
                child_path = f"{path}/{escape_json_pointer(key)}"
                if not validate_against_schema(value[key], child_schema, child_path, errors):
                    valid = False
        return valid

    valid = True
    if schema_type == "number" and not is_number(value):
        errors.append(_type_error(path, "number"))
        valid = False
    elif schema_type == "string" and not isinstance(value, str):
        errors.append(_type_error(path, "string"))
        valid = False

    allowed = schema.get("enum")
    if allowed is not None and not any(_json_equal(value, member) for member in allowed):
        errors.append(
            {
                "instancePath": path,
                "keyword": "enum",
                "params": {"allowedValues": list(allowed)},
                "message": "must be equal to one of the allowed values",
            }
        )
        valid = False

    return valid


def validate(
    value: Any, schema: dict[str, Any] | None
) -> tuple[bool, list[SchemaErrorRecord]]:
    """
    Validate ``value`` against ``schema``.

    Returns:
        Tuple of (is_valid, errors).

    Example:
        >>> validate({"a": "x"}, {"type": "object", "properties": {"a": {"type": "number"}}})
        (False, [{'instancePath': '/a', 'keyword': 'type', 'params': {'type': 'number'}, 'message': 'must be number'}])
    """
    errors: list[SchemaErrorRecord] = []
    is_valid = validate_against_schema(value, schema, "", errors)
    return is_valid, errors
