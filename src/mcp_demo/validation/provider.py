"""
Schema validator providers.

A provider turns a schema into a CompiledValidator. Two implementations sit
behind the same contract:

- JsonSchemaProvider: backed by the ``jsonschema`` library.
- StructuralProvider: backed by the embedded structural validator.

``select_provider`` picks one once at startup. Handler code only ever sees a
CompiledValidator and never branches on the provider in use.
"""

from __future__ import annotations

import importlib
import math
from collections.abc import Callable
from types import ModuleType
from typing import Any, Protocol

from mcp_demo.logging import get_logger
from mcp_demo.validation.structural import (
    SchemaErrorRecord,
    escape_json_pointer,
    schema_problem,
    validate_against_schema,
)

logger = get_logger(__name__)


class SchemaCompileError(Exception):
    """Raised when a schema cannot be compiled into a validator."""


class ProviderUnavailableError(RuntimeError):
    """Raised when a provider's backing library cannot be loaded."""


class CompiledValidator:
    """
    A validator compiled from one schema.

    Calling the validator returns True or False and stores the error records
    of that call in ``errors`` (None after a successful call).

    Example:
        >>> validator = StructuralProvider().compile({"type": "string"})
        >>> validator(3)
        False
        >>> validator.errors[0]["keyword"]
        'type'
    """

    def __init__(
        self,
        schema: dict[str, Any],
        check: Callable[[Any], list[SchemaErrorRecord]],
    ) -> None:
        self.schema = schema
        self._check = check
        self.errors: list[SchemaErrorRecord] | None = None

    def __call__(self, data: Any) -> bool:
        errors = self._check(data)
        self.errors = errors or None
        return not errors


class ValidatorProvider(Protocol):
    """Contract shared by every provider."""

    name: str

    def compile(self, schema: dict[str, Any]) -> CompiledValidator:
        """Compile ``schema`` or raise SchemaCompileError."""
        ...


class StructuralProvider:
    """Provider backed by the embedded structural validator."""

    name = "structural"

    def compile(self, schema: dict[str, Any]) -> CompiledValidator:
        if not isinstance(schema, dict):
            raise SchemaCompileError(
                f"Schema must be an object, got {type(schema).__name__}"
            )
        problem = schema_problem(schema)
        if problem:
            raise SchemaCompileError(f"Invalid schema: {problem}")

        def check(data: Any) -> list[SchemaErrorRecord]:
            errors: list[SchemaErrorRecord] = []
            validate_against_schema(data, schema, "", errors)
            return errors

        return CompiledValidator(schema, check)


class JsonSchemaProvider:
    """
    Provider backed by the ``jsonschema`` library.

    The ``number`` type is narrowed to reject NaN so both providers accept
    exactly the same instances. Errors are normalised into SchemaErrorRecords.
    """

    name = "jsonschema"

    def __init__(self, module: ModuleType | None = None) -> None:
        """
        Load the jsonschema library.

        Args:
            module: Pre-imported jsonschema module (mainly for tests).

        Raises:
            ProviderUnavailableError: If jsonschema is missing or lacks the
                API this provider relies on.
        """
        try:
            jsonschema = module or importlib.import_module("jsonschema")
            self._validator_for = jsonschema.validators.validator_for
            self._extend = jsonschema.validators.extend
            self._schema_error = jsonschema.exceptions.SchemaError
        except (ImportError, AttributeError) as e:
            raise ProviderUnavailableError(f"jsonschema is unavailable: {e}") from e

    def compile(self, schema: dict[str, Any]) -> CompiledValidator:
        if not isinstance(schema, dict):
            raise SchemaCompileError(
                f"Schema must be an object, got {type(schema).__name__}"
            )

        base_cls = self._validator_for(schema)
        try:
            base_cls.check_schema(schema)
        except self._schema_error as e:
            raise SchemaCompileError(e.message) from e

        def is_number(checker: Any, instance: Any) -> bool:
            if not base_cls.TYPE_CHECKER.is_type(instance, "number"):
                return False
            return not (isinstance(instance, float) and math.isnan(instance))

        validator_cls = self._extend(
            base_cls,
            type_checker=base_cls.TYPE_CHECKER.redefine("number", is_number),
        )
        validator = validator_cls(schema)

        def check(data: Any) -> list[SchemaErrorRecord]:
            return _normalise_errors(validator.iter_errors(data))

        return CompiledValidator(schema, check)


def _normalise_errors(raw_errors: Any) -> list[SchemaErrorRecord]:
    records: list[SchemaErrorRecord] = []
    # jsonschema yields one "required" error per missing key, in schema order
    missing_by_path: dict[str, list[str]] = {}

    for error in raw_errors:
        path = "".join(f"/{escape_json_pointer(str(part))}" for part in error.absolute_path)
        keyword = error.validator

        if keyword == "required":
            if path not in missing_by_path:
                missing_by_path[path] = [
                    key for key in error.validator_value if key not in error.instance
                ]
            key = missing_by_path[path].pop(0) if missing_by_path[path] else None
            records.append(
                {
                    "instancePath": path,
                    "keyword": "required",
                    "params": {"missingProperty": key},
                    "message": f"must have required property '{key}'",
                }
            )
        elif keyword == "type":
            records.append(
                {
                    "instancePath": path,
                    "keyword": "type",
                    "params": {"type": error.validator_value},
                    "message": f"must be {error.validator_value}",
                }
            )
        elif keyword == "enum":
            records.append(
                {
                    "instancePath": path,
                    "keyword": "enum",
                    "params": {"allowedValues": list(error.validator_value)},
                    "message": "must be equal to one of the allowed values",
                }
            )
        else:
            records.append(
                {
                    "instancePath": path,
                    "keyword": keyword,
                    "params": {keyword: error.validator_value},
                    "message": error.message,
                }
            )

    return records


def select_provider(preference: str = "auto") -> ValidatorProvider:
    """
    Pick the validator provider for this process.

    Args:
        preference: "auto" (jsonschema when loadable, else structural),
            "jsonschema" or "structural".

    Returns:
        The selected provider.

    Raises:
        ProviderUnavailableError: If "jsonschema" is forced but cannot be loaded.
        ValueError: For an unknown preference.
    """
    if preference == "structural":
        return StructuralProvider()
    if preference == "jsonschema":
        return JsonSchemaProvider()
    if preference != "auto":
        raise ValueError(f"Unknown validator provider: {preference}")

    try:
        return JsonSchemaProvider()
    except ProviderUnavailableError as e:
        logger.warning(
            "jsonschema not available; using the embedded structural validator",
            extra={"error": str(e)},
        )
        return StructuralProvider()
