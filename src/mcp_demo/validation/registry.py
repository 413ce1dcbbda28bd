"""
Validator registry: one compiled validator per tool and prompt input schema.

Validators are compiled once at startup and looked up by exact name.
A missing validator means "skip validation" for that entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType
from typing import Any, Protocol

from mcp_demo.logging import get_logger
from mcp_demo.validation.provider import (
    CompiledValidator,
    SchemaCompileError,
    ValidatorProvider,
)

logger = get_logger(__name__)


class _SchemaEntry(Protocol):
    name: str
    input_schema: dict[str, Any] | None


def _compile_entries(
    entries: Iterable[_SchemaEntry],
    provider: ValidatorProvider,
    kind: str,
) -> dict[str, CompiledValidator]:
    validators: dict[str, CompiledValidator] = {}
    for entry in entries:
        name = getattr(entry, "name", None)
        schema = getattr(entry, "input_schema", None)
        if not name or schema is None:
            continue
        try:
            validators[name] = provider.compile(schema)
        except SchemaCompileError as e:
            logger.error(
                f"Failed to compile {kind} schema",
                extra={"kind": kind, "entry": name, "error": str(e)},
            )
    return validators


def describe_errors(errors: list[dict[str, Any]] | None) -> dict[str, Any]:
    """
    Summarise schema error records as JSON-RPC error data.

    Besides the raw ``errors``, the summary lists the ``missing`` required
    properties, the ``expected`` type per instance path and the ``allowed``
    values of the first failing enum.

    Example:
        >>> describe_errors([{"instancePath": "/a", "keyword": "type",
        ...                   "params": {"type": "number"}, "message": "must be number"}])
        {'errors': [...], 'expected': {'/a': 'number'}}
    """
    records = list(errors or [])
    details: dict[str, Any] = {"errors": records}
    for record in records:
        params = record.get("params") or {}
        keyword = record.get("keyword")
        if keyword == "required":
            details.setdefault("missing", []).append(params.get("missingProperty"))
        elif keyword == "type":
            details.setdefault("expected", {})[record.get("instancePath") or "/"] = (
                params.get("type")
            )
        elif keyword == "enum":
            details.setdefault("allowed", params.get("allowedValues"))
    return details


class ValidatorRegistry:
    """
    Compiled input-schema validators for tools and prompts.

    Example:
        >>> registry = ValidatorRegistry.initialize(tables.tools, tables.prompts, provider)
        >>> validator = registry.get_tool_validator("calculator_arithmetic")
        >>> validator is None or validator({"op": "add", "a": 1, "b": 2})
        True
    """

    def __init__(
        self,
        tool_validators: dict[str, CompiledValidator] | None = None,
        prompt_validators: dict[str, CompiledValidator] | None = None,
        provider_name: str = "",
    ) -> None:
        self._tool_validators = MappingProxyType(dict(tool_validators or {}))
        self._prompt_validators = MappingProxyType(dict(prompt_validators or {}))
        self.provider_name = provider_name

    @classmethod
    def initialize(
        cls,
        tools: Iterable[_SchemaEntry],
        prompts: Iterable[_SchemaEntry],
        provider: ValidatorProvider,
    ) -> ValidatorRegistry:
        """
        Compile a validator for every entry with a name and an input schema.

        Entries without either are skipped. A schema that fails to compile is
        logged and left out of the registry.

        Args:
            tools: Tool descriptors.
            prompts: Prompt descriptors.
            provider: Provider used to compile the schemas.

        Returns:
            A populated ValidatorRegistry.
        """
        return cls(
            tool_validators=_compile_entries(tools, provider, "tool"),
            prompt_validators=_compile_entries(prompts, provider, "prompt"),
            provider_name=provider.name,
        )

    @property
    def tool_validators(self) -> MappingProxyType:
        """Read-only mapping of tool name to validator."""
        return self._tool_validators

    @property
    def prompt_validators(self) -> MappingProxyType:
        """Read-only mapping of prompt name to validator."""
        return self._prompt_validators

    def get_tool_validator(self, name: str) -> CompiledValidator | None:
        """Return the validator for a tool, or None when there is none."""
        return self._tool_validators.get(name)

    def get_prompt_validator(self, name: str) -> CompiledValidator | None:
        """Return the validator for a prompt, or None when there is none."""
        return self._prompt_validators.get(name)
