"""
Input schema validation for the demo MCP server.

Modules:
- structural: embedded validator for the supported schema subset
- provider: jsonschema-backed and structural providers behind one contract
- registry: compiled validators keyed by tool and prompt name
"""

from mcp_demo.validation.provider import (
    CompiledValidator,
    JsonSchemaProvider,
    ProviderUnavailableError,
    SchemaCompileError,
    StructuralProvider,
    ValidatorProvider,
    select_provider,
)
from mcp_demo.validation.registry import ValidatorRegistry, describe_errors

__all__ = [
    "CompiledValidator",
    "JsonSchemaProvider",
    "ProviderUnavailableError",
    "SchemaCompileError",
    "StructuralProvider",
    "ValidatorProvider",
    "ValidatorRegistry",
    "describe_errors",
    "select_provider",
]
