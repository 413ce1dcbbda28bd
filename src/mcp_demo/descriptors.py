"""
Tool and prompt descriptor tables for the demo MCP server.

Descriptors are built once at startup and never mutated afterwards. The
built-in tables hold the arithmetic tool and the greeting prompt; extra
prompts may be declared in configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_demo.config import AppConfig

ARITHMETIC_OPERATIONS: tuple[str, ...] = ("add", "sub", "mul", "div")


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Describes a callable tool.

    Attributes:
        name: Unique tool name.
        title: Display title.
        description: Human-readable description.
        input_schema: Schema for the tool arguments.
    """

    name: str
    title: str
    description: str
    input_schema: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form used by tools/list."""
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class PromptDescriptor:
    """
    Describes a prompt template.

    Attributes:
        name: Unique prompt name.
        title: Display title.
        description: Human-readable description.
        input_schema: Schema for the prompt arguments.
        template: Template text with ``{{var}}`` placeholders.
    """

    name: str
    title: str
    description: str
    input_schema: dict[str, Any] | None = None
    template: str = ""

    @property
    def required_arguments(self) -> list[str]:
        """Argument names the schema declares as required."""
        if not self.input_schema:
            return []
        required = self.input_schema.get("required")
        return list(required) if isinstance(required, list) else []

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form used by prompts/list (the template stays private)."""
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class DescriptorTables:
    """
    Read-only tool and prompt tables, in registration order.

    Attributes:
        tools: Registered tools.
        prompts: Registered prompts.
    """

    tools: tuple[ToolDescriptor, ...] = ()
    prompts: tuple[PromptDescriptor, ...] = ()
    _tools_by_name: MappingProxyType = field(init=False, repr=False, compare=False)
    _prompts_by_name: MappingProxyType = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for kind, entries in (("tool", self.tools), ("prompt", self.prompts)):
            names = [entry.name for entry in entries]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {kind} names: {', '.join(duplicates)}")
        object.__setattr__(
            self,
            "_tools_by_name",
            MappingProxyType({tool.name: tool for tool in self.tools}),
        )
        object.__setattr__(
            self,
            "_prompts_by_name",
            MappingProxyType({prompt.name: prompt for prompt in self.prompts}),
        )

    def get_tool(self, name: str) -> ToolDescriptor | None:
        """Look up a tool by exact name."""
        return self._tools_by_name.get(name)

    def get_prompt(self, name: str) -> PromptDescriptor | None:
        """Look up a prompt by exact name."""
        return self._prompts_by_name.get(name)


# =============================================================================
# Built-in Tables
# =============================================================================

CALCULATOR_TOOL = ToolDescriptor(
    name="calculator_arithmetic",
    title="Calculator (basic arithmetic)",
    description="Addition, subtraction, multiplication and division of two numbers.",
    input_schema={
        "type": "object",
        "required": ["op", "a", "b"],
        "properties": {
            "op": {"type": "string", "enum": list(ARITHMETIC_OPERATIONS)},
            "a": {"type": "number"},
            "b": {"type": "number"},
        },
    },
)

HELLO_PROMPT = PromptDescriptor(
    name="hello-template",
    title="Hello Prompt",
    description="Greeting with a {{name}} variable",
    input_schema={
        "type": "object",
        "required": ["name"],
        "properties": {"name": {"type": "string"}},
    },
    template="Hello, {{name}}! Welcome to the demo MCP server.",
)

BUILTIN_TOOLS: tuple[ToolDescriptor, ...] = (CALCULATOR_TOOL,)
BUILTIN_PROMPTS: tuple[PromptDescriptor, ...] = (HELLO_PROMPT,)


def load_descriptors(config: AppConfig | None = None) -> DescriptorTables:
    """
    Build the descriptor tables for a server instance.

    Args:
        config: Optional AppConfig whose ``prompts`` are appended to the
            built-in prompts.

    Returns:
        Immutable DescriptorTables.

    Raises:
        ValueError: If a configured prompt reuses an existing name.
    """
    prompts = list(BUILTIN_PROMPTS)
    if config is not None:
        prompts.extend(
            PromptDescriptor(
                name=entry.name,
                title=entry.title,
                description=entry.description,
                input_schema=entry.input_schema,
                template=entry.template,
            )
            for entry in config.prompts
        )
    return DescriptorTables(tools=BUILTIN_TOOLS, prompts=tuple(prompts))
