"""
Tests for the tools/list and tools/call methods.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from mcp_demo.config import AppConfig
from mcp_demo.context import RequestContext
from mcp_demo.errors import DomainError, InvalidArgumentError, NotFoundError
from mcp_demo.methods.tools import handle_tools_call, handle_tools_list
from mcp_demo.server import build_state


class TestToolsList:
    """Tests for handle_tools_list."""

    @pytest.mark.asyncio
    async def test_lists_calculator(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test the calculator is listed with its schema."""
        result = await handle_tools_list(make_ctx("tools/list"), {})

        assert [tool["name"] for tool in result["tools"]] == ["calculator_arithmetic"]
        tool = result["tools"][0]
        assert tool["title"] == "Calculator (basic arithmetic)"
        assert tool["inputSchema"]["properties"]["op"]["enum"] == [
            "add",
            "sub",
            "mul",
            "div",
        ]


class TestToolsCall:
    """Tests for handle_tools_call."""

    @pytest.mark.asyncio
    async def test_addition(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test a successful call."""
        result = await handle_tools_call(
            make_ctx("tools/call"),
            {"name": "calculator_arithmetic", "arguments": {"op": "add", "a": 2, "b": 3}},
        )

        assert result == {"content": [{"type": "text", "text": "5"}], "meta": {"value": 5}}

    @pytest.mark.asyncio
    async def test_division_by_zero(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test the domain error passes through validation."""
        with pytest.raises(DomainError):
            await handle_tools_call(
                make_ctx("tools/call"),
                {"name": "calculator_arithmetic", "arguments": {"op": "div", "a": 1, "b": 0}},
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["nope", None, 7, "Calculator_Arithmetic"])
    async def test_unknown_tool(
        self, make_ctx: Callable[..., RequestContext], name: Any
    ) -> None:
        """Test unknown or missing tool names."""
        with pytest.raises(NotFoundError) as exc_info:
            await handle_tools_call(make_ctx("tools/call"), {"name": name})

        assert exc_info.value.message == f"Tool not found: {name}"

    @pytest.mark.asyncio
    async def test_unknown_operation_lists_allowed(
        self, make_ctx: Callable[..., RequestContext]
    ) -> None:
        """Test the validator reports the allowed operations."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handle_tools_call(
                make_ctx("tools/call"),
                {"name": "calculator_arithmetic", "arguments": {"op": "pow", "a": 1, "b": 2}},
            )

        assert exc_info.value.details["allowed"] == ["add", "sub", "mul", "div"]
        assert exc_info.value.details["errors"][0]["keyword"] == "enum"

    @pytest.mark.asyncio
    async def test_non_numeric_operand(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test a string operand is rejected with its expected type."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handle_tools_call(
                make_ctx("tools/call"),
                {"name": "calculator_arithmetic", "arguments": {"op": "add", "a": "1", "b": 2}},
            )

        assert exc_info.value.message == "Invalid parameters"
        assert exc_info.value.details["expected"] == {"/a": "number"}

    @pytest.mark.asyncio
    async def test_missing_arguments(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test absent arguments report every missing property."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handle_tools_call(
                make_ctx("tools/call"), {"name": "calculator_arithmetic"}
            )

        assert exc_info.value.details["missing"] == ["op", "a", "b"]

    @pytest.mark.asyncio
    async def test_non_object_arguments(self, make_ctx: Callable[..., RequestContext]) -> None:
        """Test array arguments are invalid parameters."""
        with pytest.raises(InvalidArgumentError):
            await handle_tools_call(
                make_ctx("tools/call"),
                {"name": "calculator_arithmetic", "arguments": [1, 2]},
            )

    @pytest.mark.asyncio
    async def test_structural_provider_gives_same_outcome(
        self, demo_root, sink: Any
    ) -> None:
        """Test the fallback validator reaches the same verdict."""
        config = AppConfig(
            resources={"roots": [str(demo_root)]},
            validation={"provider": "structural"},
        )
        state = build_state(config)
        ctx = RequestContext(method="tools/call", request_id=1, state=state, sink=sink)

        assert state.validators.provider_name == "structural"
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handle_tools_call(
                ctx,
                {"name": "calculator_arithmetic", "arguments": {"op": "pow", "a": 1, "b": 2}},
            )

        assert exc_info.value.details["allowed"] == ["add", "sub", "mul", "div"]
