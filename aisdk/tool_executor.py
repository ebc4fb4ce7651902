"""Running tool calls against a tool set, with basic argument validation."""

from __future__ import annotations

import json
import secrets
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Mapping, Optional, Sequence

from .messages import Message
from .options import GenerateOptions
from .tool import (
    AsyncToolExecuteFunction,
    Tool,
    ToolCall,
    ToolExecuteFunction,
    ToolExecutionContext,
    ToolResult,
    create_async_tool,
    create_object_schema,
    create_tool,
)

__all__ = [
    "execute_tool",
    "execute_tools",
    "execute_tools_with_options",
    "validate_tool_call",
    "tool_exists",
    "validate_json_schema",
    "create_simple_tool",
    "create_simple_async_tool",
    "create_tool_set",
    "create_tool_call",
    "generate_tool_call_id",
]


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _failed(tool_call: ToolCall, message: str) -> ToolResult:
    return ToolResult(
        tool_call.id, tool_call.tool_name, tool_call.arguments, error=message
    )


def _succeeded(tool_call: ToolCall, value: Any) -> ToolResult:
    return ToolResult(
        tool_call.id, tool_call.tool_name, tool_call.arguments, result=value
    )


def _execute_sync(
    tool_call: ToolCall, tool: Tool, context: ToolExecutionContext
) -> ToolResult:
    if tool.execute is None:
        return _failed(tool_call, "Tool has no synchronous execute function")
    try:
        value = tool.execute(tool_call.arguments, context)
    except Exception as exc:
        return _failed(tool_call, f"Tool execution failed: {exc}")
    return _succeeded(tool_call, value)


def _execute_async(
    tool_call: ToolCall, tool: Tool, context: ToolExecutionContext
) -> ToolResult:
    if tool.execute_async is None:
        return _failed(tool_call, "Tool has no asynchronous execute function")
    try:
        future = tool.execute_async(tool_call.arguments, context)
        value = future.result()
    except Exception as exc:
        return _failed(tool_call, f"Async tool execution failed: {exc}")
    return _succeeded(tool_call, value)


def execute_tool(
    tool_call: ToolCall,
    tools: Mapping[str, Tool],
    messages: Optional[Sequence[Message]] = None,
) -> ToolResult:
    """Run one tool call; failures are reported in the returned result."""
    if not tool_call.is_valid():
        return _failed(tool_call, "Invalid tool call: missing required fields")

    tool = tools.get(tool_call.tool_name)
    if tool is None:
        return _failed(tool_call, f"Tool not found: '{tool_call.tool_name}'")

    if not validate_tool_call(tool_call, tool):
        return _failed(
            tool_call,
            f"Invalid arguments for tool '{tool_call.tool_name}': "
            f"{_dump(tool_call.arguments)}",
        )

    if not tool.has_execute():
        return _succeeded(
            tool_call, "Tool call forwarded to client (no execute function)"
        )

    context = ToolExecutionContext(
        tool_call_id=tool_call.id, messages=list(messages or [])
    )
    try:
        if tool.is_async():
            return _execute_async(tool_call, tool, context)
        return _execute_sync(tool_call, tool, context)
    except Exception as exc:
        return _failed(tool_call, f"Tool execution failed: {exc}")


def execute_tools(
    tool_calls: Sequence[ToolCall],
    tools: Mapping[str, Tool],
    messages: Optional[Sequence[Message]] = None,
    parallel: bool = True,
    options: Optional[GenerateOptions] = None,
) -> list[ToolResult]:
    """Run several tool calls, keeping the order of the calls in the results.

    Start and finish callbacks from ``options`` are invoked only when the
    calls run sequentially.
    """
    if not parallel:
        results = []
        for tool_call in tool_calls:
            if options is not None and options.on_tool_call_start is not None:
                options.on_tool_call_start(tool_call)
            result = execute_tool(tool_call, tools, messages)
            if options is not None and options.on_tool_call_finish is not None:
                options.on_tool_call_finish(result)
            results.append(result)
        return results

    if not tool_calls:
        return []
    with ThreadPoolExecutor(max_workers=len(tool_calls)) as pool:
        return list(
            pool.map(lambda call: execute_tool(call, tools, messages), tool_calls)
        )


def execute_tools_with_options(
    tool_calls: Sequence[ToolCall],
    options: GenerateOptions,
    parallel: bool = False,
) -> list[ToolResult]:
    """Run tool calls using the tools, messages and callbacks of ``options``."""
    return execute_tools(
        tool_calls, options.tools, options.messages, parallel, options
    )


def validate_tool_call(tool_call: ToolCall, tool: Tool) -> bool:
    """Check a call's arguments against the tool's parameter schema."""
    return validate_json_schema(tool_call.arguments, tool.parameters_schema)


def tool_exists(tool_name: str, tools: Mapping[str, Tool]) -> bool:
    return tool_name in tools


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_json_schema(data: Any, schema: Any) -> bool:
    """A basic JSON-schema check of type, required and nested properties."""
    if not isinstance(schema, dict) or "type" not in schema:
        return True

    expected = schema["type"]
    if expected == "object":
        if not isinstance(data, dict):
            return False
        required = schema.get("required")
        if isinstance(required, list) and any(name not in data for name in required):
            return False
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, prop_schema in properties.items():
                if name in data and not validate_json_schema(data[name], prop_schema):
                    return False
        return True
    if expected == "string":
        return isinstance(data, str)
    if expected == "number":
        return _is_number(data)
    if expected == "integer":
        return isinstance(data, int) and not isinstance(data, bool)
    if expected == "boolean":
        return isinstance(data, bool)
    if expected == "array":
        return isinstance(data, list)
    return True


def create_simple_tool(
    name: str,
    description: str,
    parameters: Mapping[str, str],
    execute_func: ToolExecuteFunction,
) -> Tool:
    """Create a tool whose parameters are all required and of simple types."""
    return create_tool(description, create_object_schema(parameters), execute_func)


def create_simple_async_tool(
    name: str,
    description: str,
    parameters: Mapping[str, str],
    execute_func: AsyncToolExecuteFunction,
) -> Tool:
    """Async counterpart of :func:`create_simple_tool`."""
    return create_async_tool(
        description, create_object_schema(parameters), execute_func
    )


def create_tool_set(tool_list: Iterable[tuple[str, Tool]]) -> dict[str, Tool]:
    """Build a tool set; a later tool with the same name replaces an earlier one."""
    return {name: tool for name, tool in tool_list}


def create_tool_call(tool_name: str, arguments: Any, call_id: str = "") -> ToolCall:
    """Create a tool call, generating an id when none is given."""
    return ToolCall(call_id or generate_tool_call_id(), tool_name, arguments)


def generate_tool_call_id() -> str:
    """Return ``call_`` followed by 24 random lowercase hex digits."""
    return "call_" + secrets.token_hex(12)