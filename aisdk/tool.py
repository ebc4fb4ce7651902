"""Tool definitions, tool calls, tool results and helpers to build them."""

from __future__ import annotations

import json
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .messages import FinishReason, Message, Usage

__all__ = [
    "ToolExecuteFunction",
    "AsyncToolExecuteFunction",
    "ToolExecutionContext",
    "Tool",
    "ToolSet",
    "ToolChoiceType",
    "ToolChoice",
    "ToolCall",
    "ToolResult",
    "GenerateStep",
    "ToolError",
    "NoSuchToolError",
    "InvalidToolArgumentsError",
    "ToolExecutionError",
    "create_tool",
    "create_async_tool",
    "create_tool_schema",
    "create_object_schema",
]


def _dump_json(value: Any) -> str:
    """Compact JSON text with sorted keys."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass
class ToolExecutionContext:
    """Context handed to a tool's execute function."""

    tool_call_id: str = ""
    messages: list[Message] = field(default_factory=list)
    abort_signal: Optional[Callable[[], None]] = None


ToolExecuteFunction = Callable[[Any, ToolExecutionContext], Any]
AsyncToolExecuteFunction = Callable[[Any, ToolExecutionContext], "Future[Any]"]


@dataclass
class Tool:
    """A tool the model may call, described by a JSON schema."""

    description: str = ""
    parameters_schema: Any = None
    execute: Optional[ToolExecuteFunction] = None
    execute_async: Optional[AsyncToolExecuteFunction] = None

    def has_execute(self) -> bool:
        return self.execute is not None or self.execute_async is not None

    def is_async(self) -> bool:
        return self.execute_async is not None


ToolSet = dict[str, Tool]


class ToolChoiceType(Enum):
    AUTO = "auto"
    REQUIRED = "required"
    NONE = "none"
    SPECIFIC = "specific"


@dataclass
class ToolChoice:
    """How the model is allowed to choose tools."""

    type: ToolChoiceType = ToolChoiceType.AUTO
    tool_name: Optional[str] = None

    @classmethod
    def auto_choice(cls) -> "ToolChoice":
        return cls(ToolChoiceType.AUTO)

    @classmethod
    def required(cls) -> "ToolChoice":
        return cls(ToolChoiceType.REQUIRED)

    @classmethod
    def none(cls) -> "ToolChoice":
        return cls(ToolChoiceType.NONE)

    @classmethod
    def specific(cls, name: str) -> "ToolChoice":
        return cls(ToolChoiceType.SPECIFIC, name)

    def to_string(self) -> str:
        if self.type is ToolChoiceType.SPECIFIC:
            return f"specific({self.tool_name or ''})"
        return self.type.value

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class ToolCall:
    """A request from the model to run a tool."""

    id: str = ""
    tool_name: str = ""
    arguments: Any = None

    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.tool_name)

    def to_string(self) -> str:
        return (
            f"ToolCall{{id='{self.id}', tool='{self.tool_name}', "
            f"args={_dump_json(self.arguments)}}}"
        )

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class ToolResult:
    """The outcome of running a tool: a result or an error message."""

    tool_call_id: str = ""
    tool_name: str = ""
    arguments: Any = None
    result: Any = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.error is None

    def error_message(self) -> str:
        return self.error if self.error is not None else ""

    def to_string(self) -> str:
        head = f"ToolResult{{id='{self.tool_call_id}', tool='{self.tool_name}', "
        if self.is_success():
            return f"{head}result={_dump_json(self.result)}}}"
        return f"{head}error='{self.error_message()}'}}"

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class GenerateStep:
    """One step of a multi-step generation."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    finish_reason: FinishReason = FinishReason.ERROR
    usage: Usage = field(default_factory=Usage)

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def has_tool_results(self) -> bool:
        return bool(self.tool_results)

    def is_success(self) -> bool:
        return self.finish_reason is not FinishReason.ERROR


class ToolError(Exception):
    """Base class for tool errors."""


class NoSuchToolError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No tool named '{name}' is available")
        self.tool_name = name


class InvalidToolArgumentsError(ToolError):
    def __init__(self, name: str, args: Any) -> None:
        super().__init__(f"Invalid arguments for tool '{name}': {_dump_json(args)}")
        self.tool_name = name
        self.provided_args = args


class ToolExecutionError(ToolError):
    def __init__(self, name: str, call_id: str, message: str) -> None:
        super().__init__(f"Tool '{name}' (call {call_id}) execution failed: {message}")
        self.tool_name = name
        self.tool_call_id = call_id


def create_tool(
    description: str, parameters_schema: Any, execute_func: ToolExecuteFunction
) -> Tool:
    """Create a tool with a synchronous execute function."""
    return Tool(description, parameters_schema, execute=execute_func)


def create_async_tool(
    description: str,
    parameters_schema: Any,
    execute_func: AsyncToolExecuteFunction,
) -> Tool:
    """Create a tool whose execute function returns a future."""
    return Tool(description, parameters_schema, execute_async=execute_func)


def create_tool_schema(description: str, parameters_schema: Any) -> Tool:
    """Create a tool without an execute function (forwarded to the caller)."""
    return Tool(description, parameters_schema)


def create_object_schema(properties: Mapping[str, str]) -> dict:
    """Build an object schema whose properties are all required."""
    names = sorted(properties)
    return {
        "type": "object",
        "properties": {name: {"type": properties[name]} for name in names},
        "required": names,
    }