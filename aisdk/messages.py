"""Core message, usage and model types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Union

__all__ = [
    "MessageRole",
    "FinishReason",
    "StreamEventType",
    "Usage",
    "Model",
    "TextContentPart",
    "ToolCallContentPart",
    "ToolResultContentPart",
    "ContentPart",
    "Message",
]


class MessageRole(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class FinishReason(Enum):
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    ERROR = "error"


class StreamEventType(Enum):
    TEXT_DELTA = "text_delta"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    STEP_START = "step_start"
    STEP_FINISH = "step_finish"
    FINISH = "finish"
    ERROR = "error"


@dataclass
class Usage:
    """Token counts; total defaults to prompt plus completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        if self.total_tokens is None:
            self.total_tokens = self.prompt_tokens + self.completion_tokens

    def is_valid(self) -> bool:
        return self.total_tokens > 0 or (
            self.prompt_tokens > 0 and self.completion_tokens >= 0
        )


@dataclass
class Model:
    name: str
    provider: str
    version: Optional[str] = None

    def full_name(self) -> str:
        if self.version is not None:
            return f"{self.name}:{self.version}"
        return self.name

    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.provider)


@dataclass(frozen=True)
class TextContentPart:
    text: str


@dataclass(frozen=True)
class ToolCallContentPart:
    id: str
    tool_name: str
    arguments: Any


@dataclass(frozen=True)
class ToolResultContentPart:
    tool_call_id: str
    result: Any
    is_error: bool = False


ContentPart = Union[TextContentPart, ToolCallContentPart, ToolResultContentPart]


@dataclass
class Message:
    """A conversation message made of content parts."""

    role: MessageRole
    content: list = field(default_factory=list)

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(MessageRole.SYSTEM, [TextContentPart(text)])

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(MessageRole.USER, [TextContentPart(text)])

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(MessageRole.ASSISTANT, [TextContentPart(text)])

    @classmethod
    def assistant_with_tools(
        cls, text: str, tools: Iterable[ToolCallContentPart]
    ) -> "Message":
        """Assistant message with optional text followed by tool calls."""
        parts: list = [TextContentPart(text)] if text else []
        parts.extend(
            ToolCallContentPart(t.id, t.tool_name, t.arguments) for t in tools
        )
        return cls(MessageRole.ASSISTANT, parts)

    @classmethod
    def tool_results(cls, results: Iterable[ToolResultContentPart]) -> "Message":
        """User message carrying tool results."""
        return cls(
            MessageRole.USER,
            [
                ToolResultContentPart(r.tool_call_id, r.result, r.is_error)
                for r in results
            ],
        )

    def has_text(self) -> bool:
        return any(isinstance(p, TextContentPart) for p in self.content)

    def has_tool_calls(self) -> bool:
        return any(isinstance(p, ToolCallContentPart) for p in self.content)

    def has_tool_results(self) -> bool:
        return any(isinstance(p, ToolResultContentPart) for p in self.content)

    def get_text(self) -> str:
        return "".join(p.text for p in self.content if isinstance(p, TextContentPart))

    def get_tool_calls(self) -> list[ToolCallContentPart]:
        return [p for p in self.content if isinstance(p, ToolCallContentPart)]

    def get_tool_results(self) -> list[ToolResultContentPart]:
        return [p for p in self.content if isinstance(p, ToolResultContentPart)]

    def role_name(self) -> str:
        return self.role.value