"""Options for text generation and the results it produces."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Callable, Optional

from .messages import FinishReason, Message, Usage
from .tool import GenerateStep, Tool, ToolCall, ToolChoice, ToolResult

__all__ = ["GenerateOptions", "GenerateResult", "StreamOptions"]


@dataclass(kw_only=True)
class GenerateOptions:
    """Everything needed to ask a model for text."""

    model: str = ""
    system: str = ""
    prompt: str = ""
    messages: list[Message] = field(default_factory=list)
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    seed: Optional[int] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None

    tools: dict[str, Tool] = field(default_factory=dict)
    tool_choice: ToolChoice = field(default_factory=ToolChoice.auto_choice)
    max_steps: int = 1
    active_tools: list[str] = field(default_factory=list)

    on_step_finish: Optional[Callable[[GenerateStep], None]] = None
    on_tool_call_start: Optional[Callable[[ToolCall], None]] = None
    on_tool_call_finish: Optional[Callable[[ToolResult], None]] = None

    def is_valid(self) -> bool:
        return bool(self.model) and (bool(self.prompt) or bool(self.messages))

    def has_messages(self) -> bool:
        return bool(self.messages)

    def has_tools(self) -> bool:
        return bool(self.tools)

    def is_multi_step(self) -> bool:
        return self.max_steps > 1

    def get_active_tool_names(self) -> list[str]:
        """The active tools, or every tool name in sorted order if none are set."""
        if not self.active_tools:
            return sorted(self.tools)
        return list(self.active_tools)


@dataclass
class GenerateResult:
    """The result of a generation, successful or not."""

    text: str = ""
    finish_reason: FinishReason = FinishReason.ERROR
    usage: Usage = field(default_factory=Usage)

    id: Optional[str] = None
    model: Optional[str] = None
    created: Optional[int] = None
    system_fingerprint: Optional[str] = None

    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    is_retryable: Optional[bool] = None

    provider_metadata: Optional[str] = None
    response_messages: list[Message] = field(default_factory=list)

    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    steps: list[GenerateStep] = field(default_factory=list)

    @classmethod
    def failure(cls, error_message: str) -> "GenerateResult":
        return cls(error=error_message)

    def is_success(self) -> bool:
        return self.error is None and self.finish_reason is not FinishReason.ERROR

    def __bool__(self) -> bool:
        return self.is_success()

    def error_message(self) -> str:
        return self.error if self.error is not None else ""

    def finish_reason_string(self) -> str:
        return self.finish_reason.value

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def has_tool_results(self) -> bool:
        return bool(self.tool_results)

    def is_multi_step(self) -> bool:
        return bool(self.steps)

    def get_all_tool_calls(self) -> list[ToolCall]:
        calls = list(self.tool_calls)
        for step in self.steps:
            calls.extend(step.tool_calls)
        return calls

    def get_all_tool_results(self) -> list[ToolResult]:
        results = list(self.tool_results)
        for step in self.steps:
            results.extend(step.tool_results)
        return results


@dataclass(kw_only=True)
class StreamOptions(GenerateOptions):
    """Generation options plus callbacks used while streaming."""

    on_text_chunk: Optional[Callable[[str], None]] = None
    on_complete: Optional[Callable[[GenerateResult], None]] = None
    on_error: Optional[Callable[[str], None]] = None

    @classmethod
    def from_options(
        cls,
        options: GenerateOptions,
        on_text_chunk: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[GenerateResult], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> "StreamOptions":
        """Copy the generation options and attach streaming callbacks."""
        values = {
            f.name: copy.copy(getattr(options, f.name))
            for f in fields(GenerateOptions)
        }
        return cls(
            **values,
            on_text_chunk=on_text_chunk,
            on_complete=on_complete,
            on_error=on_error,
        )