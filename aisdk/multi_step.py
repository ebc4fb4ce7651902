"""Coordinating multi-step generations in which the model calls tools."""

from __future__ import annotations

import dataclasses
from typing import Callable, Sequence

from .logger import log_debug
from .messages import FinishReason, Message, ToolCallContentPart, ToolResultContentPart
from .options import GenerateOptions, GenerateResult
from .tool import GenerateStep, ToolCall, ToolResult

__all__ = [
    "execute_multi_step",
    "create_next_step_options",
    "tool_results_to_messages",
]

_TERMINAL_REASONS = (
    FinishReason.STOP,
    FinishReason.LENGTH,
    FinishReason.CONTENT_FILTER,
    FinishReason.ERROR,
)


def execute_multi_step(
    initial_options: GenerateOptions,
    generate_func: Callable[[GenerateOptions], GenerateResult],
) -> GenerateResult:
    """Call the model repeatedly, feeding tool results back, up to max_steps."""
    max_steps = initial_options.max_steps
    if max_steps <= 1:
        return generate_func(initial_options)

    final = GenerateResult()
    current = initial_options

    for step in range(max_steps):
        log_debug("Executing step {} of {}", step + 1, max_steps)
        log_debug("Current messages count: {}", len(current.messages))

        step_result = generate_func(current)
        log_debug(
            "Step {} result - text: '{}', tool_calls: {}, finish_reason: {}",
            step + 1,
            step_result.text,
            len(step_result.tool_calls),
            step_result.finish_reason.value,
        )

        if not step_result.is_success():
            if step == 0:
                return step_result
            final.error = step_result.error
            break

        record = GenerateStep(
            text=step_result.text,
            tool_calls=list(step_result.tool_calls),
            tool_results=list(step_result.tool_results),
            finish_reason=step_result.finish_reason,
            usage=step_result.usage,
        )
        final.steps.append(record)
        if initial_options.on_step_finish is not None:
            initial_options.on_step_finish(record)

        final.text += step_result.text
        final.tool_calls.extend(step_result.tool_calls)
        final.tool_results.extend(step_result.tool_results)

        final.usage.prompt_tokens += step_result.usage.prompt_tokens
        final.usage.completion_tokens += step_result.usage.completion_tokens
        final.usage.total_tokens += step_result.usage.total_tokens

        final.finish_reason = step_result.finish_reason
        final.id = step_result.id
        final.model = step_result.model
        final.created = step_result.created
        final.system_fingerprint = step_result.system_fingerprint
        final.provider_metadata = step_result.provider_metadata
        final.response_messages.extend(step_result.response_messages)

        if step_result.finish_reason in _TERMINAL_REASONS:
            break

        if not (
            step_result.finish_reason is FinishReason.TOOL_CALLS
            and step_result.has_tool_calls()
        ):
            break

        tool_results = step_result.tool_results
        if tool_results and not any(r.is_success() for r in tool_results):
            final.finish_reason = FinishReason.ERROR
            break

        log_debug("Creating next step options with {} tool results", len(tool_results))
        current = create_next_step_options(initial_options, step_result, tool_results)

    if len(final.steps) == max_steps and final.finish_reason is not FinishReason.STOP:
        log_debug("Reached max steps limit ({}) without completion", max_steps)

    return final


def create_next_step_options(
    base_options: GenerateOptions,
    previous_result: GenerateResult,
    tool_results: Sequence[ToolResult],
) -> GenerateOptions:
    """Options for the next step: the conversation extended by the tool round."""
    messages = list(base_options.messages)

    if base_options.prompt and not messages:
        if base_options.system:
            messages.append(Message.user(base_options.system))
        messages.append(Message.user(base_options.prompt))

    if previous_result.has_tool_calls():
        calls = [
            ToolCallContentPart(tc.id, tc.tool_name, tc.arguments)
            for tc in previous_result.tool_calls
        ]
        messages.append(Message.assistant_with_tools(previous_result.text, calls))
        tool_messages = tool_results_to_messages(
            previous_result.tool_calls, tool_results
        )
        log_debug("Adding {} tool result messages", len(tool_messages))
        messages.extend(tool_messages)

    return dataclasses.replace(base_options, messages=messages, prompt="")


def tool_results_to_messages(
    tool_calls: Sequence[ToolCall], tool_results: Sequence[ToolResult]
) -> list[Message]:
    """One user message holding a result part per call that has a result."""
    by_id = {result.tool_call_id: result for result in tool_results}
    parts = []
    for call in tool_calls:
        result = by_id.get(call.id)
        if result is None:
            continue
        if result.is_success():
            parts.append(ToolResultContentPart(call.id, result.result, False))
        else:
            parts.append(
                ToolResultContentPart(call.id, {"error": result.error_message()}, True)
            )
    return [Message.tool_results(parts)] if parts else []