"""Turning OpenAI-style chat-completion responses into generation results."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from .logger import log_debug, log_error
from .messages import FinishReason, Message, Usage
from .options import GenerateResult
from .tool import ToolCall

__all__ = ["parse_success_response", "parse_finish_reason"]

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "content_filter": FinishReason.CONTENT_FILTER,
    "tool_calls": FinishReason.TOOL_CALLS,
}


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _typed(container: Mapping, key: str, default: Any, kind: type) -> Any:
    """Fetch ``key`` with a default, rejecting values of the wrong type."""
    value = container.get(key, default)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"field '{key}' has the wrong type: {value!r}")
    return value


def parse_finish_reason(reason: str) -> FinishReason:
    """Map a finish reason string; unknown reasons become ERROR."""
    return _FINISH_REASONS.get(reason, FinishReason.ERROR)


def _parse_tool_call(tool_call_json: Any) -> Optional[ToolCall]:
    if not isinstance(tool_call_json, dict):
        return None
    function = tool_call_json.get("function")
    if (
        tool_call_json.get("id") is None
        or not isinstance(function, dict)
        or function.get("name") is None
        or "arguments" not in function
    ):
        return None

    raw = function["arguments"]
    if raw is None:
        arguments_str = "{}"
    elif isinstance(raw, str):
        arguments_str = raw
    else:
        arguments_str = _dump(raw)

    try:
        if not arguments_str or arguments_str == "null":
            arguments: Any = {}
        else:
            arguments = json.loads(arguments_str)
    except ValueError as exc:
        log_error("Failed to parse tool call arguments: {}", exc)
        return None

    name = str(function["name"])
    log_debug("Parsed tool call: {} with args: {}", name, arguments_str)
    return ToolCall(str(tool_call_json["id"]), name, arguments)


def parse_success_response(response: Mapping[str, Any]) -> GenerateResult:
    """Parse a successful chat-completion response body.

    Raises TypeError when a field has a type the format does not allow.
    """
    log_debug("Parsing OpenAI chat completion response")
    result = GenerateResult()

    result.id = _typed(response, "id", "", str)
    result.model = _typed(response, "model", "", str)
    result.created = _typed(response, "created", 0, int)

    fingerprint = response.get("system_fingerprint")
    if fingerprint is not None:
        result.system_fingerprint = str(fingerprint)

    log_debug("Response ID: {}, Model: {}", result.id, result.model)

    choices = response.get("choices")
    if choices is not None and not isinstance(choices, list):
        raise TypeError(f"field 'choices' must be an array: {choices!r}")

    if choices:
        choice = choices[0]
        message = choice.get("message")
        if message is not None:
            content = message.get("content")
            result.text = "" if content is None else str(content)
            log_debug("Extracted message content - length: {}", len(result.text))

            tool_calls_json = message.get("tool_calls")
            if isinstance(tool_calls_json, list):
                log_debug("Found {} tool calls in response", len(tool_calls_json))
                for tool_call_json in tool_calls_json:
                    tool_call = _parse_tool_call(tool_call_json)
                    if tool_call is not None:
                        result.tool_calls.append(tool_call)

            if result.text:
                result.response_messages.append(Message.assistant(result.text))

        reason = choice.get("finish_reason")
        if reason is not None:
            result.finish_reason = parse_finish_reason(reason)
            log_debug("Finish reason: {}", reason)
        else:
            result.finish_reason = FinishReason.STOP
            log_debug("Finish reason was null or missing, defaulting to stop")

    usage = response.get("usage")
    if usage is not None:
        result.usage = Usage(
            _typed(usage, "prompt_tokens", 0, int),
            _typed(usage, "completion_tokens", 0, int),
            _typed(usage, "total_tokens", 0, int),
        )
        log_debug(
            "Token usage - prompt: {}, completion: {}, total: {}",
            result.usage.prompt_tokens,
            result.usage.completion_tokens,
            result.usage.total_tokens,
        )

    result.provider_metadata = _dump(response)
    return result