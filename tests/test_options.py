import pytest

from aisdk.messages import FinishReason, Message, Usage
from aisdk.options import GenerateOptions, GenerateResult, StreamOptions
from aisdk.tool import (
    GenerateStep,
    Tool,
    ToolCall,
    ToolChoiceType,
    ToolResult,
)

TEST_MODEL = "gpt-4o"
TEST_PROMPT = "Hello, world!"


def create_basic_options():
    return GenerateOptions(model=TEST_MODEL, prompt=TEST_PROMPT)


def create_advanced_options():
    return GenerateOptions(
        model=TEST_MODEL,
        system="System prompt",
        prompt=TEST_PROMPT,
        temperature=0.7,
        max_tokens=100,
        top_p=0.9,
        frequency_penalty=0.1,
        presence_penalty=0.2,
        seed=42,
    )


def create_sample_conversation():
    return [
        Message.system("You are a helpful assistant."),
        Message.user("Hello!"),
        Message.assistant("Hi there! How can I help you?"),
        Message.user("What's the weather like?"),
    ]


OPTIONS_VARIATIONS = [
    {"model": "gpt-4o", "prompt": "Simple test"},
    {"model": "gpt-4o", "system": "You are helpful", "prompt": "User question"},
    {"model": "gpt-4o", "messages": [Message.user("Hello")]},
    {
        "model": "gpt-4o",
        "prompt": "Test prompt",
        "temperature": 0.5,
        "max_tokens": 50,
        "top_p": 0.8,
        "frequency_penalty": -0.5,
        "presence_penalty": 0.3,
        "seed": 123,
    },
]


def create_edge_case_options():
    return GenerateOptions(
        model="gpt-4o",
        prompt="",
        temperature=2.0,
        max_tokens=1,
        top_p=1.0,
        frequency_penalty=2.0,
        presence_penalty=-2.0,
    )


def test_basic_options_are_valid():
    options = create_basic_options()
    assert options.is_valid()
    assert not options.has_messages()
    assert not options.has_tools()
    assert options.system == ""


def test_advanced_options_keep_values():
    options = create_advanced_options()
    assert options.is_valid()
    assert options.system == "System prompt"
    assert options.temperature == 0.7
    assert options.max_tokens == 100
    assert options.top_p == 0.9
    assert options.frequency_penalty == 0.1
    assert options.presence_penalty == 0.2
    assert options.seed == 42


def test_defaults():
    options = GenerateOptions()
    assert not options.is_valid()
    assert options.max_steps == 1
    assert not options.is_multi_step()
    assert options.tool_choice.type is ToolChoiceType.AUTO
    assert options.temperature is None


@pytest.mark.parametrize("kwargs", OPTIONS_VARIATIONS)
def test_variations_are_valid(kwargs):
    options = GenerateOptions(**kwargs)
    assert options.is_valid() is True
    assert options.model == "gpt-4o"


def test_edge_case_empty_prompt_is_invalid():
    options = create_edge_case_options()
    assert not options.is_valid()
    assert options.max_tokens == 1


def test_conversation_options():
    options = GenerateOptions(model=TEST_MODEL, messages=create_sample_conversation())
    assert options.is_valid()
    assert options.has_messages()
    assert len(options.messages) == 4


def test_missing_model_is_invalid():
    assert not GenerateOptions(prompt=TEST_PROMPT).is_valid()


def test_active_tool_names():
    options = GenerateOptions(
        model=TEST_MODEL,
        prompt=TEST_PROMPT,
        tools={"weather": Tool("w"), "calculator": Tool("c")},
        max_steps=3,
    )
    assert options.has_tools()
    assert options.is_multi_step()
    assert options.get_active_tool_names() == ["calculator", "weather"]
    options.active_tools = ["weather"]
    assert options.get_active_tool_names() == ["weather"]


def test_default_result_is_error():
    result = GenerateResult()
    assert not result.is_success()
    assert not result
    assert result.error_message() == ""
    assert result.finish_reason_string() == "error"


def test_success_result_usage():
    result = GenerateResult("Hello! How can I help you today?", FinishReason.STOP, Usage(10, 20))
    assert result.is_success()
    assert result
    assert result.text
    assert result.error is None
    assert result.usage.prompt_tokens == 10
    assert result.usage.completion_tokens == 20
    assert result.usage.total_tokens == 30


def test_failure_result():
    result = GenerateResult.failure("Rate limit exceeded")
    assert not result.is_success()
    assert result.error is not None
    assert "Rate limit" in result.error_message()


def test_error_set_overrides_finish_reason():
    result = GenerateResult("x", FinishReason.STOP, Usage())
    result.error = "Internal server error"
    assert not result.is_success()


@pytest.mark.parametrize(
    "reason, expected",
    [
        (FinishReason.STOP, "stop"),
        (FinishReason.LENGTH, "length"),
        (FinishReason.CONTENT_FILTER, "content_filter"),
        (FinishReason.TOOL_CALLS, "tool_calls"),
        (FinishReason.ERROR, "error"),
    ],
)
def test_finish_reason_string(reason, expected):
    assert GenerateResult(finish_reason=reason).finish_reason_string() == expected


def test_all_tool_calls_and_results_include_steps():
    top_call = ToolCall("c1", "weather", {})
    step_call = ToolCall("c2", "search", {})
    top_result = ToolResult("c1", "weather", {}, result=1)
    step_result = ToolResult("c2", "search", {}, result=2)
    result = GenerateResult(tool_calls=[top_call], tool_results=[top_result])
    assert result.has_tool_calls()
    assert result.has_tool_results()
    assert not result.is_multi_step()
    result.steps.append(
        GenerateStep(tool_calls=[step_call], tool_results=[step_result])
    )
    assert result.is_multi_step()
    assert result.get_all_tool_calls() == [top_call, step_call]
    assert result.get_all_tool_results() == [top_result, step_result]
    assert result.tool_calls == [top_call]


def test_stream_options_from_options():
    chunks = []
    base = create_advanced_options()
    stream = StreamOptions.from_options(base, on_text_chunk=chunks.append)
    assert stream.model == TEST_MODEL
    assert stream.prompt == TEST_PROMPT
    assert stream.system == "System prompt"
    assert stream.seed == 42
    assert stream.is_valid()
    assert stream.on_complete is None
    assert stream.on_error is None
    stream.on_text_chunk("Hello")
    assert chunks == ["Hello"]


def test_stream_options_copy_is_independent():
    base = GenerateOptions(model=TEST_MODEL, messages=[Message.user("Hello")])
    stream = StreamOptions.from_options(base)
    stream.messages.append(Message.user("more"))
    assert len(base.messages) == 1
    assert len(stream.messages) == 2