# aisdk

Dependency-free building blocks for programs that talk to chat-completion
style AI providers: typed messages and results, a provider-independent
`Client` interface, tool definitions and execution, multi-step tool-calling
workflows, parsing of OpenAI-style responses, server-sent-event streaming,
a retry policy and a pluggable logger.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## What the package does not do

There is no ready-made provider client. `aisdk.client.Client` is an
interface: on its own, `generate_text` returns a failed result
("Client not initialized") and `stream_text` returns an empty stream. There
is also no function that turns `GenerateOptions` into a request body, and
no non-streaming HTTP call. To use a real provider you subclass `Client`,
build the request JSON yourself and send it; the package gives you the
pieces around that (response parsing, streaming, retries, tool handling).

## Messages, options and results

```python
from aisdk.messages import Message
from aisdk.options import GenerateOptions, GenerateResult

options = GenerateOptions(
    model="gpt-4o-mini",
    system="You are a friendly assistant!",
    prompt="Why is the sky blue?",
    temperature=0.7,
    max_tokens=100,
)
options.is_valid()          # True: a model and a prompt or messages

conversation = GenerateOptions(
    model="gpt-4o",
    messages=[Message.system("You are helpful."), Message.user("Hello!")],
)

failed = GenerateResult.failure("Network timeout")
failed.is_success()         # False
failed.error_message()      # "Network timeout"
```

`GenerateOptions` takes keyword arguments only. `GenerateResult` is truthy
when successful and offers `finish_reason_string()`, `has_tool_calls()`,
`get_all_tool_calls()`, `get_all_tool_results()` and the list of `steps`.

## Writing a client

```python
from aisdk.client import Client
from aisdk.messages import FinishReason, Usage
from aisdk.options import GenerateResult

class EchoClient(Client):
    def generate_text(self, options):
        return GenerateResult(text=options.prompt,
                              finish_reason=FinishReason.STOP,
                              usage=Usage(3, 4))

    def is_valid(self):
        return True

    def provider_name(self):
        return "echo"

client = Client(EchoClient())   # a bare Client forwards to its impl
client.generate_text(options).text
```

## Parsing OpenAI-style responses

```python
from aisdk.openai_response import parse_success_response

result = parse_success_response({
    "id": "chatcmpl-test123",
    "model": "gpt-4o",
    "created": 1234567890,
    "choices": [{"message": {"role": "assistant", "content": "Hi!"},
                 "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
})
result.text                  # "Hi!"
result.usage.total_tokens    # 30
```

Tool calls in the message are parsed into `ToolCall` objects (arguments
given as a JSON string are decoded). A missing or null `finish_reason`
counts as stop; an unknown one as error. Fields of the wrong type raise
`TypeError`.

## Streaming

`OpenAIStream` posts a request over HTTPS on a background thread and
queues the events it reads from the server-sent-event reply. Wrap it in a
`StreamResult` to iterate:

```python
from aisdk.openai_stream import OpenAIStream
from aisdk.streaming import StreamResult

stream = OpenAIStream()
stream.start_stream(
    "https://api.openai.com/v1/chat/completions",
    [("Authorization", "Bearer token"), ("Accept", "text/event-stream")],
    {"model": "gpt-4o-mini", "stream": True,
     "messages": [{"role": "user", "content": "Count from 1 to 5."}]},
)

with StreamResult(stream) as events:
    for event in events:
        if event.is_text_delta():
            print(event.text_delta, end="", flush=True)
        elif event.is_error():
            print("\nStream error:", event.error)
        elif event.is_finish():
            print("\nStream finished.")
```

A non-200 status or a connection failure becomes an error event. If no
event arrives within the event timeout (30 seconds by default,
`OpenAIStream(event_timeout=...)`), an error event is returned.
`StreamResult` also offers `collect_all()`, `has_error()`,
`error_message()`, `for_each(callback)`, `is_complete()` and `close()`;
each of these consumes the events it reads.

## Tools

```python
from aisdk.tool_executor import (
    create_simple_tool, create_tool_call, create_tool_set, execute_tool,
)

def get_weather(args, context):
    return {"location": args["location"], "forecast": "sunny"}

weather = create_simple_tool("weather", "Get the weather",
                             {"location": "string"}, get_weather)
tools = create_tool_set([("weather", weather)])

result = execute_tool(create_tool_call("weather", {"location": "Paris"}), tools)
result.is_success()   # True
result.result         # {"location": "Paris", "forecast": "sunny"}
```

Arguments are checked against the tool's schema (type, required and nested
properties) before the tool runs. Unknown tools, invalid arguments and
exceptions raised by the tool become a `ToolResult` with an error message,
not an exception. `execute_tools` runs several calls, in parallel threads
by default; the `on_tool_call_start` / `on_tool_call_finish` callbacks of
the options are only called when running sequentially, as
`execute_tools_with_options` does by default.

## Multi-step workflows

```python
from aisdk.multi_step import execute_multi_step

options.max_steps = 3
final = execute_multi_step(options, client.generate_text)
for step in final.steps:
    print(step.finish_reason, step.tool_calls, step.tool_results)
```

Each step's tool calls and results are appended to the conversation for the
next call. The loop ends on a stop, length, content-filter or error finish,
when a step has no tool calls, when every tool in a step failed, or after
`max_steps`. Text, tool calls, tool results and token usage are summed over
the steps.

## Retries

```python
from aisdk.retry import RetryConfig, RetryError, RetryPolicy

policy = RetryPolicy(RetryConfig(max_retries=3, initial_delay_ms=500,
                                 backoff_factor=2.0))
try:
    result = policy.execute_with_retry(
        lambda: client.generate_text(options),
        lambda r: r.is_retryable is True,
    )
except RetryError as exc:
    print(exc.reason_string(), exc.errors, exc.last_error)
```

`aisdk.errors` holds the exception hierarchy (`AIError`, `APIError`,
`AuthenticationError`, `RateLimitError`, `ConfigurationError`,
`NetworkError`, `ModelError`) and `is_status_code_retryable`.

## Logging

```python
from aisdk.logger import ConsoleLogger, LogLevel, NullLogger, install_logger

install_logger(ConsoleLogger(LogLevel.DEBUG))  # verbose
install_logger(NullLogger())                   # silent
```

## Running the tests

```
pytest
```