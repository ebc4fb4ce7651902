import json

import pytest

from aisdk.messages import FinishReason, StreamEventType, Usage
from aisdk.openai_stream import OpenAIStream
from aisdk.streaming import StreamResult


class FakeResponse:
    def __init__(self, status, chunks):
        self.status = status
        self._chunks = list(chunks)

    def read1(self, size):
        return self._chunks.pop(0) if self._chunks else b""

    def read(self):
        data = b"".join(self._chunks)
        self._chunks = []
        return data


class FakeConnection:
    def __init__(self, host, timeout, status, chunks, fail):
        self.host = host
        self.timeout = timeout
        self.status = status
        self.chunks = chunks
        self.fail = fail
        self.requests = []
        self.closed = False

    def request(self, method, path, body=None, headers=None):
        if self.fail is not None:
            raise self.fail
        self.requests.append((method, path, body, headers))

    def getresponse(self):
        return FakeResponse(self.status, self.chunks)

    def close(self):
        self.closed = True


def make_factory(status=200, chunks=(), fail=None):
    connections = []

    def factory(host, timeout):
        conn = FakeConnection(host, timeout, status, list(chunks), fail)
        connections.append(conn)
        return conn

    return factory, connections


def chunk_line(content=None, finish_reason=None, usage=None):
    delta = {} if content is None else {"content": content}
    body = {
        "id": "chatcmpl-stream123",
        "object": "chat.completion.chunk",
        "created": 1234567890,
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }
    if usage is not None:
        body["usage"] = usage
    return "data: " + json.dumps(body)


def streaming_response(content="Hello world!"):
    events = [chunk_line(word + " ") + "\n\n" for word in content.split(" ")]
    events.append(chunk_line(finish_reason="stop") + "\n\n")
    events.append("data: [DONE]\n\n")
    return events


FIXTURE_EVENTS = [
    chunk_line("Hello") + "\n\n",
    chunk_line(" world") + "\n\n",
    chunk_line("!", finish_reason="stop") + "\n\n",
    "data: [DONE]\n\n",
]


def drain(stream):
    events = []
    while stream.has_more_events():
        events.append(stream.get_next_event())
    return events


def meaningful(events):
    return [e for e in events if not (e.is_text_delta() and e.text_delta == "")]


def test_parse_streaming_response_lines():
    stream = OpenAIStream()
    for event in streaming_response():
        for line in event.split("\n"):
            stream.parse_sse_line(line)
    events = drain(stream)
    assert [e.type for e in events] == [
        StreamEventType.TEXT_DELTA,
        StreamEventType.TEXT_DELTA,
        StreamEventType.FINISH,
    ]
    assert [e.text_delta for e in events[:2]] == ["Hello ", "world! "]
    assert events[2].usage is None
    assert events[2].finish_reason is None


def test_finish_with_usage():
    stream = OpenAIStream()
    stream.parse_sse_line(
        chunk_line(
            finish_reason="length",
            usage={"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
        )
    )
    stream.parse_sse_line("data: [DONE]")
    events = drain(stream)
    assert len(events) == 1
    assert events[0].is_finish()
    assert events[0].usage == Usage(3, 4, 7)
    assert events[0].finish_reason is FinishReason.LENGTH


def test_tool_calls_reason_maps_to_stop():
    stream = OpenAIStream()
    stream.parse_sse_line(chunk_line(finish_reason="tool_calls", usage={}))
    stream.parse_sse_line("data: [DONE]")
    events = drain(stream)
    assert events[0].finish_reason is FinishReason.STOP
    assert events[0].usage == Usage(0, 0, 0)


def test_done_alone_pushes_single_finish():
    stream = OpenAIStream()
    assert stream.has_more_events() is True
    stream.parse_sse_line("data: [DONE]")
    events = drain(stream)
    assert [e.type for e in events] == [StreamEventType.FINISH]
    assert stream.has_more_events() is False


def test_malformed_and_non_data_lines_are_ignored():
    stream = OpenAIStream()
    stream.parse_sse_line("data: {not json")
    stream.parse_sse_line(": keep-alive")
    stream.parse_sse_line("")
    stream.parse_sse_line("data: [DONE]")
    events = drain(stream)
    assert [e.type for e in events] == [StreamEventType.FINISH]


def test_get_next_event_times_out():
    stream = OpenAIStream(event_timeout=0.05)
    event = stream.get_next_event()
    assert event.is_error()
    assert event.error == "Timeout waiting for next event"


def test_empty_event_after_completion():
    stream = OpenAIStream()
    stream.parse_sse_line("data: [DONE]")
    stream.get_next_event()
    event = stream.get_next_event()
    assert event.is_text_delta()
    assert event.text_delta == ""


def test_start_stream_full_flow():
    factory, connections = make_factory(
        chunks=["".join(FIXTURE_EVENTS).encode("utf-8")]
    )
    stream = OpenAIStream(connection_factory=factory)
    stream.start_stream(
        "https://api.example.com/v1/chat/completions",
        [("Authorization", "Bearer token")],
        {"model": "gpt-4o"},
    )
    with StreamResult(stream) as result:
        events = meaningful(list(result))
    assert "".join(e.text_delta for e in events if e.is_text_delta()) == "Hello world!"
    assert events[-1].is_finish()
    assert sum(1 for e in events if e.is_finish()) == 1

    conn = connections[0]
    assert conn.host == "api.example.com"
    method, path, body, headers = conn.requests[0]
    assert method == "POST"
    assert path == "/v1/chat/completions"
    assert json.loads(body) == {"model": "gpt-4o"}
    assert headers["Authorization"] == "Bearer token"
    assert headers["Content-Type"] == "application/json"
    assert conn.closed is True


def test_chunks_split_mid_line_and_crlf():
    data = "".join(FIXTURE_EVENTS).replace("\n", "\r\n").encode("utf-8")
    pieces = [data[i : i + 7] for i in range(0, len(data), 7)]
    factory, _ = make_factory(chunks=pieces)
    stream = OpenAIStream(connection_factory=factory)
    stream.start_stream("https://api.example.com/v1/chat/completions", [], {})
    assert StreamResult(stream).collect_all() == "Hello world!"


def test_url_without_path_uses_default_path():
    factory, connections = make_factory(chunks=[b"data: [DONE]\n"])
    stream = OpenAIStream(connection_factory=factory)
    stream.start_stream("https://api.example.com", [], {})
    events = meaningful(drain(stream))
    stream.stop_stream()
    assert [e.type for e in events] == [StreamEventType.FINISH]
    assert stream.has_more_events() is False
    assert connections[0].host == "api.example.com"
    assert connections[0].requests[0][1] == "/v1/chat/completions"


def test_http_error_status_yields_error_event():
    factory, _ = make_factory(status=500, chunks=[b"oops"])
    stream = OpenAIStream(connection_factory=factory)
    stream.start_stream("https://api.example.com/v1/chat/completions", [], {})
    events = meaningful(drain(stream))
    assert len(events) == 1
    assert events[0].is_error()
    assert events[0].error == "HTTP 500 error: oops"


def test_network_failure_yields_error_event():
    factory, _ = make_factory(fail=ConnectionRefusedError("connection refused"))
    stream = OpenAIStream(connection_factory=factory)
    stream.start_stream("https://api.example.com/v1/chat/completions", [], {})
    result = StreamResult(stream)
    assert result.error_message() == "Network error: connection refused"


@pytest.mark.parametrize("reason", ["stop", "content_filter"])
def test_finish_reason_mapping(reason):
    stream = OpenAIStream()
    stream.parse_sse_line(chunk_line(finish_reason=reason, usage={"total_tokens": 1}))
    stream.parse_sse_line("data: [DONE]")
    events = drain(stream)
    assert events[0].finish_reason.value == reason