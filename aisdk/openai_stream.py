"""Server-sent-event streaming of chat completions from OpenAI-style APIs."""

from __future__ import annotations

import codecs
import http.client
import json
import queue
import ssl
import threading
import time
from typing import Any, Callable, Iterable, Optional

from .logger import log_debug, log_error, log_info
from .messages import FinishReason, Usage
from .streaming import StreamEvent, StreamSource

__all__ = ["OpenAIStream"]

_EVENT_TIMEOUT = 30.0
_POLL_INTERVAL = 0.001
_READ_TIMEOUT = 300.0
_CHUNK_SIZE = 8192
_DEFAULT_PATH = "/v1/chat/completions"

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "content_filter": FinishReason.CONTENT_FILTER,
}


def _https_connection(host: str, timeout: float) -> http.client.HTTPSConnection:
    return http.client.HTTPSConnection(
        host, timeout=timeout, context=ssl.create_default_context()
    )


def _split_url(url: str) -> tuple[str, str]:
    """Split a URL into host (with any port) and path."""
    scheme_end = url.find("://")
    if scheme_end >= 0:
        url = url[scheme_end + 3 :]
    slash = url.find("/")
    if slash < 0:
        return url, _DEFAULT_PATH
    return url[:slash], url[slash:]


def _parse_finish_reason(reason: str) -> FinishReason:
    """Unknown reasons are treated as a normal stop while streaming."""
    return _FINISH_REASONS.get(reason, FinishReason.STOP)


def _parse_usage(usage_json: Any) -> Usage:
    return Usage(
        usage_json.get("prompt_tokens", 0),
        usage_json.get("completion_tokens", 0),
        usage_json.get("total_tokens", 0),
    )


class OpenAIStream(StreamSource):
    """Reads a chat-completion event stream on a background thread.

    Events are queued as they are parsed and handed out by
    :meth:`get_next_event`.
    """

    def __init__(
        self,
        *,
        connection_factory: Optional[Callable[..., Any]] = None,
        event_timeout: float = _EVENT_TIMEOUT,
    ) -> None:
        self._connection_factory = connection_factory or _https_connection
        self._event_timeout = event_timeout
        self._queue: "queue.Queue[StreamEvent]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()
        self._complete = threading.Event()
        self._stop = threading.Event()
        self._finish_lock = threading.Lock()
        self._finish_pushed = False

    def start_stream(
        self, url: str, headers: Iterable[tuple[str, str]], request_body: Any
    ) -> None:
        """Begin streaming in the background; does nothing if already running."""
        log_debug("Starting OpenAI stream - URL: {}", url)
        with self._thread_lock:
            if self._thread is not None:
                log_debug("Stream thread already running, not starting new one")
                return
            self._stop.clear()
            self._complete.clear()
            with self._finish_lock:
                self._finish_pushed = False

            log_info("Launching stream thread for OpenAI API")
            self._thread = threading.Thread(
                target=self._run_stream,
                args=(url, list(headers), request_body),
                daemon=True,
            )
            self._thread.start()

    def get_next_event(self) -> StreamEvent:
        """Wait for the next event; an error event is returned on timeout."""
        deadline = time.monotonic() + self._event_timeout
        while True:
            try:
                event = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                pass
            else:
                log_debug("Dequeued event type: {}", event.type.value)
                return event

            if self._complete.is_set() and self._queue.empty():
                log_debug("Stream complete and queue empty, returning empty event")
                return StreamEvent.text("")

            if time.monotonic() > deadline:
                log_error(
                    "Timeout waiting for next stream event after {} seconds",
                    self._event_timeout,
                )
                return StreamEvent.failure("Timeout waiting for next event")

    def has_more_events(self) -> bool:
        return not self._queue.empty() or not self._complete.is_set()

    def stop_stream(self) -> None:
        """Ask the reader to stop and wait for its thread to finish."""
        log_debug("Stopping OpenAI stream")
        self._stop.set()
        with self._thread_lock:
            thread = self._thread
            if thread is None or thread is threading.current_thread():
                return
            log_debug("Waiting for stream thread to finish")
            thread.join()
            self._thread = None
            log_info("OpenAI stream stopped successfully")

    def __del__(self) -> None:
        self._stop.set()

    def parse_sse_line(self, line: str) -> None:
        """Handle one line of the event stream, queueing any events it yields."""
        if not line.startswith("data: "):
            if line:
                log_debug("Ignoring non-data SSE line: {}", line)
            return

        data = line[6:]
        log_debug("Processing SSE line - data length: {}", len(data))

        if data == "[DONE]":
            log_debug("Received [DONE] signal, stream ending")
            self._push_finish_event_if_needed()
            self._complete.set()
            return

        try:
            chunk = json.loads(data)
            choices = chunk.get("choices") or []
            first = choices[0] if choices else None

            if first is not None and "delta" in first:
                content = first["delta"].get("content")
                if content is not None:
                    if not isinstance(content, str):
                        raise TypeError(f"content is not a string: {content!r}")
                    log_debug("Received content chunk - length: {}", len(content))
                    self._queue.put(StreamEvent.text(content))

            if first is not None and first.get("finish_reason") is not None:
                reason_text = first["finish_reason"]
                reason = _parse_finish_reason(reason_text)
                log_debug("Stream finished with reason: {}", reason_text)
                with self._finish_lock:
                    self._finish_pushed = True

                if "usage" in chunk:
                    usage = _parse_usage(chunk["usage"])
                    log_info(
                        "Stream completed - tokens used: {} prompt, {} completion, "
                        "{} total",
                        usage.prompt_tokens,
                        usage.completion_tokens,
                        usage.total_tokens,
                    )
                    self._queue.put(StreamEvent.finish(usage, reason))
                else:
                    self._queue.put(StreamEvent.finish())
        except (ValueError, TypeError, AttributeError, KeyError, IndexError) as exc:
            log_error("Failed to parse SSE line: {} - Line content: {}", exc, data)

    def _push_finish_event_if_needed(self) -> None:
        with self._finish_lock:
            if self._finish_pushed:
                log_debug("Finish event already pushed, skipping")
                return
            self._finish_pushed = True
        log_debug("Pushing finish event to queue")
        self._queue.put(StreamEvent.finish())

    def _push_error(self, message: str) -> None:
        log_debug("Creating error event: {}", message)
        self._queue.put(StreamEvent.failure(message))

    def _run_stream(
        self, url: str, headers: list[tuple[str, str]], request_body: Any
    ) -> None:
        host, path = _split_url(url)
        log_debug("Stream thread started - connecting to {} with path: {}", host, path)

        connection = None
        try:
            connection = self._connection_factory(host, timeout=_READ_TIMEOUT)
            body = json.dumps(request_body)
            request_headers = dict(headers)
            request_headers["Content-Type"] = "application/json"
            log_debug(
                "Stream request prepared - path: {}, body size: {} bytes",
                path,
                len(body),
            )

            log_info("Sending stream request to OpenAI API")
            connection.request(
                "POST", path, body=body.encode("utf-8"), headers=request_headers
            )
            response = connection.getresponse()
            if response.status != 200:
                text = response.read().decode("utf-8", "replace")
                log_error(
                    "OpenAI stream API returned status {} - body: {}",
                    response.status,
                    text,
                )
                self._push_error(f"HTTP {response.status} error: {text}")
            else:
                self._receive(response)
        except (OSError, http.client.HTTPException) as exc:
            message = f"Network error: {exc}"
            log_error("Failed to send stream request: {}", message)
            self._push_error(message)
        except Exception as exc:
            log_error("Exception in stream thread: {}", exc)
            self._push_error(str(exc))
        finally:
            if connection is not None:
                connection.close()
            self._complete.set()
            log_debug("Stream thread exiting")

    def _receive(self, response: Any) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")("replace")
        pending = ""
        while True:
            chunk = response.read1(_CHUNK_SIZE)
            if not chunk:
                break
            log_debug("Received {} bytes of stream data", len(chunk))
            pending += decoder.decode(chunk)
            while "\n" in pending:
                line, pending = pending.split("\n", 1)
                if line.endswith("\r"):
                    line = line[:-1]
                if self._stop.is_set():
                    log_debug("Stream stop requested, ending content receiver")
                    return
                self.parse_sse_line(line)
        log_info("Stream completed successfully")