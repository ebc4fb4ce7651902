"""Stream events and the iterable result of a streaming request."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .messages import FinishReason, StreamEventType, Usage

__all__ = ["StreamEvent", "StreamSource", "StreamResult"]


@dataclass
class StreamEvent:
    """One event produced while streaming."""

    type: StreamEventType
    text_delta: str = ""
    error: Optional[str] = None
    usage: Optional[Usage] = None
    finish_reason: Optional[FinishReason] = None
    metadata: Optional[str] = None

    @classmethod
    def text(cls, text: str) -> "StreamEvent":
        return cls(StreamEventType.TEXT_DELTA, text_delta=text)

    @classmethod
    def failure(cls, message: str) -> "StreamEvent":
        return cls(StreamEventType.ERROR, error=message)

    @classmethod
    def finish(
        cls,
        usage: Optional[Usage] = None,
        finish_reason: Optional[FinishReason] = None,
    ) -> "StreamEvent":
        return cls(StreamEventType.FINISH, usage=usage, finish_reason=finish_reason)

    def is_text_delta(self) -> bool:
        return self.type is StreamEventType.TEXT_DELTA

    def is_error(self) -> bool:
        return self.type is StreamEventType.ERROR

    def is_finish(self) -> bool:
        return self.type is StreamEventType.FINISH


class StreamSource(ABC):
    """A producer of stream events, such as a provider connection."""

    @abstractmethod
    def get_next_event(self) -> StreamEvent:
        """Block until the next event is available and return it."""

    @abstractmethod
    def has_more_events(self) -> bool:
        """Whether further events may still arrive."""

    @abstractmethod
    def stop_stream(self) -> None:
        """Stop producing events and release resources."""


class StreamResult:
    """Iterates over the events of a stream; consuming it drains the source."""

    def __init__(self, source: Optional[StreamSource] = None) -> None:
        self._source = source

    def __iter__(self) -> Iterator[StreamEvent]:
        source = self._source
        while source is not None and source.has_more_events():
            yield source.get_next_event()

    def __enter__(self) -> "StreamResult":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def for_each(self, callback: Callable[[StreamEvent], None]) -> None:
        for event in self:
            callback(event)

    def collect_all(self) -> str:
        """Concatenate the text of every remaining text delta."""
        return "".join(event.text_delta for event in self if event.is_text_delta())

    def has_error(self) -> bool:
        return any(event.is_error() for event in self)

    def error_message(self) -> str:
        for event in self:
            if event.is_error() and event.error is not None:
                return event.error
        return ""

    def is_complete(self) -> bool:
        return self._source is None or not self._source.has_more_events()

    def close(self) -> None:
        """Stop the underlying stream."""
        if self._source is not None:
            self._source.stop_stream()