"""Retrying calls whose results report failure, with exponential backoff."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from .errors import AIError

__all__ = ["RetryErrorReason", "RetryError", "RetryConfig", "RetryPolicy"]


class RetryErrorReason(Enum):
    MAX_RETRIES_EXCEEDED = "maxRetriesExceeded"
    ERROR_NOT_RETRYABLE = "errorNotRetryable"
    ABORTED = "abort"


class RetryError(AIError):
    """Raised when a call still fails after retrying, or cannot be retried."""

    def __init__(
        self, message: str, reason: RetryErrorReason, errors: Sequence[str]
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.errors = list(errors)
        self.last_error = self.errors[-1] if self.errors else ""

    def reason_string(self) -> str:
        return self.reason.value


@dataclass
class RetryConfig:
    max_retries: int = 2
    initial_delay_ms: int = 2000
    backoff_factor: float = 2.0


class _Result(Protocol):
    def is_success(self) -> bool: ...

    def error_message(self) -> str: ...


R = TypeVar("R", bound=_Result)


class RetryPolicy:
    """Calls a function until it succeeds, retrying retryable failures."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        *,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.config = config if config is not None else RetryConfig()
        self._sleep = sleep if sleep is not None else time.sleep

    def execute_with_retry(
        self, func: Callable[[], R], is_retryable: Callable[[R], bool]
    ) -> R:
        """Return the first successful result or raise RetryError."""
        max_retries = self.config.max_retries
        errors: list[str] = []
        delay_ms = self.config.initial_delay_ms

        for attempt in range(max_retries + 1):
            result = func()
            if result.is_success():
                return result

            message = result.error_message()
            errors.append(message)

            if is_retryable(result) and attempt < max_retries:
                self._sleep(delay_ms / 1000.0)
                delay_ms = int(delay_ms * self.config.backoff_factor)
                continue

            attempts = attempt + 1
            if attempt == max_retries:
                raise RetryError(
                    f"Failed after {attempts} attempts. Last error: {message}",
                    RetryErrorReason.MAX_RETRIES_EXCEEDED,
                    errors,
                )
            raise RetryError(
                f"Failed after {attempts} attempts with non-retryable error: "
                f"{message}",
                RetryErrorReason.ERROR_NOT_RETRYABLE,
                errors,
            )

        raise RetryError(
            "Retry logic error", RetryErrorReason.MAX_RETRIES_EXCEEDED, errors
        )