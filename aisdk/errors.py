"""Exception hierarchy shared by every part of the SDK."""

from __future__ import annotations

__all__ = [
    "AIError",
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "ConfigurationError",
    "NetworkError",
    "ModelError",
    "is_status_code_retryable",
]


def is_status_code_retryable(status_code: int) -> bool:
    """Return True if an HTTP status code signals a retryable failure."""
    return status_code in (408, 409, 429) or status_code >= 500


class AIError(Exception):
    """Base class for all SDK errors."""


class APIError(AIError):
    """An error reported by a provider's API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"API Error ({status_code}): {message}")
        self.status_code = status_code

    def is_retryable(self) -> bool:
        """Whether the status code suggests the request may succeed on retry."""
        return is_status_code_retryable(self.status_code)


class AuthenticationError(APIError):
    """Authentication or authorisation failed."""

    def __init__(self, message: str) -> None:
        super().__init__(401, f"Authentication failed: {message}")


class RateLimitError(APIError):
    """The provider rejected the request because of rate limiting."""

    def __init__(self, message: str) -> None:
        super().__init__(429, f"Rate limit exceeded: {message}")


class ConfigurationError(AIError):
    """The SDK was configured incorrectly."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Configuration error: {message}")


class NetworkError(AIError):
    """A connection or transport problem."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Network error: {message}")


class ModelError(AIError):
    """An invalid model or an unsupported operation."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Model error: {message}")