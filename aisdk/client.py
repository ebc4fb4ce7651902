"""The provider-independent client interface."""

from __future__ import annotations

from typing import Optional

from .options import GenerateOptions, GenerateResult, StreamOptions
from .streaming import StreamResult

__all__ = ["Client"]


class Client:
    """A client that delegates to a provider implementation, if one is set.

    Providers subclass this and override its methods; a bare ``Client``
    wrapping another client forwards every call to it.
    """

    def __init__(self, impl: Optional["Client"] = None) -> None:
        self._impl = impl

    def generate_text(self, options: GenerateOptions) -> GenerateResult:
        if self._impl is not None:
            return self._impl.generate_text(options)
        return GenerateResult.failure("Client not initialized")

    def stream_text(self, options: StreamOptions) -> StreamResult:
        if self._impl is not None:
            return self._impl.stream_text(options)
        return StreamResult()

    def is_valid(self) -> bool:
        if self._impl is not None:
            return self._impl.is_valid()
        return False

    def provider_name(self) -> str:
        if self._impl is not None:
            return self._impl.provider_name()
        return "unknown"

    def supported_models(self) -> list[str]:
        if self._impl is not None:
            return self._impl.supported_models()
        return []

    def supports_model(self, model_name: str) -> bool:
        if self._impl is not None:
            return self._impl.supports_model(model_name)
        return False

    def config_info(self) -> str:
        if self._impl is not None:
            return self._impl.config_info()
        return "No configuration"

    def default_model(self) -> str:
        if self._impl is not None:
            return self._impl.default_model()
        return ""