"""A small pluggable logger with a process-wide instance."""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Optional

__all__ = [
    "LogLevel",
    "Logger",
    "NullLogger",
    "ConsoleLogger",
    "install_logger",
    "get_logger",
    "log_debug",
    "log_info",
    "log_warn",
    "log_error",
]


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3


class Logger(ABC):
    """Base logger; formatting is done only when the level is enabled."""

    @abstractmethod
    def log(self, level: LogLevel, message: str) -> None:
        """Emit an already formatted message."""

    @abstractmethod
    def is_enabled(self, level: LogLevel) -> bool:
        """Whether messages at this level are emitted."""

    def _emit(self, level: LogLevel, fmt: str, args: tuple) -> None:
        if self.is_enabled(level):
            self.log(level, fmt.format(*args))

    def debug(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.DEBUG, fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.INFO, fmt, args)

    def warn(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.WARN, fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.ERROR, fmt, args)


class NullLogger(Logger):
    """A logger that discards everything."""

    def log(self, level: LogLevel, message: str) -> None:
        pass

    def is_enabled(self, level: LogLevel) -> bool:
        return False


class ConsoleLogger(Logger):
    """Writes to stdout, or stderr for errors, as ``[LEVEL] message``."""

    def __init__(self, min_level: LogLevel = LogLevel.INFO) -> None:
        self.min_level = min_level

    def log(self, level: LogLevel, message: str) -> None:
        if not self.is_enabled(level):
            return
        stream = sys.stderr if level == LogLevel.ERROR else sys.stdout
        print(f"[{level.name}] {message}", file=stream, flush=True)

    def is_enabled(self, level: LogLevel) -> bool:
        return level >= self.min_level

    def set_min_level(self, level: LogLevel) -> None:
        self.min_level = level


_lock = threading.Lock()
_instance: Logger = ConsoleLogger()


def install_logger(logger: Optional[Logger]) -> None:
    """Replace the process-wide logger; ``None`` is ignored."""
    global _instance
    if logger is None:
        return
    with _lock:
        _instance = logger


def get_logger() -> Logger:
    """Return the process-wide logger."""
    with _lock:
        return _instance


def log_debug(fmt: str, *args: Any) -> None:
    get_logger().debug(fmt, *args)


def log_info(fmt: str, *args: Any) -> None:
    get_logger().info(fmt, *args)


def log_warn(fmt: str, *args: Any) -> None:
    get_logger().warn(fmt, *args)


def log_error(fmt: str, *args: Any) -> None:
    get_logger().error(fmt, *args)