"""Building blocks for AI chat clients: messages, tools, multi-step calls, streaming and retries."""

__version__ = "0.1.0"