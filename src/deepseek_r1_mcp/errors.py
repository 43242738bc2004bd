from __future__ import annotations


class DeepSeekMCPError(RuntimeError):
    """Base class for errors raised by the DeepSeek MCP server."""


class ConfigurationError(DeepSeekMCPError):
    """Raised at startup when required process configuration is missing or invalid."""


class InvalidToolArguments(DeepSeekMCPError, ValueError):
    """Raised when tool arguments do not match the advertised input schema."""
