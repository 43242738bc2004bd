from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping

from mcp import types

from ..errors import InvalidToolArguments

TOOL_NAME = "deepseek_r1"
NO_RESPONSE = "No response"
DEFAULT_MAX_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.2


def _is_number(value: Any) -> bool:
    # JSON booleans decode to bool, which Python treats as an int.
    return isinstance(value, Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class ServerIdentity:
    name: str
    version: str


@dataclass(frozen=True)
class ToolRequest:
    prompt: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE

    @classmethod
    def from_arguments(cls, arguments: Any) -> "ToolRequest":
        """
        Parse raw ``tools/call`` arguments into a typed request.

        Absent (or null) optional fields take their defaults. The advertised
        bounds are not enforced here; only the primitive types are checked.
        """

        if not isinstance(arguments, Mapping):
            raise InvalidToolArguments("arguments must be an object")

        prompt = arguments.get("prompt")
        if not isinstance(prompt, str):
            raise InvalidToolArguments("'prompt' must be a string")
        if not prompt:
            raise InvalidToolArguments("'prompt' must not be empty")

        max_tokens = arguments.get("max_tokens")
        if max_tokens is None:
            max_tokens = DEFAULT_MAX_TOKENS
        elif not _is_number(max_tokens):
            raise InvalidToolArguments("'max_tokens' must be a number")
        elif not float(max_tokens).is_integer():
            raise InvalidToolArguments("'max_tokens' must be a whole number")

        temperature = arguments.get("temperature")
        if temperature is None:
            temperature = DEFAULT_TEMPERATURE
        elif not _is_number(temperature):
            raise InvalidToolArguments("'temperature' must be a number")

        return cls(prompt=prompt, max_tokens=int(max_tokens), temperature=float(temperature))


@dataclass(frozen=True)
class ToolResponse:
    text: str
    is_error: bool = False

    def to_call_result(self) -> types.CallToolResult:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=self.text)],
            isError=self.is_error,
        )
