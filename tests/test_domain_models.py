from __future__ import annotations

from typing import Any

import pytest

from deepseek_r1_mcp.domain.models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ToolRequest,
    ToolResponse,
)
from deepseek_r1_mcp.errors import InvalidToolArguments


def test_prompt_only_takes_defaults() -> None:
    request = ToolRequest.from_arguments({"prompt": "hello"})

    assert request == ToolRequest(prompt="hello", max_tokens=8192, temperature=0.2)
    assert request.max_tokens == DEFAULT_MAX_TOKENS
    assert request.temperature == DEFAULT_TEMPERATURE


def test_explicit_values_are_kept() -> None:
    request = ToolRequest.from_arguments({"prompt": "hi", "max_tokens": 256, "temperature": 1})

    assert request.max_tokens == 256
    assert isinstance(request.max_tokens, int)
    assert request.temperature == 1.0
    assert isinstance(request.temperature, float)


def test_null_optional_fields_fall_back_to_defaults() -> None:
    request = ToolRequest.from_arguments({"prompt": "hi", "max_tokens": None, "temperature": None})

    assert request.max_tokens == DEFAULT_MAX_TOKENS
    assert request.temperature == DEFAULT_TEMPERATURE


def test_integral_float_max_tokens_is_accepted() -> None:
    assert ToolRequest.from_arguments({"prompt": "hi", "max_tokens": 512.0}).max_tokens == 512


def test_bounds_are_not_enforced() -> None:
    request = ToolRequest.from_arguments({"prompt": "hi", "max_tokens": 100000, "temperature": 5})

    assert request.max_tokens == 100000
    assert request.temperature == 5.0


@pytest.mark.parametrize(
    "arguments",
    [
        None,
        "prompt",
        ["prompt"],
        {},
        {"prompt": None},
        {"prompt": 42},
        {"prompt": ["a"]},
        {"prompt": ""},
        {"max_tokens": 10},
    ],
)
def test_bad_prompt_is_rejected(arguments: Any) -> None:
    with pytest.raises(InvalidToolArguments):
        ToolRequest.from_arguments(arguments)


@pytest.mark.parametrize(
    "extra",
    [
        {"max_tokens": "100"},
        {"max_tokens": True},
        {"max_tokens": [1]},
        {"max_tokens": 10.5},
        {"temperature": "0.5"},
        {"temperature": False},
        {"temperature": {"value": 1}},
    ],
)
def test_wrong_typed_optional_fields_are_rejected(extra: dict) -> None:
    with pytest.raises(InvalidToolArguments):
        ToolRequest.from_arguments({"prompt": "hi", **extra})


def test_tool_response_wraps_text_block() -> None:
    result = ToolResponse(text="answer").to_call_result()

    assert result.isError is False
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert result.content[0].text == "answer"


def test_error_response_sets_is_error_flag() -> None:
    result = ToolResponse(text="DeepSeek API error: boom", is_error=True).to_call_result()

    assert result.isError is True
    assert result.content[0].text == "DeepSeek API error: boom"
