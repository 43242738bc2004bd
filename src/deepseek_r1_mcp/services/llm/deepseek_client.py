from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from ...config.settings import ServerSettings
from ...domain.models import NO_RESPONSE, ToolRequest, ToolResponse

LOG = logging.getLogger(__name__)


class MalformedResponseError(RuntimeError):
    """Raised when the completion endpoint answers with an unexpected shape."""


class DeepSeekCompletionClient:
    """
    Thin wrapper around DeepSeek's OpenAI-compatible Chat Completions API.

    The wrapper keeps the MCP front-end agnostic of the SDK surface area and
    centralizes text extraction + error handling. Failures never escape
    ``generate``; they come back as an error ``ToolResponse`` so the caller
    always has text to display.
    """

    def __init__(self, settings: ServerSettings, *, client: Optional[Any] = None) -> None:
        if client is None:
            client = AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url)

        self._client = client
        self._model = settings.model
        self._system_prompt = settings.system_prompt

    @property
    def model(self) -> str:
        return self._model

    def build_messages(self, prompt: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": prompt},
        ]

    async def generate(self, request: ToolRequest) -> ToolResponse:
        """
        Request one completion for ``request`` and translate the outcome.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=self.build_messages(request.prompt),
                max_tokens=request.max_tokens,
                temperature=request.temperature,
            )
            text = self._extract_text(response)
        except Exception as exc:
            LOG.error("DeepSeek API error: %s", exc)
            return ToolResponse(text=f"DeepSeek API error: {_describe_error(exc)}", is_error=True)

        return ToolResponse(text=text or NO_RESPONSE)

    @staticmethod
    def _extract_text(response: object) -> str:
        """
        Pull the first choice's message content out of a chat completion.

        An empty choice list or an empty message is a valid answer with no
        text; a body without ``choices`` at all is not.
        """
        choices = getattr(response, "choices", None)
        if choices is None:
            raise MalformedResponseError("response did not include a 'choices' field")
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or ""


def _describe_error(exc: BaseException) -> str:
    # openai.APIError exposes the provider's own text as ``.message``.
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)
