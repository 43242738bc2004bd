from __future__ import annotations

from typing import Protocol

from ...domain.models import ToolRequest, ToolResponse


class CompletionClientProtocol(Protocol):
    """Minimal interface the MCP front-end needs from a completion provider."""

    async def generate(self, request: ToolRequest) -> ToolResponse:  # pragma: no cover
        ...
