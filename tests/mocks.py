from __future__ import annotations

import queue
import threading
import time
from types import SimpleNamespace
from typing import IO, Any, Dict, List, Optional

from deepseek_r1_mcp.domain.models import ToolRequest, ToolResponse


def completion(*contents: Optional[str]) -> SimpleNamespace:
    """Build an object shaped like an OpenAI ChatCompletion with one choice per content."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=c)) for c in contents]
    )


class _FakeCompletions:
    def __init__(self, owner: "FakeOpenAI") -> None:
        self._owner = owner

    async def create(self, **kwargs: Any) -> Any:
        self._owner.calls.append(kwargs)
        if self._owner.error is not None:
            raise self._owner.error
        return self._owner.response


class FakeOpenAI:
    """
    Minimal AsyncOpenAI stand-in.

    Records every ``chat.completions.create`` call and replies with the
    configured response, or raises the configured error.
    """

    def __init__(self, response: Any = None, error: Optional[BaseException] = None) -> None:
        self.response = response if response is not None else completion("ok")
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=_FakeCompletions(self))


class RecordingClient:
    """Completion client stub for front-end tests."""

    def __init__(self, response: Optional[ToolResponse] = None) -> None:
        self.response = response or ToolResponse(text="generated")
        self.requests: List[ToolRequest] = []

    async def generate(self, request: ToolRequest) -> ToolResponse:
        self.requests.append(request)
        return self.response


class LineReader:
    """
    Pumps a subprocess pipe on a daemon thread so tests can wait for a line
    with a timeout instead of blocking on ``readline``.
    """

    def __init__(self, stream: IO[str]) -> None:
        self.seen: List[str] = []
        self._lines: "queue.Queue[str]" = queue.Queue()
        threading.Thread(target=self._pump, args=(stream,), daemon=True).start()

    def _pump(self, stream: IO[str]) -> None:
        for line in iter(stream.readline, ""):
            self._lines.put(line)

    def next_line(self, timeout: float = 10.0) -> str:
        try:
            line = self._lines.get(timeout=timeout)
        except queue.Empty:
            raise AssertionError(f"no output within {timeout}s; seen so far: {self.seen}") from None
        self.seen.append(line)
        return line

    def wait_for(self, text: str, timeout: float = 10.0) -> str:
        deadline = time.monotonic() + timeout
        while True:
            line = self.next_line(max(deadline - time.monotonic(), 0.01))
            if text in line:
                return line
