"""
MCP Server exposing DeepSeek R1 text generation as a single tool.

The server speaks the Model Context Protocol over stdio, advertises one tool
(``deepseek_r1``) and forwards each invocation to DeepSeek's chat completions
endpoint. Unknown tools and malformed arguments are reported as protocol
errors; failures of the remote call come back as ``isError`` text results.

Usage:
    # Run directly
    python -m deepseek_r1_mcp

    # Or via the installed script
    deepseek-r1-mcp serve
"""

from __future__ import annotations

import logging
import os
import signal
import sys
from typing import Any, List, Optional

import anyio
import anyio.abc
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .config.settings import ServerSettings
from .domain.models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    TOOL_NAME,
    ServerIdentity,
    ToolRequest,
)
from .errors import InvalidToolArguments
from .services.llm.base import CompletionClientProtocol
from .services.llm.deepseek_client import DeepSeekCompletionClient

LOG = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 1.0

DEEPSEEK_TOOL = types.Tool(
    name=TOOL_NAME,
    description="Generate text using DeepSeek R1 model",
    inputSchema={
        "type": "object",
        "properties": {
            "prompt": {
                "type": "string",
                "description": "Input text for DeepSeek",
            },
            "max_tokens": {
                "type": "number",
                "description": f"Maximum tokens to generate (default: {DEFAULT_MAX_TOKENS})",
                "minimum": 1,
                "maximum": DEFAULT_MAX_TOKENS,
            },
            "temperature": {
                "type": "number",
                "description": f"Sampling temperature (default: {DEFAULT_TEMPERATURE})",
                "minimum": 0,
                "maximum": 2,
            },
        },
        "required": ["prompt"],
    },
)


class DeepSeekR1Server:
    """
    Protocol front-end: owns the low-level MCP server and the completion client.

    ``tools/call`` is registered straight into the request handler table so
    that ``McpError`` reaches the caller as a JSON-RPC error; the decorator
    form would fold it into an ``isError`` result.
    """

    def __init__(
        self,
        settings: ServerSettings,
        *,
        client: Optional[CompletionClientProtocol] = None,
    ) -> None:
        self.identity = ServerIdentity(name=settings.server_name, version=settings.server_version)
        self.client = client if client is not None else DeepSeekCompletionClient(settings)
        self.server = Server(self.identity.name, version=self.identity.version)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        self.server.list_tools()(self.list_tools)
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    async def list_tools(self) -> List[types.Tool]:
        return [DEEPSEEK_TOOL]

    async def call_tool(self, name: str, arguments: Any) -> types.CallToolResult:
        if name != TOOL_NAME:
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))

        try:
            request = ToolRequest.from_arguments(arguments)
        except InvalidToolArguments as exc:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"Invalid chat completion arguments: {exc}",
                )
            ) from exc

        response = await self.client.generate(request)
        return response.to_call_result()

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        try:
            result = await self.call_tool(req.params.name, req.params.arguments)
        except McpError as exc:
            LOG.warning("[MCP Error] %s", exc.error.message)
            raise
        except Exception:
            LOG.exception("[MCP Error] tool %s failed", req.params.name)
            raise
        return types.ServerResult(result)

    async def serve(self, shutdown: Optional[anyio.Event] = None) -> None:
        """
        Serve MCP over stdio until the client closes the input or ``shutdown`` is set.

        Leaving the stdio scope waits for mcp's stdin reader thread, which only
        returns on the next input line or EOF; ``run_stdio`` bounds that wait.
        """
        async with stdio_server() as (read_stream, write_stream):
            LOG.info("DeepSeek R1 MCP server running on stdio")
            await self.serve_streams(read_stream, write_stream, shutdown)

        LOG.info("DeepSeek R1 MCP server stopped")

    async def serve_streams(
        self,
        read_stream: Any,
        write_stream: Any,
        shutdown: Optional[anyio.Event] = None,
    ) -> None:
        """Run the protocol session on the given streams until they close or ``shutdown`` is set."""
        if shutdown is None:
            shutdown = anyio.Event()

        async with anyio.create_task_group() as tg:
            tg.start_soon(_cancel_when_set, shutdown, tg.cancel_scope)
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
            tg.cancel_scope.cancel()


async def _cancel_when_set(event: anyio.Event, scope: anyio.CancelScope) -> None:
    await event.wait()
    scope.cancel()


def _exit_now(code: int = 0) -> None:
    logging.shutdown()
    sys.stderr.flush()
    os._exit(code)


async def _exit_on_signal(
    shutdown: anyio.Event,
    grace_seconds: float,
    *,
    task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        task_status.started()
        async for signum in signals:
            LOG.info("Received %s, closing transport", signal.Signals(signum).name)
            shutdown.set()
            break

    # Cancelled here when the transport closes in time.
    await anyio.sleep(grace_seconds)
    LOG.info("stdin still open after %.1fs, exiting", grace_seconds)
    _exit_now(0)


async def serve_until_interrupted(server: DeepSeekR1Server, grace_seconds: float = SHUTDOWN_GRACE_SECONDS) -> None:
    shutdown = anyio.Event()
    async with anyio.create_task_group() as tg:
        await tg.start(_exit_on_signal, shutdown, grace_seconds)
        await server.serve(shutdown)
        tg.cancel_scope.cancel()


def run_stdio(settings: ServerSettings) -> None:
    """Build the server from ``settings`` and serve until stdin closes or SIGINT/SIGTERM."""
    server = DeepSeekR1Server(settings)
    anyio.run(serve_until_interrupted, server)
