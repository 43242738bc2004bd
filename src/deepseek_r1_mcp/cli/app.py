from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import anyio
import typer
from rich.console import Console
from rich.panel import Panel

from ..config.settings import ServerSettings, get_settings
from ..domain.models import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ToolRequest
from ..errors import ConfigurationError, InvalidToolArguments
from ..mcp_server import DEEPSEEK_TOOL, run_stdio
from ..services.llm.deepseek_client import DeepSeekCompletionClient

app = typer.Typer(add_completion=False, help="DeepSeek R1 exposed as an MCP tool over stdio.")
# stdout carries MCP frames while serving, so diagnostics go to stderr.
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _load_settings(log_level: Optional[str] = None) -> ServerSettings:
    try:
        settings = get_settings()
        if log_level:
            settings = settings.with_log_level(log_level)
    except ConfigurationError as exc:
        err_console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc
    return settings


def _serve(log_level: Optional[str]) -> None:
    settings = _load_settings(log_level)
    configure_logging(settings.log_level)
    run_stdio(settings)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Run the stdio server when no sub-command is given, so MCP clients can
    launch the bare executable.
    """
    if ctx.invoked_subcommand is None:
        _serve(None)


@app.command()
def serve(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Overrides DEEPSEEK_MCP_LOG_LEVEL."),
) -> None:
    """
    Serve the deepseek_r1 tool over MCP stdio until stdin closes or SIGINT.
    """
    _serve(log_level)


@app.command()
def tools() -> None:
    """
    Print the advertised tool catalog as JSON.
    """
    catalog = {"tools": [DEEPSEEK_TOOL.model_dump(mode="json", exclude_none=True)]}
    console.print_json(json.dumps(catalog))


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt sent as the user message."),
    max_tokens: int = typer.Option(DEFAULT_MAX_TOKENS, "--max-tokens", "-m"),
    temperature: float = typer.Option(DEFAULT_TEMPERATURE, "--temperature", "-t"),
) -> None:
    """
    Send one prompt through the same client the MCP tool uses.
    """
    settings = _load_settings()
    configure_logging(settings.log_level)

    try:
        request = ToolRequest.from_arguments(
            {"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature}
        )
    except InvalidToolArguments as exc:
        err_console.print(f"[bold red]Invalid arguments:[/] {exc}")
        raise typer.Exit(code=2) from exc

    client = DeepSeekCompletionClient(settings)
    response = anyio.run(client.generate, request)

    if response.is_error:
        err_console.print(Panel(response.text, title="DeepSeek error", border_style="red"))
        raise typer.Exit(code=1)

    console.print(Panel(response.text, title=f"[bold green]{settings.model}[/]"))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
