from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from ..errors import ConfigurationError

DEFAULT_SYSTEM_PROMPT = "Vous êtes un assistant intelligent et polyvalent."


@dataclass(frozen=True)
class ServerSettings:
    """
    Process configuration, built once at startup and handed to the server.

    Nothing in the request path reads the environment; everything it needs
    lives here.
    """

    api_key: str
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-reasoner"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    server_name: str = "deepseek_r1"
    server_version: str = "1.0.0"
    log_level: str = "INFO"

    def with_log_level(self, level: str) -> "ServerSettings":
        return replace(self, log_level=_parse_log_level(level))


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"Unknown log level: {raw!r}")
    return level


def get_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[Path] = None,
) -> ServerSettings:
    """
    Build settings from environment variables.

    When ``env`` is omitted, a ``.env`` file (``dotenv_path``, else the one in
    the working directory) is loaded into the process environment first,
    without overriding variables that are already set.
    """

    if env is None:
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)
        env = os.environ

    api_key = env.get("DEEPSEEK_API_KEY")
    if not api_key:
        raise ConfigurationError("DEEPSEEK_API_KEY environment variable is required")

    settings = ServerSettings(api_key=api_key)

    base_url = env.get("DEEPSEEK_BASE_URL")
    if base_url:
        settings = replace(settings, base_url=base_url)

    model = env.get("DEEPSEEK_MODEL")
    if model:
        settings = replace(settings, model=model)

    system_prompt = env.get("DEEPSEEK_SYSTEM_PROMPT")
    if system_prompt:
        settings = replace(settings, system_prompt=system_prompt)

    log_level = env.get("DEEPSEEK_MCP_LOG_LEVEL")
    if log_level:
        settings = settings.with_log_level(log_level)

    return settings
