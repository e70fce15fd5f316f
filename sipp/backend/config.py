"""Saved client settings (remote URL and API key)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.prompt import Prompt

logger = logging.getLogger("sipp")

CONFIG_ENV = "SIPP_CONFIG"


class ClientConfig(BaseModel):
    remote_url: str | None = None
    api_key: str | None = None


def config_path() -> Path:
    override = os.getenv(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "sipp" / "config.json"


def load_client_config(path: Path | None = None) -> ClientConfig:
    """Read the saved config; a missing or unreadable file yields an empty one."""
    path = path or config_path()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ClientConfig()
    except OSError as exc:
        logger.warning("Could not read client config %s: %s", path, exc)
        return ClientConfig()

    try:
        return ClientConfig.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Ignoring corrupt client config %s: %s", path, exc)
        return ClientConfig()


def save_client_config(config: ClientConfig, path: Path | None = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump_json(indent=2) + "\n"

    # The file holds a credential, keep it owner-only.
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(payload)
    os.chmod(path, 0o600)
    return path


def run_auth(console: Console | None = None, path: Path | None = None) -> ClientConfig:
    """Prompt for the remote URL and API key, then save them."""
    console = console or Console()
    current = load_client_config(path)

    remote_url = Prompt.ask(
        "Remote server URL (blank for local mode)",
        default=current.remote_url or "",
        show_default=bool(current.remote_url),
        console=console,
    ).strip()
    api_key = Prompt.ask(
        "API key (blank for none)",
        password=True,
        default="",
        show_default=False,
        console=console,
    ).strip()

    config = ClientConfig(
        remote_url=remote_url.rstrip("/") or None,
        api_key=api_key or None,
    )
    saved = save_client_config(config, path)
    console.print(f"[green]Saved client config to {saved}[/green]")
    return config


__all__ = ["ClientConfig", "config_path", "load_client_config", "run_auth", "save_client_config"]
