"""
Rasa webchat CLI — `webchat` command.

Commands:
  webchat chat                 Interactive REPL chat
  webchat send <message>       One-shot message
  webchat session show|reset   Persisted sender identity
  webchat config show|set      Client configuration
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install rasa-webchat-client[cli]")

from pydantic import ValidationError

from rasa_webchat import __version__
from rasa_webchat.chat import ChatEngine
from rasa_webchat.errors import ConfigurationError
from rasa_webchat.models.config import ChatConfig
from rasa_webchat.storage import FileStore

console = Console()


def _home() -> Path:
    return Path(os.environ.get("RASA_WEBCHAT_HOME") or Path.home() / ".rasa_webchat")


def _config_file() -> Path:
    return _home() / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(_config_file().read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    path = _config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


def _build_config(**overrides: Any) -> ChatConfig:
    cfg = _load_config()
    cfg.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ChatConfig(**cfg)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", details={"errors": e.errors()})


def _get_config(**overrides: Any) -> ChatConfig:
    try:
        return _build_config(**overrides)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _get_storage() -> FileStore:
    return FileStore(_home() / "storage.json")


def _get_engine(config: ChatConfig) -> ChatEngine:
    """Must be called inside a running event loop."""
    return ChatEngine(config, storage=_get_storage())


def _run(coro):
    return asyncio.run(coro)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log transport activity.")
def main(verbose: bool):
    """Rasa webchat CLI — talk to a Rasa bot from the terminal."""
    _setup_logging(verbose)


# Register subcommands from separate modules
from rasa_webchat.cli.chat import chat_cmd, send_cmd
from rasa_webchat.cli.session import session
from rasa_webchat.cli.config import config

main.add_command(chat_cmd)
main.add_command(send_cmd)
main.add_command(session)
main.add_command(config)


if __name__ == "__main__":
    main()
