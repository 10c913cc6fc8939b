"""CLI: webchat session show|reset"""

import time

import click
from rich.console import Console

from rasa_webchat.sessions import SessionStore

console = Console()


def _get_store() -> SessionStore:
    from rasa_webchat.cli.main import _get_config, _get_storage
    config = _get_config()
    return SessionStore(
        _get_storage(),
        storage_key=config.storage_key,
        session_timeout=config.session_timeout,
        user_id=config.user_id,
    )


@click.group()
def session():
    """Persisted sender identity."""


@session.command("show")
def session_show():
    """Show the current sender id (creates one if none is stored)."""
    current = _get_store().load()
    age = max(0, int(time.time() * 1000) - current.timestamp) // 1000
    console.print(f"Sender: [bold]{current.sender_id}[/bold]")
    console.print(f"[dim]Last active {age}s ago[/dim]")


@session.command("reset")
def session_reset():
    """Discard the stored sender id and start a new session."""
    current = _get_store().reset()
    console.print(f"[green]New session: {current.sender_id}[/green]")
