"""CLI: webchat config show|set"""

import json

import click
from rich.console import Console

from rasa_webchat.errors import ConfigurationError

console = Console()

LIST_KEYS = {"socket_transports"}


@click.group()
def config():
    """Client configuration."""


@config.command("show")
@click.option("--json-output", "--json", is_flag=True)
def config_show(json_output: bool):
    """Show the effective configuration."""
    from rasa_webchat.cli.main import _get_config
    effective = _get_config().model_dump()
    if effective.get("jwt"):
        effective["jwt"] = "***"
    if json_output:
        click.echo(json.dumps(effective, indent=2))
        return
    for key, value in effective.items():
        console.print(f"[bold]{key}[/bold] = {value}")


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set one configuration value."""
    from rasa_webchat.cli.main import _build_config, _load_config, _save_config
    parsed = [v.strip() for v in value.split(",") if v.strip()] if key in LIST_KEYS else value
    try:
        validated = _build_config(**{key: parsed})
    except (ConfigurationError, TypeError) as e:
        console.print(f"[red]Cannot set {key}: {e}[/red]")
        raise SystemExit(1)
    cfg = _load_config()
    cfg[key] = getattr(validated, key)
    _save_config(cfg)
    console.print(f"[green]{key} updated.[/green]")
