"""CLI: webchat chat, webchat send"""

import asyncio
import json

import click
from rich.console import Console

from rasa_webchat.chat import ChatEngine, ChatEvent
from rasa_webchat.cli.render import ConsoleSink
from rasa_webchat.models.events import EngineEvent, TransportStatus

console = Console()

transport_options = [
    click.option("-t", "--transport", type=click.Choice(["rest", "socket"]), default=None),
    click.option("--endpoint", "rest_endpoint", default=None, help="REST webhook URL."),
    click.option("--socket-url", default=None, help="Socket.IO server URL."),
    click.option("--jwt", default=None, help="Bearer token sent to the bot."),
]


def with_transport_options(fn):
    for option in reversed(transport_options):
        fn = option(fn)
    return fn


def _get_config(**overrides):
    from rasa_webchat.cli.main import _get_config
    return _get_config(**overrides)


def _get_engine(config):
    from rasa_webchat.cli.main import _get_engine
    return _get_engine(config)


def _run(coro):
    from rasa_webchat.cli.main import _run
    return _run(coro)


async def _wait_connected(engine: ChatEngine, timeout: float) -> bool:
    """Wait for the socket transport to connect; REST is always ready."""
    if engine.config.transport != "socket" or engine.status == TransportStatus.CONNECTED:
        return True
    connected = asyncio.Event()

    def handler(event: ChatEvent) -> None:
        if event.type == EngineEvent.STATUS and event.data == TransportStatus.CONNECTED:
            connected.set()

    remove = engine.add_event_handler(handler)
    try:
        await asyncio.wait_for(connected.wait(), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        return False
    finally:
        remove()


@click.command("chat")
@with_transport_options
def chat_cmd(transport, rest_endpoint, socket_url, jwt):
    """Interactive chat with the bot."""
    config = _get_config(transport=transport, rest_endpoint=rest_endpoint, socket_url=socket_url, jwt=jwt)

    async def _chat():
        engine = _get_engine(config)
        sink = ConsoleSink(console, bot_name=config.bot_name)
        engine.attach(sink)
        engine.open()
        console.print(f"[dim]Sender: {engine.session.sender_id}[/dim]")
        console.print("[cyan]Type your message (/quit to exit)[/cyan]\n")
        try:
            while True:
                msg = await asyncio.to_thread(click.prompt, "You", prompt_suffix=": ")
                if msg.lower() in ("/quit", "/exit"):
                    break
                if msg.startswith("/choose"):
                    _, _, index = msg.partition(" ")
                    try:
                        option = sink.last_options[int(index) - 1]
                    except (ValueError, IndexError):
                        console.print("[red]No such option.[/red]")
                        continue
                    engine.select_option(option)
                else:
                    engine.send_text(msg)
                await engine.drain()
        except (KeyboardInterrupt, EOFError, click.Abort):
            pass
        finally:
            engine.close()
            await engine.aclose()

    _run(_chat())


@click.command("send")
@click.argument("message")
@click.option("--json-output", "--json", is_flag=True)
@click.option("--wait", default=3.0, type=float, help="Seconds to wait for socket replies.")
@with_transport_options
def send_cmd(message: str, json_output: bool, wait: float, transport, rest_endpoint, socket_url, jwt):
    """Send a one-shot message."""
    config = _get_config(transport=transport, rest_endpoint=rest_endpoint, socket_url=socket_url, jwt=jwt)

    async def _send():
        engine = _get_engine(config)
        if json_output:
            def emit_json(event: ChatEvent) -> None:
                if event.type == EngineEvent.MESSAGE:
                    click.echo(json.dumps(event.data.model_dump()))
            engine.add_event_handler(emit_json)
        else:
            engine.attach(ConsoleSink(console, bot_name=config.bot_name))
        try:
            if not await _wait_connected(engine, wait) and not json_output:
                console.print("[yellow]Socket not connected; sending anyway.[/yellow]")
            engine.send_text(message)
            await engine.drain()
            if config.transport == "socket":
                await asyncio.sleep(wait)
        finally:
            await engine.aclose()

    _run(_send())
