"""roomfolks command line.

Commands:
- roomfolks run       Connect, reconcile rooms and serve events
- roomfolks prompt    One-shot completion through the assistant provider
- roomfolks config    Show the effective configuration
"""

import asyncio
import json
import signal
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from roomfolks import __logo__, __version__
from roomfolks.bot.lifecycle import Bot
from roomfolks.config.loader import load_config, redact
from roomfolks.config.schema import Config
from roomfolks.errors import ConfigError, ModerationFlaggedError, RoomfolksError
from roomfolks.plugins.assistant import AssistantPlugin
from roomfolks.plugins.base import Plugin
from roomfolks.plugins.sayhi import SayHiPlugin
from roomfolks.providers.litellm_provider import LiteLLMProvider
from roomfolks.storage.sync_store import open_sync_store
from roomfolks.transport.matrix import MatrixTransport
from roomfolks.utils.logging import configure_logging

app = typer.Typer(
    name="roomfolks",
    help=f"{__logo__} roomfolks - a plugin-driven Matrix bot",
    no_args_is_help=True,
)
console = Console()
STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _load(config_path: Optional[Path]) -> Config:
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)


def make_provider(config: Config) -> LiteLLMProvider:
    assistant = config.assistant
    return LiteLLMProvider(
        api_key=assistant.api_key or None,
        api_base=assistant.api_base,
        model=assistant.model,
        moderation_model=assistant.moderation_model,
        system_prompt=assistant.prompt,
        max_tokens=assistant.max_tokens,
    )


def make_plugins(config: Config) -> List[Plugin]:
    """Bundled plugins enabled by ``config``, in registration order."""
    plugins: List[Plugin] = []
    if config.assistant.enabled:
        plugins.append(AssistantPlugin(make_provider(config), config.assistant.response_chance))
    plugins.append(SayHiPlugin())
    return plugins


async def serve(config: Config) -> None:
    """Log in, build the bot and run it until it terminates."""
    store = open_sync_store(config.storage_backend())
    transport = MatrixTransport(
        config.matrix.homeserver,
        config.matrix.username,
        config.matrix.password,
        store=store,
        device_name=config.matrix.device_name,
        sync_timeout_ms=config.matrix.sync_timeout_ms,
    )
    installed = []
    try:
        await transport.login()
        bot = Bot(transport, rooms=config.matrix.rooms, plugins=make_plugins(config))

        loop = asyncio.get_running_loop()
        for sig in STOP_SIGNALS:
            try:
                loop.add_signal_handler(sig, bot.stop)
            except NotImplementedError:
                # Not available on Windows event loops
                continue
            installed.append(sig)

        await bot.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await transport.close()
        store.close()


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.json"),
    homeserver: Optional[str] = typer.Option(None, "--homeserver", envvar="MATRIX_HOMESERVER", help="Matrix homeserver URL"),
    username: Optional[str] = typer.Option(None, "--username", envvar="MATRIX_USERNAME", help="Matrix username"),
    password: Optional[str] = typer.Option(None, "--password", envvar="MATRIX_PASSWORD", help="Matrix password"),
    rooms: Optional[List[str]] = typer.Option(None, "--room", "-r", envvar="MATRIX_ROOMS", help="Room ID to occupy (repeatable)"),
    database_dsn: Optional[str] = typer.Option(None, "--database-dsn", envvar="DATABASE_DSN", help="SQLite database for sync state"),
    api_key: Optional[str] = typer.Option(None, "--api-key", envvar="OPEN_AI_KEY", help="Completion provider API key"),
    prompt: Optional[str] = typer.Option(None, "--prompt", envvar="OPENAI_PROMPT", help="System prompt for the assistant"),
    chance: Optional[int] = typer.Option(None, "--chance", min=0, max=100, help="Percent of messages the assistant answers"),
    log_level: Optional[str] = typer.Option(None, "--log-level", envvar="LOG_LEVEL", help="Log level (DEBUG, INFO, WARNING...)"),
    log_pretty: Optional[bool] = typer.Option(None, "--log-pretty/--log-json", envvar="LOG_PRETTY", help="Human-readable logs"),
):
    """Connect to Matrix, reconcile rooms and serve events."""
    config = _load(config_path)

    try:
        if homeserver:
            config.matrix.homeserver = homeserver
        if username:
            config.matrix.username = username
        if password:
            config.matrix.password = password
        if rooms:
            # MATRIX_ROOMS may be comma-separated
            config.matrix.rooms = [room.strip() for item in rooms for room in item.split(",") if room.strip()]
        if database_dsn:
            config.storage.backend = "sqlite"
            config.storage.dsn = database_dsn
        if api_key:
            config.assistant.api_key = api_key
        if prompt:
            config.assistant.prompt = prompt
        if chance is not None:
            config.assistant.response_chance = chance
        if log_level:
            config.logging.level = log_level
        if log_pretty is not None:
            config.logging.pretty = log_pretty
    except ValueError as e:
        console.print(f"[red]❌ Invalid option: {e}[/red]")
        raise typer.Exit(1)

    configure_logging(
        level=config.logging.level,
        log_file=Path(config.logging.file) if config.logging.file else None,
        pretty=config.logging.pretty,
    )

    missing = config.missing_matrix_fields()
    if missing:
        console.print(f"[red]❌ Missing Matrix settings: {', '.join(missing)}[/red]")
        raise typer.Exit(1)

    logger.info(f"Starting roomfolks {__version__} for {config.matrix.username}")
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except RoomfolksError as e:
        logger.error(f"Bot terminated: {e}")
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)


@app.command("prompt")
def prompt_command(
    text: str = typer.Argument(..., help="Message to send to the assistant"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.json"),
    api_key: Optional[str] = typer.Option(None, "--api-key", envvar="OPEN_AI_KEY", help="Completion provider API key"),
    system_prompt: Optional[str] = typer.Option(None, "--prompt", envvar="OPENAI_PROMPT", help="System prompt"),
):
    """Send one message to the completion provider and print the reply."""
    config = _load(config_path)
    if api_key:
        config.assistant.api_key = api_key
    if system_prompt:
        config.assistant.prompt = system_prompt

    provider = make_provider(config)
    try:
        with console.status("[cyan]Thinking...[/cyan]", spinner="dots"):
            reply = asyncio.run(provider.prompt(text))
    except ModerationFlaggedError as e:
        console.print(f"[yellow]⚠️ {e}[/yellow]")
        raise typer.Exit(2)
    except RoomfolksError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    console.print(Panel(reply, title=f"{__logo__} {config.assistant.model}", border_style="green"))


@app.command("config")
def show_config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Show the effective configuration with secrets masked."""
    config = _load(config_path)
    data = redact(config.model_dump(by_alias=True))
    console.print(Syntax(json.dumps(data, indent=2), "json"))


if __name__ == "__main__":
    app()
