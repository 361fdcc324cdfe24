"""Main CLI application using Typer."""
import asyncio
import time
from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..composer import PromptComposer
from ..config import AVAILABLE_MODELS, Settings, configure_logging
from ..errors import StorageError, ValidationError
from ..fragments import FIELD_NAMES, FragmentSet
from ..history import Message, history_error_message, hydrate
from ..session import SEND_FAILED_TEXT, ChatSession
from ..tokens import estimate_tokens
from .providers import get_draft_cache, get_history, require_transport

app = typer.Typer(
    name="dmprompt",
    help="Compose sectioned prompts for a tabletop DM assistant and keep the conversation",
    no_args_is_help=True,
    add_completion=True,
)

draft_app = typer.Typer(help="Inspect and edit the cached draft", no_args_is_help=True)
app.add_typer(draft_app, name="draft")

console = Console()


@app.callback()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: DMPROMPT_LOG_LEVEL or WARNING)"
    )
):
    """dmprompt command-line interface."""
    configure_logging(log_level)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp / 1000).strftime("%Y-%m-%d %H:%M")


def _print_message(message: Message) -> None:
    if message.role == "user":
        title = f"[bold cyan]DM[/bold cyan] [dim]{_format_time(message.timestamp)} #{message.timestamp}[/dim]"
        console.print(Panel(message.content, title=title, title_align="left", border_style="cyan"))
    else:
        title = f"[bold green]Assistant[/bold green] [dim]{_format_time(message.timestamp)}[/dim]"
        console.print(Panel(message.content, title=title, title_align="left", border_style="green"))


@app.command()
def preview(
    prompt: str = typer.Option(
        None,
        "--prompt",
        "-p",
        help="Override the draft's current prompt"
    )
):
    """Show the prompt the cached draft would send, with a token estimate."""
    async def _preview():
        settings = Settings.from_env()
        cache = get_draft_cache(settings)
        try:
            blocks = await cache.load()
        finally:
            await cache.close()

        if prompt is not None:
            blocks = blocks.with_field("current_prompt", prompt)

        composer = PromptComposer()
        try:
            composed = composer.assemble(blocks)
        except ValidationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        if composed.system_message is not None:
            console.print(Panel(composed.system_message, title="[bold]system[/bold]", border_style="magenta"))
        console.print(Panel(composed.user_message, title="[bold]user[/bold]", border_style="blue"))
        console.print(f"[dim]Estimated tokens: {estimate_tokens(blocks)}[/dim]")

    asyncio.run(_preview())


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="The current prompt to send"),
    model: str = typer.Option(
        None,
        "--model",
        "-m",
        help="Model id (default: DMPROMPT_MODEL)"
    )
):
    """Send the cached draft with PROMPT as its current prompt."""
    async def _ask():
        settings = Settings.from_env()
        transport = require_transport(settings, console)
        history = get_history(settings)
        cache = get_draft_cache(settings)

        try:
            await history.connect()
            blocks = (await cache.load()).with_field("current_prompt", prompt)
            cache.save(blocks)

            session = ChatSession(transport, history, model=model or settings.model)
            console.print(f"[dim]Sending to {session.model} (~{estimate_tokens(blocks)} tokens)...[/dim]")
            reply = await session.submit(blocks)
            _print_message(reply)
            if reply.content == SEND_FAILED_TEXT:
                raise typer.Exit(code=1)

        except ValidationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        except StorageError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await cache.close()
            await history.disconnect()
            await transport.close()

    asyncio.run(_ask())


@app.command()
def history(
    page: int = typer.Option(1, "--page", help="Page number (1 = most recent)", min=1),
    limit: int = typer.Option(None, "--limit", "-l", help="Exchanges per page", min=1)
):
    """Show the conversation thread rebuilt from stored history."""
    async def _history():
        settings = Settings.from_env()
        store = get_history(settings)

        try:
            try:
                await store.connect()
                result = await store.list(page=page, limit=limit or settings.history_page_size)
            except StorageError as e:
                console.print(f"[red]Error: {e}[/red]")
                messages = [history_error_message(int(time.time() * 1000))]
            else:
                messages = hydrate(result.records)
                console.print(f"[dim]Page {result.page} of {max(result.total_pages, 1)} ({result.total} exchanges)[/dim]")
            if not messages:
                console.print("[dim]No history yet.[/dim]")
            for message in messages:
                _print_message(message)
        finally:
            await store.disconnect()

    asyncio.run(_history())


@app.command()
def delete(
    timestamp: int = typer.Argument(..., help="Timestamp of the exchange to delete")
):
    """Delete one exchange from history."""
    async def _delete():
        settings = Settings.from_env()
        store = get_history(settings)
        try:
            await store.connect()
            found = await store.delete_by_timestamp(timestamp)
        except StorageError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

        if not found:
            console.print(f"[yellow]No exchange with timestamp {timestamp}[/yellow]")
            raise typer.Exit(code=1)
        console.print(f"[green]Deleted exchange {timestamp}[/green]")

    asyncio.run(_delete())


@app.command()
def models():
    """List the available model ids."""
    table = Table(title="Models")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    for model_id, label in AVAILABLE_MODELS.items():
        table.add_row(model_id, label)
    console.print(table)


@draft_app.command("show")
def draft_show():
    """Show every field of the cached draft."""
    async def _show():
        settings = Settings.from_env()
        cache = get_draft_cache(settings)
        try:
            blocks = await cache.load()
        finally:
            await cache.close()

        table = Table(title="Draft")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for name in FIELD_NAMES:
            fragment = blocks.fragment(name)
            table.add_row(name, "" if fragment.is_blank() else fragment.render())
        console.print(table)
        console.print(f"[dim]Estimated tokens: {estimate_tokens(blocks)}[/dim]")

    asyncio.run(_show())


@draft_app.command("set")
def draft_set(
    field: str = typer.Argument(..., help=f"One of: {', '.join(FIELD_NAMES)}"),
    value: str = typer.Argument(..., help="New value (JSON objects accepted for structured fields)")
):
    """Set one field of the cached draft."""
    if field not in FIELD_NAMES:
        console.print(f"[red]Error: unknown field {field!r}[/red]")
        raise typer.Exit(code=1)

    async def _set():
        settings = Settings.from_env()
        cache = get_draft_cache(settings)
        try:
            blocks: FragmentSet = await cache.load()
            cache.save(blocks.with_field(field, value))
        finally:
            await cache.close()
        console.print(f"[green]Updated {field}[/green]")

    asyncio.run(_set())


@draft_app.command("clear")
def draft_clear():
    """Delete the cached draft."""
    async def _clear():
        settings = Settings.from_env()
        cache = get_draft_cache(settings)
        try:
            await cache.clear()
        except StorageError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await cache.close()
        console.print("[green]Draft cleared[/green]")

    asyncio.run(_clear())
