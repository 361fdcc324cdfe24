"""Collaborator factory functions for the CLI.

Centralizes creation of the transport, history store and draft cache from
Settings. Hides configuration details from command implementations.
"""

import typer
from rich.console import Console

from ..config import Settings
from ..drafts import DraftCache, create_key_value_store
from ..history import HistoryStore, create_history_store
from ..transport import ChatTransport, create_chat_transport

_console = Console()


def get_history(settings: Settings) -> HistoryStore:
    """Create the history store (not yet connected)."""
    return create_history_store(settings.history_backend, path=settings.history_path)


def get_draft_cache(settings: Settings) -> DraftCache:
    """Create the draft cache; its store connects on first use."""
    store = create_key_value_store(settings.draft_backend, path=settings.draft_path)
    return DraftCache(store, debounce_seconds=settings.debounce_seconds)


def require_transport(settings: Settings, console: Console | None = None) -> ChatTransport:
    """Create the chat transport, exiting if no API key is configured.

    Raises:
        typer.Exit: If the API key is missing or the provider is unknown
    """
    con = console or _console
    if not settings.api_key:
        con.print("[red]Error: DMPROMPT_API_KEY (or OPENAI_API_KEY) not set in environment[/red]")
        raise typer.Exit(code=1)

    try:
        return create_chat_transport(
            settings.provider,
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens
        )
    except ValueError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
