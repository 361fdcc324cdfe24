"""Configuration constants and environment-driven settings.

Centralizes magic numbers and reads runtime configuration from the
environment (optionally populated from a .env file).
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Draft cache configuration
DRAFT_CACHE_KEY = "currentState"  # Single reserved slot for the in-progress draft
DEFAULT_DEBOUNCE_SECONDS = 0.5

# Token estimation
CHARS_PER_TOKEN = 4

# History configuration
DEFAULT_HISTORY_PAGE_SIZE = 10

# Transport defaults
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

AVAILABLE_MODELS = {
    "gemini-2.5-flash": "Gemini 2.5 Flash",
    "gemini-2.5-flash-lite": "Gemini 2.5 Flash Lite",
    "gemini-2.5-pro": "Gemini 2.5 Pro",
    "gpt-5-chat-latest": "GPT-5 Chat Latest",
    "o3-2025-04-16": "O3 (2025-04-16)",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    """Runtime settings for the CLI and its collaborators."""

    provider: str = "openai"
    api_key: str | None = None
    base_url: str | None = None
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    history_backend: str = "sqlite"
    history_path: Path = Path("./dmprompt_history.db")
    draft_backend: str = "sqlite"
    draft_path: Path = Path("./dmprompt_drafts.db")
    debounce_ms: int = Field(default=int(DEFAULT_DEBOUNCE_SECONDS * 1000), ge=0)
    history_page_size: int = Field(default=DEFAULT_HISTORY_PAGE_SIZE, ge=1)
    log_level: str = "WARNING"

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from DMPROMPT_* environment variables.

        Args:
            dotenv: Whether to load a .env file first

        Returns:
            Settings instance

        Environment variables:
            DMPROMPT_PROVIDER: Transport provider (openai, deepseek, gemini; default: openai)
            DMPROMPT_API_KEY: API key (falls back to OPENAI_API_KEY)
            DMPROMPT_BASE_URL: OpenAI-compatible base URL override
            DMPROMPT_MODEL: Default model id (default: gemini-2.5-flash)
            DMPROMPT_TEMPERATURE: Sampling temperature (default: 0.7)
            DMPROMPT_MAX_TOKENS: Completion token cap (default: 2000)
            DMPROMPT_HISTORY_BACKEND / DMPROMPT_HISTORY_PATH: History store
            DMPROMPT_DRAFT_BACKEND / DMPROMPT_DRAFT_PATH: Draft store
            DMPROMPT_DEBOUNCE_MS: Draft save debounce window (default: 500)
            DMPROMPT_HISTORY_PAGE_SIZE: Records loaded on start (default: 10)
            DMPROMPT_LOG_LEVEL: Logging level (default: WARNING)
        """
        if dotenv:
            load_dotenv()

        env = os.environ
        values: dict[str, object] = {
            "api_key": env.get("DMPROMPT_API_KEY") or env.get("OPENAI_API_KEY"),
            "base_url": env.get("DMPROMPT_BASE_URL") or None,
        }
        mapping = {
            "provider": "DMPROMPT_PROVIDER",
            "model": "DMPROMPT_MODEL",
            "temperature": "DMPROMPT_TEMPERATURE",
            "max_tokens": "DMPROMPT_MAX_TOKENS",
            "history_backend": "DMPROMPT_HISTORY_BACKEND",
            "history_path": "DMPROMPT_HISTORY_PATH",
            "draft_backend": "DMPROMPT_DRAFT_BACKEND",
            "draft_path": "DMPROMPT_DRAFT_PATH",
            "debounce_ms": "DMPROMPT_DEBOUNCE_MS",
            "history_page_size": "DMPROMPT_HISTORY_PAGE_SIZE",
            "log_level": "DMPROMPT_LOG_LEVEL",
        }
        for field_name, var in mapping.items():
            if env.get(var):
                values[field_name] = env[var]

        return cls.model_validate(values)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command-line use."""
    if level is None:
        level = os.getenv("DMPROMPT_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
