"""Pytest configuration and shared fixtures."""
import itertools
import os
from typing import Any

import pytest

from dmprompt.drafts.in_memory import InMemoryKeyValueStore
from dmprompt.errors import StorageError
from dmprompt.fragments import FragmentSet
from dmprompt.history.in_memory import InMemoryHistoryStore
from dmprompt.transport import ChatMessage, ChatTransport, TransportReply


class FakeTransport(ChatTransport):
    """Transport that replays canned replies or failures without a network."""

    def __init__(self, replies: list[Any] | None = None, start: int = 1_000):
        self._replies = list(replies or [])
        self._timestamps = itertools.count(start, 10)
        self.calls: list[tuple[list[ChatMessage], str | None]] = []
        self.closed = False

    async def send(self, messages, model=None, **kwargs) -> TransportReply:
        self.calls.append((list(messages), model))
        outcome = self._replies.pop(0) if self._replies else "ok"
        if isinstance(outcome, Exception):
            raise outcome
        return TransportReply(content=outcome, timestamp=next(self._timestamps), model=model or "fake")

    async def close(self) -> None:
        self.closed = True


class RecordingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that counts connects and writes."""

    def __init__(self):
        super().__init__()
        self.connects = 0
        self.puts: list[tuple[str, dict]] = []

    async def connect(self) -> None:
        self.connects += 1

    async def put(self, key, value) -> None:
        self.puts.append((key, value))
        await super().put(key, value)


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Store whose reads and writes always fail."""

    async def get(self, key):
        raise StorageError("disk on fire", backend="memory")

    async def put(self, key, value) -> None:
        raise StorageError("disk on fire", backend="memory")


class FailingHistoryStore(InMemoryHistoryStore):
    """History store whose reads and writes always fail."""

    async def list(self, page=1, limit=20):
        raise StorageError("database unavailable", backend="memory")

    async def append(self, record) -> None:
        raise StorageError("database unavailable", backend="memory")


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY")
    }


@pytest.fixture
def clock():
    """Deterministic epoch-milliseconds clock advancing 1 ms per call."""
    counter = itertools.count(500)
    return lambda: next(counter)


@pytest.fixture
def full_blocks():
    """A fragment set with every field filled in."""
    return FragmentSet(
        current_prompt="What does the goblin chief do when the party bursts in?",
        game_log="The party sneaked past the wolves and reached the cave mouth.",
        module_snippet="Cragmaw Hideout, area 8: Klarg's cave.",
        dm_private="Klarg has a secret escape tunnel behind the crates.",
        char_status={"Tordek": {"hp": 12, "conditions": ["poisoned"]}},
        system_prompt="You are an experienced D&D 5e dungeon master.",
        character_cards='{"Tordek": {"class": "Fighter", "level": 3}}',
        items={"Tordek": ["battleaxe", "chain mail"]},
        other="Session 4, running about 20 minutes late."
    )


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def memory_history():
    return InMemoryHistoryStore()


@pytest.fixture
def recording_store():
    return RecordingKeyValueStore()
