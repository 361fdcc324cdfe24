"""Rebuild a chronological message thread from stored exchanges.

Hydration is pure: it never touches storage. A record whose snapshot
cannot be decoded gets a placeholder snapshot instead of aborting the batch.
"""

import logging
from collections.abc import Iterable

from ..errors import ParseError
from ..fragments import FragmentSet
from .models import ExchangeRecord, Message

logger = logging.getLogger(__name__)

MISSING_PROMPT_TEXT = "(no current prompt recorded)"
UNPARSEABLE_RECORD_TEXT = "(unparseable history record)"
HISTORY_UNAVAILABLE_TEXT = "Failed to load history, but you can still start a new conversation."


def message_id(timestamp: int, role: str) -> str:
    return f"{timestamp}_{role}"


def parse_snapshot(record: ExchangeRecord) -> FragmentSet:
    """Decode a record's snapshot, substituting a placeholder when it is corrupt."""
    try:
        return FragmentSet.from_json(record.user_input)
    except ParseError as e:
        logger.warning("Unparseable history record at %s: %s", record.timestamp, e)
        return FragmentSet(current_prompt=UNPARSEABLE_RECORD_TEXT)


def hydrate(records: Iterable[ExchangeRecord]) -> list[Message]:
    """Expand exchange records into an ascending message thread.

    Args:
        records: Records in any order (stores return most-recent-first)

    Returns:
        For each record by ascending timestamp: a user message carrying the
        snapshot, then an assistant message if a response was stored
    """
    messages: list[Message] = []
    for record in sorted(records, key=lambda r: r.timestamp):
        blocks = parse_snapshot(record)
        content = blocks.current_prompt if blocks.current_prompt.strip() else MISSING_PROMPT_TEXT

        messages.append(Message(
            id=message_id(record.timestamp, "user"),
            role="user",
            content=content,
            timestamp=record.timestamp,
            blocks=blocks
        ))

        if record.ai_response is not None:
            messages.append(Message(
                id=message_id(record.timestamp, "assistant"),
                role="assistant",
                content=record.ai_response,
                timestamp=record.timestamp
            ))

    return messages


def history_error_message(timestamp: int) -> Message:
    """Build the stand-in message shown when the whole history fetch fails."""
    return Message(
        id=f"error_{timestamp}",
        role="assistant",
        content=HISTORY_UNAVAILABLE_TEXT,
        timestamp=timestamp
    )
