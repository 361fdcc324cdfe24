"""Chat session: submission, history loading and the visible thread."""

import logging
import time
from collections.abc import Callable

from ..composer import PromptComposer
from ..config import DEFAULT_HISTORY_PAGE_SIZE, DEFAULT_MODEL
from ..errors import StorageError, TransportError
from ..fragments import FragmentSet
from ..history import ExchangeRecord, HistoryStore, Message, history_error_message, hydrate, message_id
from ..transport import ChatTransport

logger = logging.getLogger(__name__)

SEND_FAILED_TEXT = "Sorry, the message could not be sent. Please try again later."


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChatSession:
    """One editing session's view of the conversation.

    Hidden design decisions:
    - How a submission is turned into an exchange record
    - What the thread shows when the transport or history store fails
    - Ignoring replies that arrive after the session was closed

    A failed exchange adds one failure message and leaves everything
    already in the thread untouched.
    """

    def __init__(
        self,
        transport: ChatTransport,
        history: HistoryStore,
        model: str = DEFAULT_MODEL,
        composer: PromptComposer | None = None,
        clock: Callable[[], int] | None = None
    ):
        """Initialize the session.

        Args:
            transport: Chat transport used for submissions
            history: History store to read from and append to
            model: Default model id passed to the transport
            composer: Prompt composer (default: PromptComposer())
            clock: Epoch-milliseconds clock
        """
        self._transport = transport
        self._history = history
        self._model = model
        self._composer = composer or PromptComposer()
        self._clock = clock or _now_ms
        self._messages: list[Message] = []
        self._closed = False

    @property
    def messages(self) -> tuple[Message, ...]:
        """The current thread, oldest first."""
        return tuple(self._messages)

    @property
    def model(self) -> str:
        return self._model

    @model.setter
    def model(self, value: str) -> None:
        self._model = value

    @property
    def closed(self) -> bool:
        return self._closed

    async def load_history(
        self,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_PAGE_SIZE
    ) -> tuple[Message, ...]:
        """Replace the thread with hydrated history.

        If the store cannot be read, the thread becomes a single error
        message and the session stays usable for new exchanges.

        Args:
            page: History page to load (1 = most recent)
            limit: Records per page

        Returns:
            The new thread
        """
        try:
            result = await self._history.list(page=page, limit=limit)
        except StorageError:
            logger.exception("Failed to load history")
            thread = [history_error_message(self._clock())]
        else:
            thread = hydrate(result.records)
            logger.info("Loaded %d history messages", len(thread))

        if self._closed:
            logger.debug("Session closed while loading history, discarding result")
            return tuple(thread)

        self._messages = thread
        return self.messages

    async def submit(
        self,
        fragment_set: FragmentSet,
        model: str | None = None
    ) -> Message:
        """Compose, send and record one exchange.

        Once the session is closed, the thread is no longer touched, even
        by an exchange that was already in flight.

        Args:
            fragment_set: The draft to submit
            model: Model override for this exchange

        Returns:
            The assistant reply message, or the failure message if the
            transport failed

        Raises:
            ValidationError: If current_prompt is blank; nothing is sent
                and the thread is unchanged
        """
        composed = self._composer.assemble(fragment_set)

        sent_at = self._clock()
        pending = Message(
            id=message_id(sent_at, "user"),
            role="user",
            content=fragment_set.current_prompt,
            timestamp=sent_at,
            blocks=fragment_set
        )
        if not self._closed:
            self._messages.append(pending)

        try:
            reply = await self._transport.send(composed.to_messages(), model or self._model)
        except TransportError as e:
            failed_at = self._clock()
            failure = Message(
                id=f"{failed_at}_error",
                role="assistant",
                content=SEND_FAILED_TEXT,
                timestamp=failed_at
            )
            if self._closed:
                logger.debug("Session closed before send failed, ignoring: %s", e)
                return failure
            logger.error("Failed to send message: %s", e)
            self._messages.append(failure)
            return failure

        answer = Message(
            id=message_id(reply.timestamp, "assistant"),
            role="assistant",
            content=reply.content,
            timestamp=reply.timestamp
        )

        if self._closed:
            logger.debug("Session closed before reply arrived, discarding it")
            return answer

        record = ExchangeRecord.from_exchange(fragment_set, reply.content, reply.timestamp)
        try:
            await self._history.append(record)
        except StorageError:
            logger.exception("Failed to store exchange at %s", reply.timestamp)

        if self._closed:
            logger.debug("Session closed while storing exchange, leaving thread as is")
            return answer

        # Restamp the live user message with the record's key so the thread
        # matches what hydration will rebuild from history
        self._replace(pending, pending.model_copy(update={
            "id": message_id(reply.timestamp, "user"),
            "timestamp": reply.timestamp
        }))
        self._messages.append(answer)
        return answer

    async def delete(self, timestamp: int) -> bool:
        """Delete an exchange from history and drop it from the thread.

        Returns:
            Whether the history store had a record with this timestamp
        """
        found = await self._history.delete_by_timestamp(timestamp)
        ids = {message_id(timestamp, "user"), message_id(timestamp, "assistant")}
        self._messages = [m for m in self._messages if m.id not in ids]
        return found

    def close(self) -> None:
        """Mark the session torn down; late replies become no-ops."""
        self._closed = True

    def _replace(self, old: Message, new: Message) -> None:
        for i, message in enumerate(self._messages):
            if message is old:
                self._messages[i] = new
                return
