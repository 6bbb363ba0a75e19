"""Assistant Responder — detached, delayed, catalog-backed replies from the music bot.

Invariants:
    - schedule() never blocks the caller and returns immediately
    - Each reply waits a delay drawn uniformly from [min_delay_ms, max_delay_ms]
    - A scheduled reply is not tied to the triggering connection: it is still
      broadcast to whoever is admitted when it fires
    - SearchError → non-search reply; the turn still happens
    - Any other failure (persistence, broadcast, bug) is logged and the reply
      is dropped; nothing propagates, nothing is retried
    - Pending tasks are strongly referenced until done, then released

Design Decisions:
    - delay_source and sleep are injectable so tests run without real waiting
    - No cancellation API: process shutdown abandons in-flight replies
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

from tunechat.core.assistant_replies import (
    GENERIC_REPLY, build_search_query, compose_reply,
)
from tunechat.core.domain_types import CatalogResults, Identity, assistant_identity
from tunechat.core.errors import ChatGatewayError, SearchError
from tunechat.core.format_messages import chat_message_frame, to_message_view
from tunechat.core.repository_protocols import CatalogSearch, MessageStore
from tunechat.schemas.chat import ChatMessageView
from tunechat.services.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)

DelaySource = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class AssistantResponder:
    def __init__(
        self,
        store: MessageStore,
        registry: ConnectionRegistry,
        catalog: CatalogSearch,
        identity: Identity | None = None,
        min_delay_ms: int = 1000,
        max_delay_ms: int = 2000,
        delay_source: DelaySource | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._store = store
        self._registry = registry
        self._catalog = catalog
        self.identity = identity or assistant_identity()
        self._min_delay_ms = min_delay_ms
        self._max_delay_ms = max_delay_ms
        self._delay_source = delay_source or self._random_delay_ms
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _random_delay_ms(self) -> float:
        return random.uniform(self._min_delay_ms, self._max_delay_ms)  # nosec B311

    def schedule(self, original_text: str) -> asyncio.Task:
        """Spawn a detached reply task for ``original_text``."""
        delay_ms = self._delay_source()
        task = asyncio.create_task(
            self.respond(original_text, delay_ms),
            name="assistant-reply",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def respond(
        self, original_text: str, delay_ms: float = 0,
    ) -> ChatMessageView | None:
        """Wait, generate, persist, and broadcast one reply. Never raises."""
        try:
            if delay_ms > 0:
                await self._sleep(delay_ms / 1000)
            reply = await self.generate_reply(original_text)
            record = await self._store.create(
                self.identity.user_id, self.identity.user_name, reply,
            )
            view = to_message_view(record)
            logger.info(
                "Bot responding",
                extra={"message_id": view.id, "delay_ms": round(delay_ms)},
            )
            await self._registry.broadcast(chat_message_frame(view))
            return view
        except ChatGatewayError as e:
            logger.error(
                f"Error sending bot response: {e.message}",
                extra={"error_code": e.code},
            )
        except Exception as e:
            logger.error(f"Error sending bot response: {e}", exc_info=True)
        return None

    async def generate_reply(self, original_text: str) -> str:
        results = await self._search(original_text)
        return compose_reply(original_text, results) or GENERIC_REPLY

    async def _search(self, original_text: str) -> CatalogResults | None:
        query = build_search_query(original_text)
        if not query:
            return CatalogResults()
        try:
            return await self._catalog.search(query)
        except SearchError as e:
            logger.warning(
                f"Catalog search unavailable, replying without it: {e.message}",
                extra={"error_code": e.code},
            )
            return None

    def abandon(self) -> int:
        """Report in-flight replies at shutdown; they are left to die with the loop."""
        count = len(self._tasks)
        if count:
            logger.info(f"Abandoning {count} pending assistant replies")
        return count
