"""Boundary Protocols — contracts between the chat core and its collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Protocol

from tunechat.core.domain_types import (
    CatalogResults, ChatMessageRecord, UserId, UserRecord,
)


class UserDirectory(Protocol):
    """Resolves a user id to a display name — implemented by shell."""
    async def find_by_id(self, user_id: UserId) -> UserRecord | None: ...


class MessageStore(Protocol):
    """Durable append of chat messages — implemented by shell.

    create() assigns id and created_at and returns only once durable.
    """
    async def create(
        self, user_id: UserId, user_name: str, text: str,
    ) -> ChatMessageRecord: ...
    async def list_recent(self, limit: int) -> list[ChatMessageRecord]: ...


class CatalogSearch(Protocol):
    """Free-text lookup over songs and albums — implemented by shell."""
    async def search(self, query: str) -> CatalogResults: ...
