"""SQL Collaborators — user directory, message store, and catalog search over SQLAlchemy.

Invariants:
    - Each call opens its own session (safe under concurrent use from many connections)
    - MessageStore.create commits before returning: the record is durable on return
    - Catalog failures surface as SearchError, everything else as PersistenceError
    - Catalog search is case-insensitive substring match, OR across keywords,
      at most MAX_RESULTS songs and MAX_RESULTS albums
    - %, _ and backslash in a keyword match themselves, never act as wildcards

Design Decisions:
    - Records returned as frozen dataclasses, not ORM rows: callers never touch
      a detached session
"""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import or_, select

from tunechat.core.domain_types import (
    CatalogItem, CatalogResults, ChatMessageRecord, MessageId, UserId, UserRecord,
)
from tunechat.core.errors import PersistenceError, SearchError
from tunechat.infrastructure.database import DatabaseSessionManager
from tunechat.models.album import Album
from tunechat.models.chat_message import ChatMessage
from tunechat.models.song import Song
from tunechat.models.user import User

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
LIKE_ESCAPE = "\\"


def _escape_like(keyword: str) -> str:
    """Match %, _ and the escape char literally inside an ILIKE pattern."""
    return (
        keyword.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _to_record(row: ChatMessage) -> ChatMessageRecord:
    return ChatMessageRecord(
        id=MessageId(row.id),
        user_id=UserId(row.user_id),
        user_name=row.user_name,
        text=row.text,
        created_at=row.created_at,
    )


class SqlUserDirectory:
    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def find_by_id(self, user_id: UserId) -> UserRecord | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(User.id, User.name).where(User.id == user_id),
            )
            row = result.one_or_none()
        if row is None:
            return None
        return UserRecord(id=UserId(row.id), name=row.name)


class SqlMessageStore:
    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def create(
        self, user_id: UserId, user_name: str, text: str,
    ) -> ChatMessageRecord:
        row = ChatMessage(
            id=uuid4(),
            user_id=user_id,
            user_name=user_name,
            text=text,
            created_at=datetime.now(timezone.utc),
        )
        async with self._db.session() as session:
            session.add(row)
            await session.commit()
        return _to_record(row)

    async def list_recent(self, limit: int) -> list[ChatMessageRecord]:
        """Most recent ``limit`` messages, oldest first."""
        async with self._db.session() as session:
            result = await session.execute(
                select(ChatMessage)
                .order_by(ChatMessage.created_at.desc())
                .limit(limit),
            )
            rows = list(result.scalars().all())
        return [_to_record(r) for r in reversed(rows)]


class SqlCatalogSearch:
    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def search(self, query: str) -> CatalogResults:
        keywords = [k for k in query.lower().split() if k]
        if not keywords:
            return CatalogResults()
        try:
            async with self._db.session() as session:
                songs = await self._match(session, Song, keywords)
                albums = await self._match(session, Album, keywords)
        except PersistenceError as e:
            raise SearchError(e.message, query) from e
        logger.debug(
            f"Catalog search '{query}': {len(songs)} songs, {len(albums)} albums",
        )
        return CatalogResults(songs=songs, albums=albums)

    @staticmethod
    async def _match(session, model, keywords: list[str]) -> tuple[CatalogItem, ...]:
        clauses = []
        for kw in keywords:
            pattern = f"%{_escape_like(kw)}%"
            clauses.append(model.name.ilike(pattern, escape=LIKE_ESCAPE))
            clauses.append(model.description.ilike(pattern, escape=LIKE_ESCAPE))
        result = await session.execute(
            select(model).where(or_(*clauses)).order_by(model.name).limit(MAX_RESULTS),
        )
        return tuple(
            CatalogItem(id=str(row.id), name=row.name, description=row.description or "")
            for row in result.scalars().all()
        )
