"""Domain Types — rich types that replace bare primitives across the gateway.

Invariants:
    - UserId, MessageId wrap UUIDs — never use bare UUID in domain logic
    - Identity is immutable once built (frozen dataclass)
    - ASSISTANT_USER_ID is a well-formed UUID, stored exactly like a real user's id
    - All socket event names encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
MessageId = NewType("MessageId", UUID)

ASSISTANT_USER_ID = UserId(UUID("00000000-0000-4000-8000-00000000b07a"))
DEFAULT_ASSISTANT_NAME = "Music Bot"


@dataclass(frozen=True)
class Identity:
    """Authenticated author of chat messages."""
    user_id: UserId
    user_name: str


def assistant_identity(name: str = DEFAULT_ASSISTANT_NAME) -> Identity:
    """The reserved identity the assistant posts under (never credential-verified)."""
    return Identity(user_id=ASSISTANT_USER_ID, user_name=name)


# ─── Records returned by collaborators ───────────────────────────

@dataclass(frozen=True)
class UserRecord:
    id: UserId
    name: str


@dataclass(frozen=True)
class ChatMessageRecord:
    """Durable chat message — id and created_at assigned by the message store."""
    id: MessageId
    user_id: UserId
    user_name: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class CatalogItem:
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class CatalogResults:
    songs: tuple[CatalogItem, ...] = ()
    albums: tuple[CatalogItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.songs and not self.albums


# ─── Enums ───────────────────────────────────────────────────────

class ChatEvent(str, Enum):
    """Socket event names carried in the frame ``event`` field."""
    CONNECT = "connect"
    CONNECT_ERROR = "connect_error"
    SEND = "chat:send"
    MESSAGE = "chat:message"
    ACK = "ack"


class CloseCode(int, Enum):
    """WebSocket close codes used by the gateway."""
    POLICY_VIOLATION = 1008
    UNAUTHORIZED = 4401
