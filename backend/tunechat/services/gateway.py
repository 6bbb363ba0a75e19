"""Chat Gateway — wires registry, verifier, pipeline, and assistant for one process.

Invariants:
    - Exactly one ConnectionRegistry per gateway, shared by pipeline and assistant
    - Collaborators injected: SQL-backed in production, fakes in tests
"""

from dataclasses import dataclass, field

from tunechat.config import Settings
from tunechat.core.domain_types import assistant_identity
from tunechat.core.repository_protocols import (
    CatalogSearch, MessageStore, UserDirectory,
)
from tunechat.infrastructure.database import DatabaseSessionManager
from tunechat.infrastructure.stores import (
    SqlCatalogSearch, SqlMessageStore, SqlUserDirectory,
)
from tunechat.services.assistant_responder import AssistantResponder
from tunechat.services.connection_registry import ConnectionRegistry
from tunechat.services.credential_verifier import CredentialVerifier
from tunechat.services.message_pipeline import MessagePipeline


@dataclass
class ChatGateway:
    registry: ConnectionRegistry
    verifier: CredentialVerifier
    pipeline: MessagePipeline
    responder: AssistantResponder
    store: MessageStore
    allowed_origins: list[str] = field(default_factory=list)
    handshake_timeout_seconds: float = 10.0
    history_default_limit: int = 50


def build_gateway(
    settings: Settings,
    users: UserDirectory,
    store: MessageStore,
    catalog: CatalogSearch,
    **responder_kwargs,
) -> ChatGateway:
    """Assemble a gateway from settings and collaborator implementations."""
    registry = ConnectionRegistry(settings.broadcast_send_timeout_seconds)
    responder = AssistantResponder(
        store, registry, catalog,
        identity=assistant_identity(settings.assistant_name),
        min_delay_ms=settings.assistant_min_delay_ms,
        max_delay_ms=settings.assistant_max_delay_ms,
        **responder_kwargs,
    )
    return ChatGateway(
        registry=registry,
        verifier=CredentialVerifier(
            users, settings.jwt_secret, algorithm=settings.jwt_algorithm,
        ),
        pipeline=MessagePipeline(store, registry, responder),
        responder=responder,
        store=store,
        allowed_origins=settings.allowed_origins,
        handshake_timeout_seconds=settings.handshake_timeout_seconds,
        history_default_limit=settings.chat_history_default_limit,
    )


def build_sql_gateway(settings: Settings, db: DatabaseSessionManager) -> ChatGateway:
    return build_gateway(
        settings,
        users=SqlUserDirectory(db),
        store=SqlMessageStore(db),
        catalog=SqlCatalogSearch(db),
    )
