"""Message Pipeline — validate, persist, broadcast, acknowledge, then trigger the assistant.

Invariants:
    - Rejected text: nothing persisted, nothing broadcast, no assistant turn
    - Accepted text: exactly one persist and one broadcast before the success Ack
    - The assistant is scheduled only after a successful broadcast, detached
    - Persistence/broadcast failure → "Failed to send message" Ack, logged,
      never raised to the socket loop
"""

import logging
from typing import Any

from tunechat.core.errors import ChatGatewayError
from tunechat.core.format_messages import chat_message_frame, to_message_view
from tunechat.core.repository_protocols import MessageStore
from tunechat.core.validate_message import MessageRejected, validate_chat_send
from tunechat.schemas.chat import Ack
from tunechat.services.assistant_responder import AssistantResponder
from tunechat.services.connection_registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)

FAILED_TO_SEND = "Failed to send message"


class MessagePipeline:
    def __init__(
        self,
        store: MessageStore,
        registry: ConnectionRegistry,
        responder: AssistantResponder | None = None,
    ):
        self._store = store
        self._registry = registry
        self._responder = responder

    async def handle(self, connection: Connection, payload: Any) -> Ack:
        outcome = validate_chat_send(payload)
        if isinstance(outcome, MessageRejected):
            return Ack.model_validate(outcome.error.to_ack())
        text = outcome.text
        identity = connection.identity
        log_extra = {
            "connection_id": connection.connection_id,
            "user_id": str(identity.user_id),
        }
        logger.info(f"Message received from {identity.user_name}", extra=log_extra)

        try:
            record = await self._store.create(
                identity.user_id, identity.user_name, text,
            )
            view = to_message_view(record)
            await self._registry.broadcast(chat_message_frame(view))
        except ChatGatewayError as e:
            logger.error(
                f"Error sending message: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            return Ack(success=False, message=FAILED_TO_SEND)
        except Exception as e:
            logger.error(f"Error sending message: {e}", extra=log_extra, exc_info=True)
            return Ack(success=False, message=FAILED_TO_SEND)

        if self._responder is not None:
            self._responder.schedule(text)
        return Ack(success=True, message=view)
