"""Chat History — recent messages for clients joining the room.

Invariants:
    - Requires a valid bearer credential (header or ``token`` query)
    - Messages returned oldest first, same view shape as chat:message
    - limit bounded 1..200; default from settings
"""

import logging

from fastapi import APIRouter, Depends, Query

from tunechat.api.dependencies import get_gateway, require_identity
from tunechat.core.domain_types import Identity
from tunechat.core.format_messages import to_message_view
from tunechat.schemas.chat import ChatHistoryResponse
from tunechat.services.gateway import ChatGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/messages", response_model=ChatHistoryResponse)
async def list_messages(
    limit: int | None = Query(None, ge=1, le=200),
    identity: Identity = Depends(require_identity),
    gateway: ChatGateway = Depends(get_gateway),
):
    records = await gateway.store.list_recent(limit or gateway.history_default_limit)
    logger.debug(
        "History served",
        extra={"user_id": str(identity.user_id), "count": len(records)},
    )
    return ChatHistoryResponse(messages=[to_message_view(r) for r in records])
