"""TuneChat Gateway — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChatGatewayError → structured JSON responses
    - CORS and the WebSocket handshake share one origin decision function
    - Database and gateway built on startup via lifespan context manager
    - Shutdown abandons in-flight assistant replies (no cancellation, no wait)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tunechat.api.error_handlers import register_error_handlers
from tunechat.api.origin_middleware import OriginPolicyCORSMiddleware
from tunechat.api.routes import chat_history, chat_socket, health
from tunechat.config import get_settings
from tunechat.infrastructure.database import init_db
from tunechat.infrastructure.observability import setup_logging
from tunechat.services.gateway import build_sql_gateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if settings.uses_default_jwt_secret:
        log = logger.warning if settings.is_production else logger.info
        log("JWT_SECRET not set; using the development default secret")
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.gateway = build_sql_gateway(settings, db)
    logger.info(f"TuneChat gateway started on port {settings.port}")
    yield
    app.state.gateway.responder.abandon()
    await db.dispose()
    logger.info("TuneChat gateway shutting down")


app = FastAPI(
    title="TuneChat Gateway", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    OriginPolicyCORSMiddleware, allowed_origins=settings.allowed_origins,
)

app.include_router(health.root_router)
app.include_router(health.router)
app.include_router(chat_history.router)
app.include_router(chat_socket.router)

register_error_handlers(app)


def run() -> None:
    """Console entry point: serve with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("tunechat.main:app", host="0.0.0.0", port=get_settings().port)  # nosec B104
