"""Error Hierarchy — typed, categorized exceptions for every gateway failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - AuthenticationError / PolicyError end a connection attempt, never the process
    - ValidationError / PersistenceError on user messages surface through the Ack
    - to_response() produces REST envelope; to_ack() / to_event() produce socket envelopes
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ChatGatewayError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    POLICY = "policy"
    VALIDATION = "validation"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    user_message: str | None = None


class ChatGatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def public_message(self) -> str:
        return self.context.user_message or self.message

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.public_message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }

    def to_ack(self) -> dict:
        """Convert to a failed chat:send acknowledgement."""
        return {"success": False, "message": self.public_message}

    def to_event(self) -> dict:
        """Convert to a connect_error socket event."""
        return {
            "event": "connect_error",
            "data": {"message": self.public_message, "code": self.code},
        }


# ─── Connection-attempt Errors ──────────────────────────────────

class AuthenticationError(ChatGatewayError):
    """Credential missing, invalid, expired, or not resolvable to a user.

    The client only ever sees "Authentication error"; ``reason`` is for logs.
    """
    def __init__(self, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Authentication error"
        super().__init__(
            f"Authentication failed: {reason}",
            "AUTHENTICATION_ERROR", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, ctx, 401,
        )
        self.reason = reason


class PolicyError(ChatGatewayError):
    """Declared origin is not permitted by the allow-list."""
    def __init__(self, origin: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Not allowed by CORS"
        super().__init__(
            f"Origin '{origin}' not allowed",
            "ORIGIN_NOT_ALLOWED", ErrorCategory.POLICY,
            ErrorSeverity.WARNING, ctx, 403,
        )
        self.origin = origin


# ─── Message Errors ─────────────────────────────────────────────

class ValidationError(ChatGatewayError):
    """Chat payload rejected before persistence."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.INFO, context, 400,
        )
        self.field = field


# ─── Infrastructure Errors ──────────────────────────────────────

class PersistenceError(ChatGatewayError):
    """Message store or user directory operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class SearchError(ChatGatewayError):
    """Catalog search unavailable."""
    def __init__(self, message: str, query: str, context: ErrorContext | None = None):
        super().__init__(
            f"Catalog search failed: {message}",
            "SEARCH_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )
        self.query = query
