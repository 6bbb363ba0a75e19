"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - CORS_ORIGINS is a comma-separated string; allowed_origins is the parsed list
    - assistant_min_delay_ms <= assistant_max_delay_ms

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - jwt_secret keeps a development default; using it in production is logged
      loudly at startup rather than refused (see DESIGN.md open questions)
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tunechat.core.domain_types import DEFAULT_ASSISTANT_NAME
from tunechat.core.origin_policy import parse_allowed_origins

DEFAULT_JWT_SECRET = "devsecret"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: str = "development"
    port: int = 4000

    # Database
    database_url: str = (
        "postgresql+asyncpg://tunechat:tunechat@db:5432/tunechat"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Credentials
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"

    # API
    cors_origins: str = ""
    handshake_timeout_seconds: float = 10.0
    broadcast_send_timeout_seconds: float = 5.0
    chat_history_default_limit: int = 50

    # Assistant
    assistant_name: str = DEFAULT_ASSISTANT_NAME
    assistant_min_delay_ms: int = 1000
    assistant_max_delay_ms: int = 2000

    @model_validator(mode="after")
    def check_delay_bounds(self) -> "Settings":
        if self.assistant_min_delay_ms > self.assistant_max_delay_ms:
            raise ValueError("assistant_min_delay_ms must be <= assistant_max_delay_ms")
        return self

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def allowed_origins(self) -> list[str]:
        return parse_allowed_origins(self.cors_origins)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def uses_default_jwt_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET


@lru_cache
def get_settings() -> Settings:
    return Settings()
