"""
oishine_backoffice.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT secret, bootstrap password).
- Refuse to start outside dev without an explicit JWT secret.
- Offer a cached settings instance for the process entrypoint.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Only ever used when env == "dev".
_DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """
    - Strict env-driven configuration (prefix `OISHINE_`)
    - Defaults safe for local dev only
    - Single settings object injected across layers via `app.state`
    """

    model_config = SettingsConfigDict(env_prefix="OISHINE_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "oishine-backoffice"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "oishine-backoffice"
    jwt_audience: str = "oishine-admin"
    jwt_secret: str = Field(default="", repr=False)
    token_ttl_hours: int = Field(default=24, ge=1)
    auth_cookie_name: str = "admin-token"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./oishine.db"

    # Realtime: max queued events per connection before it is dropped as a slow consumer.
    realtime_outbox_size: int = Field(default=256, ge=1)

    # Default SUPER_ADMIN created by POST /v1/setup/admin
    bootstrap_admin_email: str = "admin@oishine.com"
    bootstrap_admin_name: str = "Admin OISHINE"
    bootstrap_admin_password: str = Field(default="admin123", repr=False)

    @model_validator(mode="after")
    def _require_jwt_secret(self) -> Settings:
        if not self.jwt_secret:
            if self.env != "dev":
                raise ValueError(f"OISHINE_JWT_SECRET must be set when env={self.env!r}")
            self.jwt_secret = _DEV_JWT_SECRET
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.env == "prod"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars when the entrypoint asks more than once.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every other module receives a `Settings` instance explicitly; nothing reads
# environment variables directly.
