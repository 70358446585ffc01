from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    env: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./svyasa.db"
    auto_create_schema: bool = True

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "svyasa-secrets"
    access_token_minutes: int = 60

    post_ttl_hours: float = 24.0
    poll_interval_seconds: float = 60.0

    avatar_base_url: str = "https://i.pravatar.cc/150"
    avatar_pool_size: int = 70

    # Plain-text term list, one term or phrase per line. None -> packaged default.
    banned_terms_path: Optional[str] = None

    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"

    @field_validator("post_ttl_hours", "poll_interval_seconds")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("avatar_pool_size")
    @classmethod
    def _pool_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("avatar_pool_size must be >= 1")
        return v

    @property
    def post_ttl(self) -> timedelta:
        return timedelta(hours=self.post_ttl_hours)

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
