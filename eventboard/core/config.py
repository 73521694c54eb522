from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SECONDS_PER_DAY = 24 * 60 * 60


class Settings(BaseSettings):
    app_env: str = "local"
    api_port: int = 8000
    log_level: str = "INFO"

    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_db: str = "event_board"
    postgres_user: str = "event_board"
    postgres_password: str = "event_board"
    database_url_override: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL_OVERRIDE", "DATABASE_URL"),
    )
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30

    cors_allowed_origins_raw: str = "http://127.0.0.1:3000,http://localhost:3000"
    trusted_hosts_raw: str = "127.0.0.1,localhost"
    force_https: bool = False

    event_join_limit: int = Field(default=3, ge=1)
    event_join_window_seconds: int = Field(default=SECONDS_PER_DAY, ge=1)
    event_creation_limit: int = Field(default=3, ge=1)
    event_creation_window_seconds: int = Field(default=SECONDS_PER_DAY, ge=1)
    event_creation_limit_enabled: bool = False
    rate_limit_max_entries: int | None = Field(default=None, ge=1)
    rate_limit_sweep_interval_seconds: int = Field(default=3600, ge=0)
    rate_limit_sweep_grace_seconds: int = Field(default=0, ge=0)

    discord_webhook_url: str | None = None
    discord_timeout_seconds: float = 5.0
    public_app_url: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_allowed_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.cors_allowed_origins_raw.split(",")
            if origin.strip()
        ]

    @property
    def trusted_hosts(self) -> list[str]:
        return [
            host.strip() for host in self.trusted_hosts_raw.split(",") if host.strip()
        ]

    def validate_security_settings(self) -> None:
        if self.app_env.lower() != "production":
            return

        if not self.cors_allowed_origins:
            raise ValueError(
                "CORS_ALLOWED_ORIGINS_RAW must define explicit origins in production."
            )
        if "*" in self.cors_allowed_origins:
            raise ValueError("Wildcard CORS origin is not allowed in production.")
        if not self.trusted_hosts:
            raise ValueError(
                "TRUSTED_HOSTS_RAW must define explicit hosts in production."
            )
        if "*" in self.trusted_hosts:
            raise ValueError("Wildcard trusted host is not allowed in production.")
        if self.discord_webhook_url and not self.discord_webhook_url.startswith("https://"):
            raise ValueError("DISCORD_WEBHOOK_URL must use https in production.")
        # Limiter state lives in process memory and must not grow without bound.
        if self.rate_limit_max_entries is None and self.rate_limit_sweep_interval_seconds == 0:
            raise ValueError(
                "Set RATE_LIMIT_MAX_ENTRIES or a positive "
                "RATE_LIMIT_SWEEP_INTERVAL_SECONDS in production."
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
