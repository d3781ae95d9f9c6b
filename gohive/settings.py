from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read from OS env and optional .env file in project root.
    _project_root = Path(__file__).parent.parent

    model_config = SettingsConfigDict(
        env_file=str(_project_root / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_timezone: str | None = Field(
        None,
        alias="LOG_TIMEZONE",
        description="IANA timezone used for log timestamps; defaults to system local time",
    )
    log_dir: str = Field("logs", alias="LOG_DIR")

    # Listening ports for each service
    gateway_port: int = Field(3000, alias="GATEWAY_PORT")
    user_service_port: int = Field(3001, alias="USER_SERVICE_PORT")
    post_service_port: int = Field(3002, alias="POST_SERVICE_PORT")
    mentor_service_port: int = Field(3003, alias="MENTOR_SERVICE_PORT")

    # Upstream targets the gateway proxies to
    user_service_url: str = Field("http://localhost:3001", alias="USER_SERVICE_URL")
    post_service_url: str = Field("http://localhost:3002", alias="POST_SERVICE_URL")
    mentor_service_url: str = Field("http://localhost:3003", alias="MENTOR_SERVICE_URL")
    proxy_timeout_seconds: float = Field(
        30.0,
        alias="PROXY_TIMEOUT_SECONDS",
        description="Request/response timeout for a single proxied call",
        gt=0,
    )

    # Session tokens
    jwt_secret_key: str = Field(
        "change-me",
        alias="JWT_SECRET",
        description="HMAC secret used to sign session tokens",
    )
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    jwt_expire_minutes: int = Field(60, alias="JWT_EXPIRE_MINUTES", ge=1)

    # Redis connection string (token store)
    redis_url: str = Field(
        "redis://localhost:6379/0",
        alias="REDIS_URL",
        description="Redis connection URL, e.g. 'redis://redis:6379/0'",
    )

    # Gateway interceptors
    rate_limit_window_seconds: int = Field(300, alias="RATE_LIMIT_WINDOW_SECONDS", ge=1)
    rate_limit_max_requests: int = Field(5, alias="RATE_LIMIT_MAX_REQUESTS", ge=1)
    json_body_limit_bytes: int = Field(
        10 * 1024 * 1024,
        alias="JSON_BODY_LIMIT_BYTES",
        description="Largest JSON request body accepted by the gateway",
    )
    cors_allow_origins: str = Field(
        "http://localhost:4200",
        alias="CORS_ALLOW_ORIGINS",
        description="Comma separated list of allowed CORS origins",
    )

    # Managed auth/database backend
    supabase_url: str = Field("", alias="SUPABASE_URL")
    supabase_service_key: str = Field("", alias="SUPABASE_SERVICE_KEY")

    # Chat-completion API used by the AI mentor
    openai_api_key: str = Field("", alias="OPENAI_API_KEY")
    openai_base_url: str = Field("https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    openai_model: str = Field("gpt-4.1", alias="OPENAI_MODEL")
    openai_temperature: float = Field(0.7, alias="OPENAI_TEMPERATURE")
    openai_timeout_seconds: float = Field(60.0, alias="OPENAI_TIMEOUT_SECONDS", gt=0)
    mentor_goal_max_tokens: int = Field(500, alias="MENTOR_GOAL_MAX_TOKENS")
    mentor_event_max_tokens: int = Field(300, alias="MENTOR_EVENT_MAX_TOKENS")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()

__all__ = ["Settings", "settings"]
