"""
Application configuration using pydantic-settings.
Read once at startup from the environment (or a .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    allowed_origins: str = ""  # Comma-separated CORS origins (any origin when empty)

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_auth: str = ""
    redis_db: int = 0
    redis_socket_timeout: float = 5.0

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
