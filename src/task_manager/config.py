"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service descriptor
    app_name: str = "Task Manager API"
    database_label: str = "PostgreSQL"
    server_label: str = "Contabo VPS"
    author: str = "Yuvaraj Pandian"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # Database (defaults to the Docker Compose service "db")
    db_host: str = "db"
    db_port: int = 5432
    db_user: str = "yuvaraj"
    db_password: str = "devops123"
    db_name: str = "taskdb"
    database_url: str = Field(default="")

    # OpenTelemetry / Base14 Scout
    otel_service_name: str = "task-manager-api"
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318"
    otel_sdk_disabled: bool = False
    scout_environment: str = "development"

    @property
    def sqlalchemy_url(self) -> str | URL:
        """DATABASE_URL when set, otherwise a postgresql+asyncpg URL from the DB_* parts."""
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
