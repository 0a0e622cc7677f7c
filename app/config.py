"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Alembic scripts are package data under app/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Settings(BaseSettings):
    """Application settings with environment variable loading and sensible defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite:./database.db"
    app_name: str = "grocerynana-backend"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    # Connection pool sizing (ignored for in-memory SQLite)
    db_pool_size: int = 5
    db_max_overflow: int = 5

    migrations_dir: Path = MIGRATIONS_DIR
    cors_max_age: int = 3600


settings = Settings()
