"""Application configuration."""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseSettings):
    data_dir: Path = DEFAULT_DATA_DIR
    upload_dir: Path | None = None
    database_url: str | None = None

    # Token signing
    secret: str = ""
    token_ttl_days: int = 7

    # Session cookie
    cookie_max_age_days: int = 30
    cookie_secure: bool = True

    # Upload limits
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_extensions: list[str] = [".jpg", ".png", ".pdf"]

    password_hash_method: str = "scrypt"

    # Database bootstrap
    db_connect_retries: int = 5
    db_connect_retry_delay: float = 2.0
    run_migrations: bool = True

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def upload_path(self) -> Path:
        return self.upload_dir or self.data_dir / "uploads"

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir}/minidrive.db"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the running app was built with."""
    return request.app.state.settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
