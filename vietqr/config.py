"""Runtime settings for the VietQR toolkit and its HTTP service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Settings loaded from ``VIETQR_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="VIETQR_",
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="vietqr")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default="dev-secret-key")
    max_payload_length: int = Field(default=4096, ge=64, le=65536, description="Longest payload text the parser accepts")
    max_image_bytes: int = Field(default=2 * 1024 * 1024, ge=1024, description="Largest image accepted for decoding")
    image_size: int = Field(default=300, ge=50, le=1000)
    image_error_correction: Literal["L", "M", "Q", "H"] = Field(default="M")
    image_margin: int = Field(default=4, ge=0)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized settings."""

    return Settings()


settings = get_settings()
