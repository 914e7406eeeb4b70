"""
Configuration for the article digest service.

Provides environment-based configuration with Pydantic settings. Each
settings group reads its own flat environment variables (and ``.env``), so
groups can also be constructed on their own in tests.
"""

from __future__ import annotations

import json
import logging
import sys
from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_prefix="",
    case_sensitive=False,
    extra="ignore",
)


class YandexSettings(BaseSettings):
    """YandexGPT credentials."""

    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("YANDEX_GPT_API_KEY", "YANDEX_API_KEY"),
    )
    folder_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("YANDEX_FOLDER_ID"),
    )
    model: str = Field(
        default="yandexgpt/latest",
        validation_alias=AliasChoices("YANDEX_MODEL"),
    )

    model_config = _ENV_CONFIG

    def is_configured(self) -> bool:
        """Check that both the key and the folder are present."""
        return bool(self.api_key and self.api_key.get_secret_value() and self.folder_id)


class OpenRouterSettings(BaseSettings):
    """OpenRouter credentials."""

    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY"),
    )
    model: str = Field(
        default="deepseek/deepseek-chat",
        validation_alias=AliasChoices("OPENROUTER_MODEL"),
    )
    app_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("APP_URL", "NEXT_PUBLIC_APP_URL"),
        description="Sent as HTTP-Referer so OpenRouter can attribute traffic",
    )

    model_config = _ENV_CONFIG

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.get_secret_value())


class GenerationSettings(BaseSettings):
    """Retry, fallback and chunking behaviour."""

    default_backend: str = Field(
        default="yandex",
        validation_alias=AliasChoices("DEFAULT_BACKEND"),
    )
    backend_order: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias=AliasChoices("BACKEND_ORDER"),
        description="Explicit fallback order; empty means default backend first",
    )
    temperature: float = Field(
        default=0.6,
        validation_alias=AliasChoices("GENERATION_TEMPERATURE"),
    )
    max_output_tokens: int = Field(
        default=2000,
        gt=0,
        validation_alias=AliasChoices("GENERATION_MAX_TOKENS"),
    )
    retries: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("GENERATION_RETRIES"),
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices("RETRY_BASE_DELAY"),
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("REQUEST_TIMEOUT"),
    )
    chunk_max_length: int = Field(
        default=8000,
        gt=0,
        validation_alias=AliasChoices("CHUNK_MAX_LENGTH"),
    )
    pacing_delay: float = Field(
        default=0.5,
        ge=0,
        validation_alias=AliasChoices("CHUNK_PACING_DELAY"),
    )

    model_config = _ENV_CONFIG

    @field_validator("backend_order", mode="before")
    @classmethod
    def parse_backend_order(cls, v):
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v or []


class CacheSettings(BaseSettings):
    """Result cache lifetime settings (seconds)."""

    ttl_seconds: float = Field(
        default=3600.0,
        gt=0,
        validation_alias=AliasChoices("CACHE_TTL_SECONDS"),
    )
    sweep_interval: float = Field(
        default=600.0,
        gt=0,
        validation_alias=AliasChoices("CACHE_SWEEP_INTERVAL"),
    )

    model_config = _ENV_CONFIG


class DigestSettings(BaseSettings):
    """Top-level configuration for the article digest service."""

    service_name: str = Field(
        default="article-digest",
        validation_alias=AliasChoices("SERVICE_NAME"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="json",
        validation_alias=AliasChoices("LOG_FORMAT"),
        description="Log format: 'json' or 'text'",
    )

    # Nested settings
    yandex: YandexSettings = Field(default_factory=YandexSettings)
    openrouter: OpenRouterSettings = Field(default_factory=OpenRouterSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    model_config = _ENV_CONFIG


@lru_cache
def get_settings() -> DigestSettings:
    """Get cached settings instance."""
    return DigestSettings()


_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line.

    Keys passed through ``extra={...}`` are merged into the object.
    """

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                log_record[key] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(settings: Optional[DigestSettings] = None) -> None:
    """Configure logging based on settings.

    Args:
        settings: Optional settings instance, uses cached settings if not provided
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter(settings.service_name))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
