# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from roadmap_auth.shared.logging import logger

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_by_name=True,
    extra="ignore",
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///roadmap_auth.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")
    echo: bool = Field(False, alias="DATABASE_ECHO")

    model_config = _SECTION_CONFIG

    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class SessionConfig(BaseSettings):
    duration_minutes: int = Field(30, ge=1, alias="SESSION_DURATION_MINUTES")
    token_length: int = Field(128, ge=16, le=512, alias="TOKEN_LENGTH")

    model_config = _SECTION_CONFIG

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)


class HashingConfig(BaseSettings):
    # argon2-cffi RFC 9106 "low memory" profile
    time_cost: int = Field(3, ge=1, alias="ARGON2_TIME_COST")
    memory_cost: int = Field(65536, ge=8, alias="ARGON2_MEMORY_COST")
    parallelism: int = Field(4, ge=1, alias="ARGON2_PARALLELISM")
    hash_len: int = Field(32, ge=16, alias="ARGON2_HASH_LEN")
    salt_len: int = Field(16, ge=8, alias="ARGON2_SALT_LEN")
    max_workers: int = Field(4, ge=1, alias="HASHING_WORKERS")
    timeout: float | None = Field(None, gt=0, alias="HASHING_TIMEOUT")

    model_config = _SECTION_CONFIG


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _session_config_factory() -> SessionConfig:
    return SessionConfig()  # type: ignore[call-arg]


def _hashing_config_factory() -> HashingConfig:
    return HashingConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    session: SessionConfig = Field(default_factory=_session_config_factory)
    hashing: HashingConfig = Field(default_factory=_hashing_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        warnings = []
        if self.database.is_sqlite():
            warnings.append("SQLite database configured in production")
        if self.hashing.memory_cost < 19456:
            warnings.append(
                f"Argon2 memory_cost={self.hashing.memory_cost} KiB is below the OWASP minimum"
            )
        if self.session.duration_minutes > 24 * 60:
            warnings.append("Access tokens live longer than a day")

        for warning in warnings:
            logger.warning(f"config: {warning}")

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "DatabaseConfig", "HashingConfig", "SessionConfig", "load_config"]
