"""
Shared configuration management for the Follow Service.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    """Accept both the FOLLOW_-prefixed and the bare variable name."""
    return AliasChoices(f"FOLLOW_{name}", name)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="FOLLOW_ENV")
    log_level: str = Field(default="info", validation_alias="FOLLOW_LOG_LEVEL")

    # Durable store
    postgres_dsn: str = Field(
        default="postgres://localhost:5432/follows",
        validation_alias="FOLLOW_POSTGRES_DSN",
    )
    follow_table: str = Field(default="follows", validation_alias=AliasChoices("FOLLOW_TABLE", "FOLLOW_TABLE_NAME"))
    postgres_pool_min_size: int = Field(default=2, validation_alias="FOLLOW_POSTGRES_POOL_MIN_SIZE")
    postgres_pool_max_size: int = Field(default=10, validation_alias="FOLLOW_POSTGRES_POOL_MAX_SIZE")

    # Cache store
    redis_host: str = Field(default="localhost", validation_alias=_env("REDIS_HOST"))
    redis_port: int = Field(default=6379, validation_alias=_env("REDIS_PORT"))
    redis_password: Optional[str] = Field(default=None, validation_alias=_env("REDIS_PASSWORD"))
    redis_db: int = Field(default=0, validation_alias=_env("REDIS_DB"))
    follow_cache_ttl_seconds: int = Field(default=60, validation_alias="FOLLOW_CACHE_TTL_SECONDS")

    # Security
    jwt_secret: str = Field(default="change-me", validation_alias=_env("JWT_SECRET"))
    jwt_algorithms: List[str] = Field(default=["HS256"], validation_alias="FOLLOW_JWT_ALGORITHMS")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
