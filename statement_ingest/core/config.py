# statement_ingest/core/config.py
"""Ingestion settings with validation."""

from decimal import Decimal
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PARSER_ORDER = [
    "STANDARD_BANK",
    "ABSA",
    "FNB",
    "MULTI_TRANSACTION",
    "SERVICE_FEE",
    "CREDIT",
]


class StatementParserSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STATEMENT_INGEST__")
    """Heuristic thresholds, parser registration order and logging."""

    service_fee_threshold: Decimal = Field(
        default=Decimal("100"),
        description="Amounts below this in the fee position are treated as a service fee",
        ge=0,
    )
    continuation_min_indent: int = Field(
        default=5,
        description="Minimum leading spaces for a line to count as a description continuation",
        ge=1,
        le=80,
    )
    parser_order: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PARSER_ORDER),
        description="Parsers tried per line, first acceptor wins",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional rotating log file")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("parser_order")
    @classmethod
    def validate_parser_order(cls, v):
        normalized = [name.strip().upper() for name in v if name.strip()]
        if not normalized:
            raise ValueError("parser_order must name at least one parser")
        if len(set(normalized)) != len(normalized):
            raise ValueError(f"parser_order contains duplicates: {normalized}")
        return normalized


@lru_cache()
def get_settings() -> StatementParserSettings:
    """Get the cached settings instance."""
    return StatementParserSettings()


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STATEMENT_INGEST_DB__")
    """Database used for duplicate and fiscal period lookups."""

    url: str = Field(
        default="sqlite:///statement_ingest.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Log SQL statements")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if "://" not in v:
            raise ValueError("Database URL must look like 'dialect://...'")
        return v


@lru_cache()
def get_database_settings() -> DatabaseSettings:
    """Get the cached database settings instance."""
    return DatabaseSettings()
