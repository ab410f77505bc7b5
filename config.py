"""
VerseKit - Configuration

Centralized configuration management for the entire system.
Uses environment variables (optionally from a .env file) with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from core.errors import VerseKitConfigError
from observability.logging import LoggingConfig, setup_logging as _setup_logging
from observability.tracing import TracingConfig, setup_tracing as _setup_tracing

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


def _env_environment() -> Environment:
    value = os.getenv("VERSEKIT_ENV", "development")
    try:
        return Environment(value)
    except ValueError as e:
        raise VerseKitConfigError(
            f"VERSEKIT_ENV must be one of development, testing, production, got {value!r}",
            config_key="VERSEKIT_ENV",
            actual_value=value,
            cause=e,
        ) from e


def _env_logging() -> LoggingConfig:
    try:
        return LoggingConfig()
    except ValueError as e:
        raise VerseKitConfigError(
            str(e),
            config_key="VERSEKIT_LOG_LEVEL",
            actual_value=os.getenv("VERSEKIT_LOG_LEVEL"),
            cause=e,
        ) from e


def _env_bool(name: str, default: str) -> bool:
    value = os.getenv(name, default).strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise VerseKitConfigError(
        f"{name} must be a boolean, got {value!r}",
        config_key=name,
        actual_value=value,
    )


def _env_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError as e:
        raise VerseKitConfigError(
            f"{name} must be an integer, got {value!r}",
            config_key=name,
            actual_value=value,
            cause=e,
        ) from e


def _env_timeout(name: str) -> Optional[float]:
    """Positive seconds, or None when unset, empty or zero."""
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError as e:
        raise VerseKitConfigError(
            f"{name} must be a number of seconds, got {value!r}",
            config_key=name,
            actual_value=value,
            cause=e,
        ) from e
    if seconds < 0:
        raise VerseKitConfigError(
            f"{name} must not be negative, got {value!r}",
            config_key=name,
            actual_value=value,
        )
    return seconds or None


@dataclass
class DatabaseConfig:
    """Storage configuration."""
    url: str = field(
        default_factory=lambda: os.getenv("VERSEKIT_DB_URL", "sqlite+aiosqlite:///./versekit.db")
    )
    echo: bool = field(default_factory=lambda: _env_bool("VERSEKIT_DB_ECHO", "false"))
    insert_batch_size: int = field(
        default_factory=lambda: _env_int("VERSEKIT_INSERT_BATCH_SIZE", "1000")
    )

    def __post_init__(self) -> None:
        if not self.url.startswith("sqlite"):
            raise VerseKitConfigError(
                f"Unsupported database URL: {self.url!r} (expected sqlite+aiosqlite://...)",
                config_key="VERSEKIT_DB_URL",
                actual_value=self.url,
            )
        if self.insert_batch_size < 1:
            raise VerseKitConfigError(
                "VERSEKIT_INSERT_BATCH_SIZE must be positive",
                config_key="VERSEKIT_INSERT_BATCH_SIZE",
                actual_value=self.insert_batch_size,
            )


@dataclass
class SearchConfig:
    """Search and pagination defaults."""
    page_size: int = field(default_factory=lambda: _env_int("VERSEKIT_PAGE_SIZE", "20"))
    query_timeout_seconds: Optional[float] = field(
        default_factory=lambda: _env_timeout("VERSEKIT_QUERY_TIMEOUT")
    )

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise VerseKitConfigError(
                "VERSEKIT_PAGE_SIZE must be positive",
                config_key="VERSEKIT_PAGE_SIZE",
                actual_value=self.page_size,
            )


@dataclass
class ObservabilityConfig:
    """
    OpenTelemetry tracing configuration.

    Disabled by default; enable with VERSEKIT_TRACING_ENABLED=true.
    """
    tracing: TracingConfig = field(default_factory=TracingConfig)

    @property
    def enabled(self) -> bool:
        return self.tracing.enabled

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "enabled": self.tracing.enabled,
            "service_name": self.tracing.service_name,
            "otlp_endpoint": self.tracing.otlp_endpoint,
            "console_export": self.tracing.console_export,
            "sample_rate": self.tracing.sample_rate,
        }


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=_env_environment)
    debug: bool = field(default_factory=lambda: _env_bool("VERSEKIT_DEBUG", "false"))

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=_env_logging)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.env == Environment.DEVELOPMENT

    def setup_logging(self) -> None:
        """Setup logging (and tracing, when enabled) based on configuration."""
        if self.debug:
            self.logging.level = "DEBUG"
        _setup_logging(self.logging, force=True)
        _setup_tracing(self.observability.tracing)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "database": {
                "url": self.database.url,
                "echo": self.database.echo,
                "insert_batch_size": self.database.insert_batch_size,
            },
            "search": {
                "page_size": self.search.page_size,
                "query_timeout_seconds": self.search.query_timeout_seconds,
            },
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
            },
            "observability": self.observability.to_dict(),
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config
