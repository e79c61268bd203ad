"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
Environment = Literal["development", "staging", "production"]


class HealthScoringConfig(BaseModel):
    """Trend aggregation and risk scoring configuration."""

    window_size: int = Field(
        default=10, gt=0, description="Number of most recent observations scored per animal"
    )


class NotificationConfig(BaseModel):
    """Notification store and email dispatch configuration."""

    dispatch_timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Upper bound on a single email dispatch"
    )
    storage_key: str = Field(
        default="notification-storage", min_length=1, description="Key for the persisted store"
    )
    storage_dir: Path | None = Field(
        default=None, description="Directory for file-backed persistence (in-memory if unset)"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Environment = Field(default="development", description="Environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    health: HealthScoringConfig = Field(default_factory=HealthScoringConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Environment:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> LogLevel:
        v = val.strip().upper()
        return cast(
            LogLevel, v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO"
        )

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    health_config = HealthScoringConfig(
        window_size=int(os.getenv("HEALTH_WINDOW_SIZE", "10")),
    )

    storage_dir = os.getenv("NOTIFICATION_STORAGE_DIR")
    notification_config = NotificationConfig(
        dispatch_timeout_seconds=float(os.getenv("EMAIL_DISPATCH_TIMEOUT_SECONDS", "5.0")),
        storage_key=os.getenv("NOTIFICATION_STORAGE_KEY", "notification-storage"),
        storage_dir=Path(storage_dir) if storage_dir else None,
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        health=health_config,
        notifications=notification_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🐄 HEALTH SCORING")
    print(f"Observation Window: {config.health.window_size}")

    print("\n📬 NOTIFICATIONS")
    print(f"Dispatch Timeout: {config.notifications.dispatch_timeout_seconds}s")
    print(f"Storage Key: {config.notifications.storage_key}")
    print(f"Storage: {config.notifications.storage_dir or 'in-memory'}")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
