"""
Settings Module for HostWatch

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime configuration.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.constants import Defaults, ThresholdPolicyName


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class DatabaseSettings(BaseSettingsConfig):
    """
    Database Configuration Settings

    Any SQLAlchemy async URL is accepted. SQLite (aiosqlite) is the
    default; PostgreSQL works through asyncpg.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite+aiosqlite:///data/hosts.db",
        description="SQLAlchemy async database URL"
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Connection pool size (non-SQLite only)"
    )
    max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum overflow connections (non-SQLite only)"
    )
    pool_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Pool connection timeout in seconds"
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def sqlite_path(self) -> Optional[Path]:
        """Filesystem path of a file-backed SQLite URL, else None."""
        if not self.is_sqlite or ":memory:" in self.url:
            return None
        _, _, path = self.url.partition(":///")
        return Path(path) if path else None


class MonitorSettings(BaseSettingsConfig):
    """
    Monitoring Configuration Settings

    Variable names match the ones used by existing deployments
    (``DISCONNECTION_THRESHOLD``, ``RECONNECTION_THRESHOLD``).
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore"
    )

    threshold_policy: ThresholdPolicyName = Field(
        default=ThresholdPolicyName.DUAL,
        description="Threshold policy: single or dual"
    )
    disconnection_threshold: Optional[int] = Field(
        default=None,
        gt=0,
        description="Seconds without check-in before a host is offline "
                    "(defaults depend on the policy)"
    )
    reconnection_threshold: int = Field(
        default=Defaults.RECONNECTION_THRESHOLD,
        gt=0,
        description="Seconds since check-in below which an offline host "
                    "is considered recovered (dual policy only)"
    )
    recover_on_checkin: bool = Field(
        default=True,
        description="Clear the offline flag and alert from the check-in path"
    )
    sweep_interval: int = Field(
        default=Defaults.SWEEP_INTERVAL,
        ge=1,
        le=86400,
        description="Seconds between scheduled sweeps"
    )
    display_timezone: str = Field(
        default=Defaults.DISPLAY_TIMEZONE,
        description="Timezone used to render timestamps in alerts and logs"
    )

    @field_validator("display_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone name is known to the tz database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def resolve_thresholds(self) -> "MonitorSettings":
        """Fill in the policy default and check threshold ordering."""
        if self.disconnection_threshold is None:
            if self.threshold_policy == ThresholdPolicyName.SINGLE:
                self.disconnection_threshold = Defaults.DISCONNECTION_THRESHOLD_SINGLE
            else:
                self.disconnection_threshold = Defaults.DISCONNECTION_THRESHOLD_DUAL

        if (
            self.threshold_policy == ThresholdPolicyName.DUAL
            and self.reconnection_threshold >= self.disconnection_threshold
        ):
            raise ValueError(
                "reconnection_threshold must be lower than disconnection_threshold "
                f"({self.reconnection_threshold} >= {self.disconnection_threshold})"
            )
        return self


class PushoverSettings(BaseSettingsConfig):
    """
    Pushover Notification Settings

    Credentials are read from ``PO_APPTOKEN`` and ``PO_USERKEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PO_",
        env_file=".env",
        extra="ignore"
    )

    apptoken: SecretStr = Field(
        default=SecretStr(""),
        description="Pushover application token"
    )
    userkey: SecretStr = Field(
        default=SecretStr(""),
        description="Pushover user or group key"
    )
    api_url: str = Field(
        default=Defaults.PUSHOVER_API_URL,
        description="Pushover messages endpoint"
    )
    timeout: int = Field(
        default=Defaults.PUSHOVER_TIMEOUT,
        ge=1,
        le=120,
        description="Request timeout in seconds"
    )

    @property
    def is_configured(self) -> bool:
        return bool(
            self.apptoken.get_secret_value() and self.userkey.get_secret_value()
        )


class WebSettings(BaseSettingsConfig):
    """Check-in HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEB_",
        env_file=".env",
        extra="ignore"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Web server host"
    )
    port: int = Field(
        default=8787,
        ge=1,
        le=65535,
        description="Web server port"
    )


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    to_console: bool = Field(
        default=True,
        description="Log to stdout"
    )
    colorize: bool = Field(
        default=True,
        description="Colourise console output"
    )
    to_file: bool = Field(
        default=False,
        description="Also log to a rotating file"
    )
    file_path: Path = Field(
        default=Path("logs/hostwatch.log"),
        description="Log file path"
    )
    format: str = Field(
        default="text",
        pattern="^(text|json)$",
        description="File log format: text or json"
    )
    rotation: str = Field(
        default="10 MB",
        description="Rotate the log file at this size or interval"
    )
    retention: int = Field(
        default=5,
        ge=1,
        description="Number of rotated log files to keep"
    )


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True
    )

    app_name: str = Field(
        default="HostWatch",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # IS_LOCAL_DEV=local-dev switches alert delivery to the log channel
    local_dev: bool = Field(
        default=False,
        validation_alias="IS_LOCAL_DEV",
        description="Disable real alert delivery"
    )

    # Nested settings
    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings
    )
    monitor: MonitorSettings = Field(
        default_factory=MonitorSettings
    )
    pushover: PushoverSettings = Field(
        default_factory=PushoverSettings
    )
    web: WebSettings = Field(
        default_factory=WebSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    @field_validator("local_dev", mode="before")
    @classmethod
    def parse_local_dev(cls, v: Any) -> Any:
        """
        Only the ``local-dev`` marker (or ``true``) enables local mode.

        Any other string, e.g. ``production``, means real delivery.
        """
        if isinstance(v, str):
            return v.strip().lower() in (Defaults.LOCAL_DEV_MARKER, "true")
        return v

    def to_dict(self, *, exclude_secrets: bool = True) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump(mode="json")

        if exclude_secrets:
            def remove_secrets(obj: Any) -> Any:
                if isinstance(obj, dict):
                    return {
                        k: remove_secrets(v)
                        for k, v in obj.items()
                        if k not in ("apptoken", "userkey")
                        and "password" not in k.lower()
                    }
                return obj

            data = remove_secrets(data)

        return data


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
