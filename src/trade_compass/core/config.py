"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class RiskSettings(BaseModel):
    """User risk limits, in percent of the rolling equity base.

    A value of 0 disables the corresponding check.
    """

    max_daily_loss_percent: float = Field(default=0.0, ge=0)  # e.g. 4
    max_weekly_loss_percent: float = Field(default=0.0, ge=0)  # e.g. 10
    target_daily_profit_percent: float = Field(default=0.0, ge=0)  # e.g. 3
    target_weekly_profit_percent: float = Field(default=0.0, ge=0)  # e.g. 15

    @field_validator("*", mode="before")
    @classmethod
    def _unset_means_disabled(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class AnalyticsConfig(BaseModel):
    default_base_balance: float = Field(default=10_000.0, gt=0)
    dashboard_days: int = Field(default=30, ge=1)
    timeline_days: int = Field(default=30, ge=1)
    timeline_weeks: int = Field(default=12, ge=1)
    warning_threshold_percent: float = Field(default=50.0, gt=0, lt=100)
    top_symbols: int = Field(default=5, ge=1)
    timezone: str | None = None  # IANA name, e.g. "Europe/Berlin"

    def get_tzinfo(self) -> tzinfo | None:
        """Resolve the configured timezone; None means local wall time."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from exc


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    risk: RiskSettings = Field(default_factory=RiskSettings)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "COMPASS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
