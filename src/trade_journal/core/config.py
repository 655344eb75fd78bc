"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class IngestConfig(BaseModel):
    sample_rows: int = Field(default=5, ge=1)  # Preview depth for detection
    type_sample_size: int = Field(default=3, ge=1)  # Non-empty values per column
    delimiter: str = ","
    timezone: str = "UTC"  # Applied to naive timestamps in uploads


class AnalyticsConfig(BaseModel):
    top_n: int = Field(default=5, ge=1)  # Size of top/worst/most-traded lists
    timezone: str = "UTC"  # Hour / weekday bucketing


class RiskConfig(BaseModel):
    amber_daily_loss: Decimal = Decimal("5000")
    red_daily_loss: Decimal = Decimal("10000")
    drawdown_lookback: int = Field(default=50, ge=1)  # Recent trades used


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    ingest: IngestConfig = Field(default_factory=IngestConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_JOURNAL_", "env_nested_delimiter": "__"}

    def validate_timezones(self) -> None:
        """Fail early on timezone names zoneinfo does not know."""
        from .errors import ConfigError

        for section, name in (
            ("ingest", self.ingest.timezone),
            ("analytics", self.analytics.timezone),
        ):
            try:
                ZoneInfo(name)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ConfigError(
                    f"Unknown timezone {name!r} in [{section}]"
                ) from exc


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

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    settings = Settings(**data)
    settings.validate_timezones()
    return settings
