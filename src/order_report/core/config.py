"""Configuration management.

Loads from an optional TOML config file + environment variables.
Uses pydantic-settings for validation.  Values from the file and from
explicit overrides take precedence; environment variables only fill
keys those leave unset.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class AggregationConfig(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)  # None = executor default
    price_tolerance: Decimal = Field(default=Decimal("0.001"), ge=0)


class ReportConfig(BaseModel):
    details_path: str = "order_details.txt"
    summary_path: str = "order_summary.txt"
    product_column_width: int = Field(default=20, ge=1)
    echo: bool = True  # Print both reports to stdout


class ObservabilityConfig(BaseModel):
    log_level: str = "WARNING"
    log_format: Literal["json", "console"] = "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files; environment variables fill unset keys.
    """

    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "ORDER_REPORT_", "env_nested_delimiter": "__"}


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional, ignored if absent).
        overrides: Nested dict of overrides applied on top of the file.

    Raises:
        ConfigError: The file is not valid TOML or a value fails validation.
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
                raise ConfigError(f"Invalid config file '{path}': {exc}") from exc

    if overrides:
        data = _merge(data, overrides)

    try:
        return Settings(**data)
    except pydantic.ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
