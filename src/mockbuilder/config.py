"""Configuration loading and validation for mockbuilder."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class TemplateSettings(BaseModel):
    """Defaults used when resolving template variables."""

    random_int_min: int = 0
    random_int_max: int = 1000
    random_string_length: int = Field(default=10, ge=0)
    random_string_max_length: int = Field(
        default=10_000,
        ge=0,
        description="Longest {{$randomString n}} honoured; longer n falls back to the default",
    )
    random_float_precision: int = Field(
        default=2,
        ge=0,
        le=15,
        description="Decimal places for {{$randomFloat min max}} when no precision is given",
    )
    email_domain: str = "example.com"
    seed: int | None = Field(
        default=None,
        description="Seed for reproducible random values; None draws a fresh seed per run",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging output."""

    level: str = "info"


class MockBuilderConfig(BaseModel):
    """Top-level mockbuilder configuration."""

    templates: TemplateSettings = Field(default_factory=TemplateSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> MockBuilderConfig:
    """Read template defaults and log level from YAML.

    Args:
        path: Config file to read; defaults to ./mockbuilder.yaml. A missing
            or empty file yields the built-in defaults.

    Returns:
        The validated configuration.
    """
    path = Path("mockbuilder.yaml") if path is None else Path(path)

    if path.exists():
        with open(path) as f:
            raw: dict[str, Any] = yaml.safe_load(f) or {}
        return MockBuilderConfig.model_validate(raw)

    return MockBuilderConfig()
