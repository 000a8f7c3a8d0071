from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CHART_HEADROOM = 1.2


class ChartConfig(BaseModel):
    headroom: float = Field(default=DEFAULT_CHART_HEADROOM, ge=1.0)


class TransformConfig(BaseModel):
    # When disabled, undecodable measurement values become table-only placeholders.
    strict_values: bool = True


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    summary_indent: int = Field(default=2, ge=0)


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    chart: ChartConfig = Field(default_factory=ChartConfig)
    transform: TransformConfig = Field(default_factory=TransformConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path | None = None) -> AppConfig:
    data: dict = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    env_level = os.getenv("ROLLOUT_ANALYSIS_LOG_LEVEL")
    if env_level:
        config.logging = LoggingConfig(level=env_level.strip().upper())
    return config
