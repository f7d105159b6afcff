"""YAML-backed configuration for the pulse service."""

from __future__ import annotations

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("config.yaml")


class LoggingConfig(BaseModel):
    log_filename: str = "pulse.log"
    level: str = "INFO"


class PulseConfig(BaseModel):
    output_base_dir: Path = Path("output")
    store_path: Path = Path("output/pulse_responses.jsonl")
    submit_roles: List[str] = Field(default_factory=lambda: ["PILOT_BUILDER", "PILOT_SME"])
    view_roles: List[str] = Field(
        default_factory=lambda: ["PILOT_BUILDER", "PILOT_SME", "PILOT_OBSERVER"]
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "extra": "ignore",
    }


def load_config(config_path: Path) -> PulseConfig:
    """Read ``config_path`` into a ``PulseConfig``; missing keys use defaults."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    data = yaml.safe_load(config_path.read_text()) or {}
    return PulseConfig.model_validate(data)
