"""Application configuration: settings schema, mdq.yaml loader, and logging"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "mdq.yaml"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger("mdq")


class Settings(BaseModel):
    app_name:        str  = "mdq"
    parser_config:   str  = Field(default="gfm-like", description="MarkdownIt parser preset name")
    output_format:   str  = Field(default="md", pattern="^(md|json|plain)$", description="md, json or plain")
    enhanced_errors: bool = Field(default=True,  description="Append suggestions to query errors")
    add_breaks:      bool = Field(default=True,  description="Separate md results with thematic breaks")
    log_level:       str  = Field(default="WARNING", description="Logging level name for the mdq logger")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from mdq.yaml, then MDQ_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDQ_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


def configure_logging(level: str) -> None:
    """Attach a stderr handler to the mdq logger at the given level name."""
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))


def log_event(level: int, message: str, **data) -> None:
    """Lightweight structured logging helper."""
    serialized = " | ".join(f"{k}={v}" for k, v in data.items())
    logger.log(level, f"{message}{' | ' + serialized if serialized else ''}")
