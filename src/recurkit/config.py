"""Configuration management for recurkit."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.engine import DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)

RECURKIT_HOME = Path(os.environ.get("RECURKIT_HOME", Path.home() / ".recurkit"))
CONFIG_FILE = RECURKIT_HOME / "config" / "recurkit.conf"


@dataclass
class Config:
    """recurkit configuration."""

    timezone: str = "UTC"
    preview_limit: int = 10
    max_steps: int = DEFAULT_MAX_STEPS
    time_format: str = "12h"


def _parse_value(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default
    if parsed < 1:
        logger.warning(f"{key.upper()} must be positive, got {parsed}, using {default}")
        return default
    return parsed


def parse_config(text: str) -> Config:
    """Parse KEY = value lines into a Config."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "preview_limit":
                config.preview_limit = _parse_int(key, value, config.preview_limit)
            case "max_steps":
                config.max_steps = _parse_int(key, value, config.max_steps)
            case "time_format":
                if value in ("12h", "24h"):
                    config.time_format = value
                else:
                    logger.warning(f"TIME_FORMAT must be 12h or 24h, got {value!r}")

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from recurkit.conf file."""
    path = path or CONFIG_FILE
    if not path.exists():
        return Config()
    return parse_config(path.read_text())
