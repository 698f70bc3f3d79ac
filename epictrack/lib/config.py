"""
Configuration loader for epictrack.

Settings come from, in increasing precedence: built-in defaults, an
epictrack.env file, EPICTRACK_* environment variables and CLI flags
(applied by the caller).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data") / "db.json"
DEFAULT_CONFIG_FILE = Path("epictrack.env")
DEFAULT_LOG_LEVEL = "WARNING"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENV_PREFIX = "EPICTRACK_"


@dataclass
class TrackerConfig:
    """Runtime settings for a session."""
    db_path: Path
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Path | None = None  # None logs to stderr


def _normalize_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL '{value}', defaulting to {DEFAULT_LOG_LEVEL}")
        return DEFAULT_LOG_LEVEL
    return level


def load_config(
    config_file: Path | None = None,
    environ: dict[str, str] | None = None,
) -> TrackerConfig:
    """Load settings from the env file and environment.

    Args:
        config_file: Explicit env file. Must exist if given. When omitted,
            ./epictrack.env is read if present.
        environ: Environment mapping (defaults to os.environ)

    Raises:
        FileNotFoundError: If an explicit config_file is missing
        ValueError: If the env file is malformed
    """
    environ = os.environ if environ is None else environ

    values: dict[str, str] = {}
    if config_file is not None:
        values.update(envparse.load_env(config_file))
    elif DEFAULT_CONFIG_FILE.exists():
        values.update(envparse.load_env(DEFAULT_CONFIG_FILE))

    # Environment overrides file
    for key in ("DB_PATH", "LOG_LEVEL", "LOG_FILE"):
        env_value = environ.get(ENV_PREFIX + key)
        if env_value:
            values[key] = env_value

    log_file = values.get("LOG_FILE")
    return TrackerConfig(
        db_path=Path(values.get("DB_PATH", str(DEFAULT_DB_PATH))),
        log_level=_normalize_log_level(values.get("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        log_file=Path(log_file) if log_file else None,
    )
