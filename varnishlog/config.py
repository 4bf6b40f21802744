"""Configuration loading from CLI args, env vars, and an optional YAML file.

Precedence: CLI flags, then environment, then YAML, then defaults.
"""

import logging
import os
from dataclasses import dataclass

import yaml

from varnishlog.sources import DEFAULT_COMMAND

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    log_file: str | None = None
    follow: bool = False
    command: str = DEFAULT_COMMAND
    queue_size: int = 1000
    output: str = "text"
    skip_malformed: bool = False
    log_level: str = "INFO"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    logger.info("Loaded YAML config from %s", path)
    return data


def _pick(cli_value, env_name: str, yaml_data: dict, key: str, default):
    if cli_value is not None:
        return cli_value
    if env_name in os.environ:
        return os.environ[env_name]
    return yaml_data.get(key, default)


def load_config(cli_args, yaml_data: dict) -> Config:
    """Build Config from parsed CLI args, env vars and YAML data."""
    output = _pick(getattr(cli_args, "output", None), "VARNISHLOG_OUTPUT", yaml_data, "output", "text")
    if output not in OUTPUT_FORMATS:
        raise ValueError(f"output must be one of {', '.join(OUTPUT_FORMATS)}, got {output!r}")

    queue_size = int(_pick(None, "VARNISHLOG_QUEUE_SIZE", yaml_data, "queue_size", 1000))
    if queue_size < 0:
        raise ValueError(f"queue_size must be >= 0, got {queue_size}")

    log_level = str(_pick(getattr(cli_args, "log_level", None), "VARNISHLOG_LOG_LEVEL", yaml_data, "log_level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    return Config(
        log_file=getattr(cli_args, "file", None) or yaml_data.get("log_file"),
        follow=bool(getattr(cli_args, "follow", False) or yaml_data.get("follow", False)),
        command=_pick(getattr(cli_args, "command", None), "VARNISHLOG_CMD", yaml_data, "command", DEFAULT_COMMAND),
        queue_size=queue_size,
        output=output,
        skip_malformed=bool(getattr(cli_args, "skip_malformed", False) or yaml_data.get("skip_malformed", False)),
        log_level=log_level,
    )
