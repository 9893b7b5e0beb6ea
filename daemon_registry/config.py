"""Configuration loading from env vars and an optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = "~/.daemon-registry"


@dataclass(frozen=True)
class Config:
    base_dir: str = DEFAULT_BASE_DIR


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from env vars and parsed YAML data.

    DAEMON_REGISTRY_DIR takes precedence over ``registry.base_dir`` in YAML.
    """
    registry_section = (yaml_data or {}).get("registry") or {}
    base_dir = os.environ.get(
        "DAEMON_REGISTRY_DIR",
        registry_section.get("base_dir", DEFAULT_BASE_DIR),
    )
    return Config(base_dir=str(base_dir))
