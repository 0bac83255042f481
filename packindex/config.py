#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("packindex")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_dir():
    """Directory holding the config file and, by default, the store."""
    return Path.home() / '.packindex'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. PACKINDEX_CONFIG environment variable
    2. ~/.packindex/ directory
    """
    # Check for environment variable override
    if 'PACKINDEX_CONFIG' in os.environ:
        path = Path(os.environ['PACKINDEX_CONFIG']).expanduser()
        if path.exists():
            return path

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return config_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f)
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            # Merge file config with defaults
            if file_config:
                config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "store_path": str(get_config_dir() / 'indexer'),
            "upstream_url": "https://github.com/geode-sdk/indexer",
        },
        "package": {
            "artifact_filename": "mod.geode",
            "metadata_filename": "mod.json",
        },
        "git": {
            "timeout_seconds": 300,
            "bot_name": "GeodeBot",
            "bot_email": "geodebot@users.noreply.github.com",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        },
    }


def get_store_path(config) -> Path:
    """Resolved location of the local index clone."""
    return Path(config["general"]["store_path"]).expanduser()


def configure_logging(config, verbose: bool = False) -> None:
    """Apply the logging section of config to the packindex logger."""
    settings = config.get("logging", {})
    level = "DEBUG" if verbose else str(settings.get("level", "WARNING")).upper()
    logger.setLevel(getattr(logging, level, logging.WARNING))

    fmt = settings.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """Return base_config with override_config layered on top, nested dicts merged key by key."""
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


ENV_PREFIX = "PACKINDEX_"
ENV_TRUE = ('true', 'yes', 'on')
ENV_FALSE = ('false', 'no', 'off')


def _env_value(raw):
    lowered = raw.lower()
    if lowered in ENV_TRUE:
        return True
    if lowered in ENV_FALSE:
        return False
    if raw.isdigit():
        return int(raw)
    return raw


def _set_by_words(section, words, value):
    """
    Set the setting spelled by words inside section.

    Keys may themselves contain underscores (store_path), so at each level
    the longest key matching the leading words wins. Returns False when the
    words name no existing setting.
    """
    candidates = [key for key in section if words[:len(key.split('_'))] == key.split('_')]
    if not candidates:
        return False

    key = max(candidates, key=lambda k: len(k.split('_')))
    rest = words[len(key.split('_')):]
    if not rest:
        section[key] = value
        return True
    if isinstance(section[key], dict):
        return _set_by_words(section[key], rest, value)
    return False


def apply_env_overrides(config):
    """
    Apply PACKINDEX_SECTION_KEY environment variables to config in place.

    PACKINDEX_GENERAL_STORE_PATH=/srv/indexer sets general.store_path.
    Variables naming no known setting are ignored.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        words = name[len(ENV_PREFIX):].lower().split('_')
        if not _set_by_words(config, words, _env_value(raw)):
            logger.debug(f"Ignoring {name}: no matching setting")
    return config
