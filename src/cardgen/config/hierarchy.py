"""Layered configuration: each source overrides the one before it.

    package defaults
      < ~/.cardgen/config.yaml
      < cardgen.yaml (nearest one from the working directory upward)
      < environment (OPENSEA_API_KEY, GOAPI_API_KEY, CARDGEN_*)
      < keyword overrides passed by the caller
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import yaml

from cardgen.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".cardgen" / "config.yaml"
_PROJECT_CONFIG_NAME = "cardgen.yaml"

# GPT_API_KEY is the legacy name; OPENAI_API_KEY is read later and wins.
_ENV_MAP: dict[str, str] = {
    "OPENSEA_API_KEY": "opensea_api_key",
    "GPT_API_KEY": "openai_api_key",
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_BASE_URL": "openai_base_url",
    "GOAPI_API_KEY": "goapi_api_key",
    "CARDGEN_CACHE_DIR": "cache_dir",
    "CARDGEN_POLL_INTERVAL": "poll_interval",
    "CARDGEN_MAX_POLL_ATTEMPTS": "max_poll_attempts",
    "CARDGEN_CONTRACT": "contract",
    "CARDGEN_CHAIN": "chain",
    "CARDGEN_OPENAI_MODEL": "openai_model",
    "CARDGEN_ENVIRONMENT": "environment",
    "CARDGEN_LOG_LEVEL": "log_level",
    "CARDGEN_DEDUPE": "dedupe",
    "CARDGEN_HOST": "host",
    "CARDGEN_PORT": "port",
}


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Env values are strings; these keys are converted before validation.
_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "poll_interval": float,
    "max_poll_attempts": int,
    "http_timeout": float,
    "max_retries": int,
    "port": int,
    "dedupe": _parse_flag,
}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Resolve every configuration source into one flat dict.

    Overrides whose value is None are treated as "not given".
    """
    config = get_defaults()
    for path in _config_files():
        config.update(_load_yaml_config(path) or {})
    config.update(_load_env_vars())
    config.update({k: v for k, v in runtime_overrides.items() if v is not None})
    return config


def _config_files() -> Iterator[Path]:
    yield _GLOBAL_CONFIG_PATH
    project = _find_project_config()
    if project is not None:
        yield project


def _find_project_config() -> Path | None:
    here = Path.cwd()
    return next(
        (d / _PROJECT_CONFIG_NAME for d in (here, *here.parents)
         if (d / _PROJECT_CONFIG_NAME).is_file()),
        None,
    )


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Mapping stored in ``path``, or None if absent, unreadable or not a mapping."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Skipping unreadable config file %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Skipping config file %s: top level must be a mapping", path)
        return None
    logger.debug("Read %d setting(s) from %s", len(data), path)
    return data


def _load_env_vars() -> dict[str, Any]:
    return {
        key: _coerce_env_value(key, os.environ[name])
        for name, key in _ENV_MAP.items()
        if name in os.environ
    }


def _coerce_env_value(key: str, value: str) -> Any:
    """Convert a raw env string for ``key``; unconvertible values pass through."""
    convert = _CONVERTERS.get(key)
    if convert is None:
        return value
    try:
        return convert(value)
    except ValueError:
        logger.warning("Environment value %r for %s is not a valid %s", value, key,
                       getattr(convert, "__name__", "value"))
        return value
