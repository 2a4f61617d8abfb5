"""Pydantic model for resolved application settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from cardgen.config import defaults


class Settings(BaseModel):
    opensea_api_key: str | None = None
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    goapi_api_key: str | None = None

    opensea_base_url: str = defaults.DEFAULT_OPENSEA_BASE_URL
    goapi_base_url: str = defaults.DEFAULT_GOAPI_BASE_URL
    contract: str = defaults.DEFAULT_CONTRACT
    chain: str = defaults.DEFAULT_CHAIN
    openai_model: str = defaults.DEFAULT_OPENAI_MODEL

    poll_interval: float = Field(default=defaults.DEFAULT_POLL_INTERVAL, ge=0)
    max_poll_attempts: int = Field(default=defaults.DEFAULT_MAX_POLL_ATTEMPTS, ge=1)
    http_timeout: float = Field(default=defaults.DEFAULT_HTTP_TIMEOUT, gt=0)
    max_retries: int = Field(default=defaults.DEFAULT_MAX_RETRIES, ge=1)

    cache_dir: Path = Path(defaults.DEFAULT_CACHE_DIR)
    dedupe: bool = defaults.DEFAULT_DEDUPE

    host: str = defaults.DEFAULT_HOST
    port: int = defaults.DEFAULT_PORT
    environment: str = defaults.DEFAULT_ENVIRONMENT
    log_level: str = defaults.DEFAULT_LOG_LEVEL

    model_config = {"extra": "ignore"}

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Settings:
        return cls(**config)

    def api_keys_status(self) -> dict[str, bool]:
        return {
            "opensea": bool(self.opensea_api_key),
            "gpt": bool(self.openai_api_key),
            "goapi": bool(self.goapi_api_key),
        }


def load_settings(**runtime_overrides: Any) -> Settings:
    """Resolve the config hierarchy into validated Settings."""
    from cardgen.config.hierarchy import load_config_hierarchy

    return Settings.from_config(load_config_hierarchy(**runtime_overrides))
