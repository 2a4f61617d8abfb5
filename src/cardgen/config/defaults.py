"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# External endpoints
DEFAULT_OPENSEA_BASE_URL = "https://api.opensea.io/api/v2"
DEFAULT_GOAPI_BASE_URL = "https://api.goapi.ai"

# NFT collection (Azuki)
DEFAULT_CONTRACT = "0xed5af388653567af2f388e6224dc7c4b3241c544"
DEFAULT_CHAIN = "ethereum"

# OpenAI
DEFAULT_OPENAI_MODEL = "gpt-4-turbo"
DEFAULT_ANALYSIS_MAX_TOKENS = 350
DEFAULT_CARD_MAX_TOKENS = 300

# Polling: 60 attempts at 5-second intervals is a 5-minute ceiling
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_POLL_ATTEMPTS = 60

# HTTP
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3

# Cache
DEFAULT_CACHE_DIR = "cache"
DEFAULT_DEDUPE = True

# Server
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_ENVIRONMENT = "development"

# Log level
DEFAULT_LOG_LEVEL = "INFO"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "opensea_base_url": DEFAULT_OPENSEA_BASE_URL,
        "goapi_base_url": DEFAULT_GOAPI_BASE_URL,
        "contract": DEFAULT_CONTRACT,
        "chain": DEFAULT_CHAIN,
        "openai_model": DEFAULT_OPENAI_MODEL,
        "poll_interval": DEFAULT_POLL_INTERVAL,
        "max_poll_attempts": DEFAULT_MAX_POLL_ATTEMPTS,
        "http_timeout": DEFAULT_HTTP_TIMEOUT,
        "max_retries": DEFAULT_MAX_RETRIES,
        "cache_dir": DEFAULT_CACHE_DIR,
        "dedupe": DEFAULT_DEDUPE,
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "environment": DEFAULT_ENVIRONMENT,
        "log_level": DEFAULT_LOG_LEVEL,
    }
