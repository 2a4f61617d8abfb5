"""Tests for validated settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cardgen.config import hierarchy
from cardgen.config.hierarchy import _ENV_MAP
from cardgen.config.schema import Settings, load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.poll_interval == 5.0
        assert s.max_poll_attempts == 60
        assert s.cache_dir == Path("cache")
        assert s.dedupe is True

    def test_cache_dir_coerced_to_path(self):
        assert Settings(cache_dir="/tmp/c").cache_dir == Path("/tmp/c")

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValidationError):
            Settings(max_poll_attempts=0)

    def test_unknown_keys_ignored(self):
        assert Settings.from_config({"chain": "base", "unknown": 1}).chain == "base"

    def test_api_keys_status(self):
        s = Settings(opensea_api_key="a", goapi_api_key="")
        assert s.api_keys_status() == {"opensea": True, "gpt": False, "goapi": False}


class TestLoadSettings:
    def test_resolves_hierarchy(self, tmp_path, monkeypatch):
        for name in _ENV_MAP:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "none.yaml")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CARDGEN_MAX_POLL_ATTEMPTS", "7")

        s = load_settings(cache_dir=str(tmp_path / "c"))

        assert s.max_poll_attempts == 7
        assert s.cache_dir == tmp_path / "c"
