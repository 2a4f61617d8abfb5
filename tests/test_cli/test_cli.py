"""Tests for CLI commands."""

import json

import pytest
from click.testing import CliRunner

from cardgen.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_service(make_service, monkeypatch):
    service, backend = make_service()
    monkeypatch.setattr("cardgen.service.CardService", lambda settings: service)
    return service, backend


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "cardgen" in result.output
        for command in ("serve", "card", "check-task", "cache"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_serve_help(self, runner):
        result = runner.invoke(cli, ["serve", "--help"])
        assert result.exit_code == 0
        assert "--port" in result.output
        assert "--reload" in result.output


class TestCardCommand:
    def test_missing_token(self, runner):
        result = runner.invoke(cli, ["card"])
        assert result.exit_code != 0

    def test_card_without_art(self, runner, patched_service):
        _, backend = patched_service
        result = runner.invoke(cli, ["card", "1234", "--no-art"])
        assert result.exit_code == 0, result.output
        assert "Kael Emberstrike (#1234)" in result.output
        assert "not generated" in result.output
        assert backend.submitted == []

    def test_card_with_art(self, runner, patched_service):
        result = runner.invoke(cli, ["card", "1234"])
        assert result.exit_code == 0, result.output
        assert "https://x/a.png" in result.output

    def test_generation_failure_exits_1(self, runner, make_service, snap, monkeypatch):
        service, _ = make_service([snap.failed("banned prompt")])
        monkeypatch.setattr("cardgen.service.CardService", lambda settings: service)

        result = runner.invoke(cli, ["card", "1234"])

        assert result.exit_code == 1


class TestCheckTaskCommand:
    def test_prints_status(self, runner, make_backend, monkeypatch):
        monkeypatch.setattr(
            "cardgen.clients.goapi.GoAPIClient", lambda **kwargs: make_backend()
        )
        result = runner.invoke(cli, ["check-task", "abc"])
        assert result.exit_code == 0, result.output
        assert "Task abc" in result.output
        assert "processing" in result.output


class TestCacheCommands:
    def test_stats(self, runner, tmp_path):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "art_cache.json").write_text(json.dumps({"1": {"url": "u"}}))

        result = runner.invoke(cli, ["cache", "stats", "--cache-dir", str(cache_dir)])

        assert result.exit_code == 0, result.output
        assert "Cache Statistics" in result.output
        assert "art" in result.output

    def test_clear_with_yes(self, runner, tmp_path):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "art_cache.json").write_text(json.dumps({"1": {"url": "u"}}))

        result = runner.invoke(cli, ["cache", "clear", "--cache-dir", str(cache_dir), "--yes"])

        assert result.exit_code == 0, result.output
        assert "Cache cleared." in result.output
        assert json.loads((cache_dir / "art_cache.json").read_text()) == {}

    def test_clear_aborts_without_confirmation(self, runner, tmp_path):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "art_cache.json").write_text(json.dumps({"1": {"url": "u"}}))

        result = runner.invoke(
            cli, ["cache", "clear", "--cache-dir", str(cache_dir)], input="n\n"
        )

        assert result.exit_code != 0
        assert json.loads((cache_dir / "art_cache.json").read_text()) == {"1": {"url": "u"}}
