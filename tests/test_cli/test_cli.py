"""Tests for CLI commands."""

import io
import logging
import os
import time
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner
from PIL import Image

from imgcache.cache.disk import DiskCache
from imgcache.cli import _resolve_log_level, cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def populated_dir(tmp_path):
    cache_dir = tmp_path / "images"
    disk = DiskCache(cache_dir=cache_dir)
    disk.put("a" * 64, b"x" * 2048)
    disk.put("b" * 64, b"y" * 1024)
    disk.close()
    return cache_dir


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "imgcache" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestFetchCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["fetch", "--help"])
        assert result.exit_code == 0
        assert "--output" in result.output
        assert "--cache-dir" in result.output

    def test_missing_url(self, runner):
        result = runner.invoke(cli, ["fetch"])
        assert result.exit_code != 0

    def test_unfetchable_url_exits_1(self, runner, tmp_path):
        result = runner.invoke(cli, ["fetch", "not-a-url", "--cache-dir", str(tmp_path / "c")])
        assert result.exit_code == 1

    def test_fetch_writes_output(self, runner, tmp_path, monkeypatch, sample_image_bytes):
        monkeypatch.setattr(
            "imgcache.cache.fetcher.ImageFetcher.fetch",
            AsyncMock(return_value=sample_image_bytes),
        )
        out = tmp_path / "out.png"
        result = runner.invoke(
            cli,
            ["fetch", "https://img.example/photo.jpg", "-o", str(out), "--cache-dir", str(tmp_path / "c")],
        )
        assert result.exit_code == 0, result.output
        assert Image.open(io.BytesIO(out.read_bytes())).size == (10, 10)
        assert len(list((tmp_path / "c").iterdir())) == 1

    def test_fetch_prints_summary(self, runner, tmp_path, monkeypatch, sample_image_bytes):
        monkeypatch.setattr(
            "imgcache.cache.fetcher.ImageFetcher.fetch",
            AsyncMock(return_value=sample_image_bytes),
        )
        result = runner.invoke(
            cli, ["fetch", "https://img.example/photo.jpg", "--cache-dir", str(tmp_path / "c")]
        )
        assert result.exit_code == 0
        assert "10x10" in result.output


class TestCacheCommands:
    def test_cache_help(self, runner):
        result = runner.invoke(cli, ["cache", "--help"])
        assert result.exit_code == 0
        for name in ("stats", "clear", "sweep", "list"):
            assert name in result.output

    def test_cache_stats(self, runner, populated_dir):
        result = runner.invoke(cli, ["cache", "stats", "--cache-dir", str(populated_dir)])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Disk entries" in result.output

    def test_cache_list(self, runner, populated_dir):
        result = runner.invoke(cli, ["cache", "list", "--cache-dir", str(populated_dir)])
        assert result.exit_code == 0
        assert "a" * 16 in result.output
        assert "b" * 16 in result.output

    def test_cache_list_empty(self, runner, tmp_path):
        result = runner.invoke(cli, ["cache", "list", "--cache-dir", str(tmp_path / "empty")])
        assert result.exit_code == 0
        assert "empty" in result.output.lower()

    def test_cache_sweep(self, runner, populated_dir):
        old = populated_dir / ("a" * 64)
        then = time.time() - 8 * 24 * 3600
        os.utime(old, (then, then))
        result = runner.invoke(cli, ["cache", "sweep", "--cache-dir", str(populated_dir)])
        assert result.exit_code == 0
        assert "Removed 1" in result.output
        assert not old.exists()

    def test_cache_sweep_max_age(self, runner, populated_dir):
        result = runner.invoke(
            cli, ["cache", "sweep", "--max-age", "0", "--cache-dir", str(populated_dir)]
        )
        assert result.exit_code == 0
        assert "Removed 2" in result.output

    def test_cache_clear_needs_confirmation(self, runner, populated_dir):
        result = runner.invoke(cli, ["cache", "clear", "--cache-dir", str(populated_dir)], input="n\n")
        assert result.exit_code != 0
        assert len(list(populated_dir.iterdir())) == 2

    def test_cache_clear_with_yes(self, runner, populated_dir):
        result = runner.invoke(cli, ["cache", "clear", "--yes", "--cache-dir", str(populated_dir)])
        assert result.exit_code == 0
        assert "cleared" in result.output.lower()
        assert list(populated_dir.iterdir()) == []


class TestLogLevel:
    def test_configured_level_is_base(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("IMGCACHE_LOG_LEVEL", "error")
        assert _resolve_log_level(0) == logging.ERROR

    def test_verbose_flag_overrides_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("IMGCACHE_LOG_LEVEL", "ERROR")
        assert _resolve_log_level(1) == logging.INFO
        assert _resolve_log_level(2) == logging.DEBUG
