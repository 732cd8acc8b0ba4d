"""Tests for the CacheSettings model."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from imgcache.config.defaults import get_defaults
from imgcache.config.schema import CacheSettings


class TestCacheSettings:
    def test_from_defaults(self):
        settings = CacheSettings.from_mapping(get_defaults())
        assert settings.memory_max_entries == 50
        assert settings.disk_max_age_seconds == 604800
        assert isinstance(settings.cache_dir, Path)

    def test_unknown_keys_ignored(self):
        settings = CacheSettings.from_mapping({"memory_max_entries": 3, "unrelated": "x"})
        assert settings.memory_max_entries == 3

    def test_string_values_coerced(self):
        settings = CacheSettings.from_mapping({"memory_max_entries": "8", "cache_dir": "/tmp/c"})
        assert settings.memory_max_entries == 8
        assert settings.cache_dir == Path("/tmp/c")

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValidationError):
            CacheSettings(memory_max_entries=0)

    def test_rejects_out_of_range_quality(self):
        with pytest.raises(ValidationError):
            CacheSettings(jpeg_quality=120)

    def test_rejects_non_positive_age(self):
        with pytest.raises(ValidationError):
            CacheSettings(disk_max_age_seconds=0)

    def test_fetch_timeout_optional(self):
        assert CacheSettings().fetch_timeout is None
        assert CacheSettings(fetch_timeout=2.5).fetch_timeout == 2.5

    def test_log_level_normalized(self):
        assert CacheSettings(log_level=" debug ").log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            CacheSettings(log_level="LOUD")
