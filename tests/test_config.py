"""
Tests for settings loading and validation.
"""

import json

import pytest

from brainbolt.common.exceptions import ConfigurationError
from brainbolt.config import load_settings
from brainbolt.quiz.adaptive import DifficultyBounds


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults(self, monkeypatch):
        for name in ("SESSION_TTL_SECONDS", "DIFFICULTY_MIN", "DIFFICULTY_MAX", "DEFAULT_DIFFICULTY"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.SESSION_TTL_SECONDS == 1800
        assert settings.DEFAULT_DIFFICULTY == 3
        assert settings.difficulty_bounds == DifficultyBounds(1, 10)
        assert settings.CACHE_KEY_PREFIX == "bb:"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SESSION_TTL_SECONDS", "600")
        monkeypatch.setenv("CACHE_USE_REDIS", "true")

        settings = load_settings()

        assert settings.SESSION_TTL_SECONDS == 600
        assert settings.CACHE_USE_REDIS is True

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DIFFICULTY_MAX", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("DIFFICULTY_MIN: 2\nDIFFICULTY_MAX: 6\nDEFAULT_DIFFICULTY: 4\n")

        settings = load_settings(str(path))

        assert settings.difficulty_bounds == DifficultyBounds(2, 6)
        assert settings.DEFAULT_DIFFICULTY == 4

    def test_environment_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"SESSION_TTL_SECONDS": 100}))
        monkeypatch.setenv("SESSION_TTL_SECONDS", "200")

        assert load_settings(str(path)).SESSION_TTL_SECONDS == 200

    def test_missing_file_is_ignored(self, tmp_path):
        settings = load_settings(str(tmp_path / "absent.yaml"))
        assert settings.PORT > 0

    def test_file_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_settings(str(path))

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ConfigurationError):
            load_settings(DIFFICULTY_MIN=8, DIFFICULTY_MAX=3, DEFAULT_DIFFICULTY=5)

    def test_default_outside_bounds_rejected(self):
        with pytest.raises(ConfigurationError):
            load_settings(DIFFICULTY_MIN=4, DIFFICULTY_MAX=8, DEFAULT_DIFFICULTY=3)

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(SESSION_TTL_SECONDS=0)
        assert exc_info.value.config_key == "SESSION_TTL_SECONDS"

    def test_bounds_beyond_ten_rejected(self):
        with pytest.raises(ConfigurationError):
            load_settings(DIFFICULTY_MAX=11)

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        assert load_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(LOG_LEVEL="LOUD")
        assert exc_info.value.config_key == "LOG_LEVEL"
