"""
Tests for settings loading and the user .env writer.
"""

import pytest
from pydantic import ValidationError

from core.config import (
    DEFAULT_FALLBACK_PREFIXES,
    DEFAULT_FALLBACK_ROOTS,
    AppSettings,
    get_user_config_dir,
    write_user_env_vars,
)

from tests.conftest import make_settings


class TestAppSettings:
    """Defaults, env overrides and validation."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.probe_timeout_seconds == 5.0
        assert settings.max_candidates == 30
        assert settings.max_shard_number == 15
        assert settings.min_image_width == 10
        assert settings.fallback_prefixes == DEFAULT_FALLBACK_PREFIXES
        assert settings.fallback_roots == DEFAULT_FALLBACK_ROOTS

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SHARDFIX_PROBE_TIMEOUT_SECONDS", "1.5")
        monkeypatch.setenv("SHARDFIX_FALLBACK_PREFIXES", '["A", " b "]')

        settings = make_settings()

        assert settings.probe_timeout_seconds == 1.5
        assert settings.fallback_prefixes == ("a", "b")

    def test_rejects_bad_prefix(self):
        with pytest.raises(ValidationError):
            make_settings(fallback_prefixes=("n1",))

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            make_settings(probe_timeout_seconds=0)

    def test_roots_normalized(self):
        settings = make_settings(fallback_roots=(" MBRTZ.org ", ""))
        assert settings.fallback_roots == ("mbrtz.org",)

    def test_frozen(self):
        settings = make_settings()
        with pytest.raises(ValidationError):
            settings.max_candidates = 3


class TestUserEnv:
    """The per-user .env file."""

    def test_write_merges_existing(self, tmp_path):
        env_path = tmp_path / "shardfix" / ".env"
        write_user_env_vars({"SHARDFIX_MAX_CANDIDATES": "10"}, env_path=env_path)
        write_user_env_vars({"SHARDFIX_PROBE_TIMEOUT_SECONDS": "2"}, env_path=env_path)

        content = env_path.read_text(encoding="utf-8")
        assert "SHARDFIX_MAX_CANDIDATES=10" in content
        assert "SHARDFIX_PROBE_TIMEOUT_SECONDS=2" in content

    def test_settings_read_env_file(self, tmp_path):
        env_path = tmp_path / ".env"
        write_user_env_vars({"SHARDFIX_MAX_SHARD_NUMBER": "7"}, env_path=env_path)

        assert AppSettings(_env_file=env_path).max_shard_number == 7

    def test_config_dir_honours_xdg(self, monkeypatch, tmp_path):
        import sys

        if sys.platform.startswith("win") or sys.platform == "darwin":
            pytest.skip("XDG only applies on Linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_user_config_dir() == tmp_path / "shardfix"
