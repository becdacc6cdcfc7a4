"""Unit tests for lesson_agent/config.py"""
import pytest

from lesson_agent.config import Settings, get_settings, reset_settings, validate_settings
from lesson_agent.exceptions import ConfigurationError


class TestSettings:
    """Tests for defaults and environment overrides."""

    def test_defaults(self):
        settings = Settings()
        assert settings.chunk_size == 32000
        assert settings.max_checkpoints == 10
        assert settings.checkpoint_interval == 5
        assert settings.max_node_depth == 64
        assert settings.anchor_preview_chars == 50
        assert settings.tool_log_preview_chars == 300
        assert settings.max_tool_logs == 200

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("LESSON_AGENT_CHUNK_SIZE", "1000")
        assert Settings().chunk_size == 1000

    def test_env_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("lesson_agent_max_checkpoints", "4")
        assert Settings().max_checkpoints == 4


class TestGetSettings:
    """Tests for the cached settings instance."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("LESSON_AGENT_MAX_TOOL_LOGS", "7")
        reset_settings()
        second = get_settings()
        assert second is not first
        assert second.max_tool_logs == 7


class TestValidateSettings:
    """Tests for validate_settings."""

    def test_defaults_valid(self):
        assert validate_settings() is True

    @pytest.mark.parametrize("env_var,key", [
        ("LESSON_AGENT_CHUNK_SIZE", "chunk_size"),
        ("LESSON_AGENT_MAX_CHECKPOINTS", "max_checkpoints"),
        ("LESSON_AGENT_CHECKPOINT_INTERVAL", "checkpoint_interval"),
    ])
    def test_non_positive_rejected(self, monkeypatch, env_var, key):
        monkeypatch.setenv(env_var, "0")
        reset_settings()
        with pytest.raises(ConfigurationError) as exc_info:
            validate_settings()
        assert exc_info.value.config_key == key
