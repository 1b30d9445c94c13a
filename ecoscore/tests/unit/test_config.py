"""
Tests for environment configuration and logging setup.
"""

import json

import pytest
import structlog

from ecoscore.config import (
    CacheSettings,
    get_cache_backend,
    get_log_level,
    get_redis_password,
    get_redis_url,
)
from ecoscore.infrastructure.log_config import configure_logging

CACHE_ENV = (
    "ECOSCORE_CACHE_BACKEND",
    "REDIS_URL",
    "REDIS_PASSWORD",
    "LOG_LEVEL",
    "ECOSCORE_CACHE_DEFAULT_TTL_S",
    "ECOSCORE_ANALYSIS_TTL_S",
    "ECOSCORE_SESSION_TTL_S",
    "ECOSCORE_CACHE_SINGLE_FLIGHT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CACHE_ENV:
        monkeypatch.delenv(name, raising=False)


class TestGetters:
    """Test individual environment getters."""

    def test_defaults(self) -> None:
        assert get_cache_backend() == "memory"
        assert get_redis_url() is None
        assert get_redis_password() is None
        assert get_log_level() == "INFO"

    def test_cache_backend_normalized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECOSCORE_CACHE_BACKEND", " Redis ")
        assert get_cache_backend() == "redis"

    def test_unknown_backend_uses_memory(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECOSCORE_CACHE_BACKEND", "memcached")
        assert get_cache_backend() == "memory"

    def test_empty_redis_url_is_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_URL", "")
        assert get_redis_url() is None

    def test_log_level_upper(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"


class TestCacheSettings:
    """Test CacheSettings.from_env."""

    def test_defaults(self) -> None:
        assert CacheSettings.from_env() == CacheSettings()

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECOSCORE_CACHE_BACKEND", "redis")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        monkeypatch.setenv("REDIS_PASSWORD", "secret")
        monkeypatch.setenv("ECOSCORE_CACHE_DEFAULT_TTL_S", "60")
        monkeypatch.setenv("ECOSCORE_ANALYSIS_TTL_S", "7200")
        monkeypatch.setenv("ECOSCORE_SESSION_TTL_S", "1800")
        monkeypatch.setenv("ECOSCORE_CACHE_SINGLE_FLIGHT", "true")

        settings = CacheSettings.from_env()
        assert settings.backend == "redis"
        assert settings.redis_url == "redis://cache:6379/1"
        assert settings.redis_password == "secret"
        assert settings.default_ttl_seconds == 60
        assert settings.analysis_ttl_seconds == 7200
        assert settings.session_ttl_seconds == 1800
        assert settings.single_flight is True

    def test_invalid_integer_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECOSCORE_CACHE_DEFAULT_TTL_S", "one hour")
        assert CacheSettings.from_env().default_ttl_seconds == 3600

    @pytest.mark.parametrize("raw,expected", [("1", True), ("yes", True), ("ON", True), ("0", False), ("no", False)])
    def test_single_flight_flag(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
        monkeypatch.setenv("ECOSCORE_CACHE_SINGLE_FLIGHT", raw)
        assert CacheSettings.from_env().single_flight is expected


class TestConfigureLogging:
    """Test structlog setup."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_json_output(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging("INFO", json_output=True)
        structlog.get_logger("ecoscore.test").info("Analysis cached", analysis_id="analysis_1")

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert line["event"] == "Analysis cached"
        assert line["analysis_id"] == "analysis_1"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_level_filters(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging("WARNING", json_output=True)
        logger = structlog.get_logger("ecoscore.test")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_unknown_level_defaults_to_info(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging("verbose", json_output=True)
        logger = structlog.get_logger("ecoscore.test")
        logger.debug("hidden")
        logger.info("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_console_renderer(self, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        configure_logging()
        structlog.get_logger("ecoscore.test").debug("Cache hit", key="analysis:1")
        assert "Cache hit" in capsys.readouterr().out
