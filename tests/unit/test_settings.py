"""Unit tests for environment settings."""

import logging

import pytest
from pydantic import ValidationError

from rankflow.settings import AppSettings, RecommendationLimits


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove settings variables that may leak in from the shell."""
    for name in (
        "REDIS_URL",
        "NEO4J_URI",
        "NEO4J_MAX_USER_RECOMMENDATIONS",
        "NEO4J_MIN_FOLLOWERS_INFLUENTIAL",
        "NEO4J_RECOMMENDATIONS_CACHE_TTL",
        "NEO4J_PROBE_TTL_SECONDS",
        "RANKING_TTL_DAYS",
        "RANKFLOW_CONTENT_SOURCE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test documented defaults apply without environment."""
        settings = AppSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.neo4j_uri == "bolt://neo4j:7687"
        assert settings.neo4j_probe_ttl_seconds is None
        assert settings.ranking_ttl_seconds == 90 * 86400
        assert settings.content_source is None
        assert settings.recommendation_limits() == RecommendationLimits()


class TestEnvironment:
    """Tests for environment overrides."""

    def test_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the NEO4J_* and RANKING_* variables are read."""
        monkeypatch.setenv("NEO4J_MAX_USER_RECOMMENDATIONS", "25")
        monkeypatch.setenv("NEO4J_MIN_FOLLOWERS_INFLUENTIAL", "100")
        monkeypatch.setenv("NEO4J_RECOMMENDATIONS_CACHE_TTL", "60")
        monkeypatch.setenv("RANKING_TTL_DAYS", "7")
        monkeypatch.setenv("RANKFLOW_CONTENT_SOURCE", "app.adapters:build")

        settings = AppSettings(_env_file=None)  # type: ignore[call-arg]
        limits = settings.recommendation_limits()

        assert limits.max_users == 25
        assert limits.min_followers_for_influential == 100
        assert limits.cache_ttl == 60
        assert settings.ranking_ttl_seconds == 7 * 86400
        assert settings.content_source == "app.adapters:build"

    def test_rejects_non_positive_cap(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a zero cap is a configuration error."""
        monkeypatch.setenv("NEO4J_MAX_USER_RECOMMENDATIONS", "0")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)  # type: ignore[call-arg]

    def test_rejects_non_positive_probe_ttl(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the probe TTL must be positive when set."""
        monkeypatch.setenv("NEO4J_PROBE_TTL_SECONDS", "0")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)  # type: ignore[call-arg]


class TestLogLevel:
    """Tests for log level parsing."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("chatty", logging.INFO)],
    )
    def test_log_level_value(self, name: str, expected: int) -> None:
        """Test names map to levels with an INFO fallback."""
        settings = AppSettings(_env_file=None, LOG_LEVEL=name)  # type: ignore[call-arg]
        assert settings.log_level_value == expected
