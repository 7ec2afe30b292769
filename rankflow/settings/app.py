"""Application settings powered by Pydantic BaseSettings."""

import logging
from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RecommendationLimits:
    """Per-query caps and thresholds for the recommendation engine.

    Attributes:
        max_users: Maximum similar-user recommendations per request.
        max_articles: Maximum article recommendations per request.
        max_authors: Maximum influential authors per request.
        max_topics: Maximum topics of interest per request.
        min_followers_for_influential: Follower threshold for authors.
        cache_ttl: Seconds a recommendation result stays cached.
    """

    max_users: int = 10
    max_articles: int = 10
    max_authors: int = 10
    max_topics: int = 10
    min_followers_for_influential: int = 5
    cache_ttl: int = 3600


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )

    neo4j_uri: str = Field(default="bolt://neo4j:7687", validation_alias="NEO4J_URI")
    neo4j_username: str = Field(default="neo4j", validation_alias="NEO4J_USERNAME")
    neo4j_password: str = Field(default="password", validation_alias="NEO4J_PASSWORD")
    neo4j_database: str = Field(default="neo4j", validation_alias="NEO4J_DATABASE")
    neo4j_probe_ttl_seconds: float | None = Field(
        default=None, gt=0, validation_alias="NEO4J_PROBE_TTL_SECONDS"
    )

    max_user_recommendations: int = Field(
        default=10, ge=1, validation_alias="NEO4J_MAX_USER_RECOMMENDATIONS"
    )
    max_article_recommendations: int = Field(
        default=10, ge=1, validation_alias="NEO4J_MAX_ARTICLE_RECOMMENDATIONS"
    )
    max_author_recommendations: int = Field(
        default=10, ge=1, validation_alias="NEO4J_MAX_AUTHOR_RECOMMENDATIONS"
    )
    max_topic_recommendations: int = Field(
        default=10, ge=1, validation_alias="NEO4J_MAX_TOPIC_RECOMMENDATIONS"
    )
    min_followers_influential: int = Field(
        default=5, ge=0, validation_alias="NEO4J_MIN_FOLLOWERS_INFLUENTIAL"
    )
    recommendations_cache_ttl: int = Field(
        default=3600, ge=1, validation_alias="NEO4J_RECOMMENDATIONS_CACHE_TTL"
    )

    ranking_ttl_days: int = Field(default=90, ge=1, validation_alias="RANKING_TTL_DAYS")
    sync_batch_size: int = Field(
        default=500, ge=1, validation_alias="RANKING_SYNC_BATCH_SIZE"
    )

    content_source: str | None = Field(
        default=None, validation_alias="RANKFLOW_CONTENT_SOURCE"
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")

    @property
    def ranking_ttl_seconds(self) -> int:
        """Leaderboard key expiration in seconds."""
        return self.ranking_ttl_days * 86400

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, falling back to INFO for unknown names."""
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.INFO

    def recommendation_limits(self) -> RecommendationLimits:
        """Return the recommendation caps derived from these settings."""
        return RecommendationLimits(
            max_users=self.max_user_recommendations,
            max_articles=self.max_article_recommendations,
            max_authors=self.max_author_recommendations,
            max_topics=self.max_topic_recommendations,
            min_followers_for_influential=self.min_followers_influential,
            cache_ttl=self.recommendations_cache_ttl,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
