"""Constants for the ranking engines."""

ARTICLE_RANKING_KEY: str = "articles:ranking:views"
USER_RANKING_KEY: str = "users:ranking:influence"

# Inactive leaderboards expire on their own; every write refreshes the TTL.
DEFAULT_RANKING_TTL_DAYS: int = 90
SECONDS_PER_DAY: int = 86400

DEFAULT_SYNC_BATCH_SIZE: int = 500
DEFAULT_TOP_LIMIT: int = 10

PUBLISHED_STATUS: str = "published"

# Influence score weights, in display order.
INFLUENCE_WEIGHTS: dict[str, float] = {
    "followers": 2.0,
    "views": 0.5,
    "likes": 1.0,
    "comments": 0.8,
    "articles": 1.5,
}

INFLUENCE_SCORE_PRECISION: int = 2
