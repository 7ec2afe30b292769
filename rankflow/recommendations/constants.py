"""Constants for the recommendation engine."""

CACHE_KEY_PREFIX: str = "recommendations"

DEFAULT_RECOMMENDATION_LIMIT: int = 10

ALGORITHM_COMMON_FOLLOWERS: str = "common_followers"
ALGORITHM_TAGS_AND_CATEGORIES: str = "tags_and_categories"
ALGORITHM_COMMON_TAGS_AND_CATEGORIES: str = "common_tags_and_categories"
ALGORITHM_FOLLOWER_COUNT: str = "follower_count"
ALGORITHM_LIKES_INTERACTION: str = "likes_interaction"
