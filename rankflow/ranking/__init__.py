"""Article popularity and user influence leaderboards.

Both leaderboards live in the ordered score store. Event-driven updates
increment scores; periodic resyncs overwrite them from the system of record.
"""

from rankflow.ranking.articles import ArticleRankingEngine
from rankflow.ranking.influence import build_influence_breakdown, influence_score_pure
from rankflow.ranking.leaderboard import Leaderboard
from rankflow.ranking.models import (
    ArticleRanking,
    ArticleRankingStatistics,
    ArticleScore,
    ArticleSummary,
    AuthorStats,
    EnrichedArticleEntry,
    EnrichedRankEntry,
    InfluenceBreakdown,
    InfluenceFactor,
    LeaderboardSummary,
    RebuildResult,
    UserProfile,
    UserRanking,
    UserRankingStatistics,
    UserScore,
)
from rankflow.ranking.protocols import ArticleDirectory, FollowerDirectory, UserDirectory
from rankflow.ranking.users import UserRankingEngine


__all__ = [
    "ArticleDirectory",
    "ArticleRanking",
    "ArticleRankingEngine",
    "ArticleRankingStatistics",
    "ArticleScore",
    "ArticleSummary",
    "AuthorStats",
    "EnrichedArticleEntry",
    "EnrichedRankEntry",
    "FollowerDirectory",
    "InfluenceBreakdown",
    "InfluenceFactor",
    "Leaderboard",
    "LeaderboardSummary",
    "RebuildResult",
    "UserDirectory",
    "UserProfile",
    "UserRanking",
    "UserRankingEngine",
    "UserRankingStatistics",
    "UserScore",
    "build_influence_breakdown",
    "influence_score_pure",
]
