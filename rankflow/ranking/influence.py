"""Influence score formula.

    score = followers * 2.0 + views * 0.5 + likes * 1.0
          + comments * 0.8 + articles * 1.5

rounded to two decimals. The breakdown uses the same weight table, so the
sum of its contributions always matches the stored score.
"""

from rankflow.ranking.constants import INFLUENCE_SCORE_PRECISION, INFLUENCE_WEIGHTS
from rankflow.ranking.models import AuthorStats, InfluenceBreakdown, InfluenceFactor


def _factor_values(followers: int, stats: AuthorStats) -> dict[str, int]:
    return {
        "followers": followers,
        "views": stats.total_views,
        "likes": stats.total_likes,
        "comments": stats.total_comments,
        "articles": stats.articles_count,
    }


def build_influence_breakdown(followers: int, stats: AuthorStats) -> InfluenceBreakdown:
    """Break an influence score into weighted factors.

    Args:
        followers: Follower count.
        stats: Aggregate statistics over the user's published articles.

    Returns:
        Breakdown with one factor per weight, in weight-table order.
    """
    values = _factor_values(followers, stats)
    return InfluenceBreakdown(
        factors=[
            InfluenceFactor(
                name=name,
                value=values[name],
                weight=weight,
                contribution=values[name] * weight,
            )
            for name, weight in INFLUENCE_WEIGHTS.items()
        ]
    )


def influence_score_pure(followers: int, stats: AuthorStats) -> float:
    """Pure function API for the influence score.

    Args:
        followers: Follower count.
        stats: Aggregate statistics over the user's published articles.

    Returns:
        Weighted score rounded to two decimals.
    """
    values = _factor_values(followers, stats)
    score = sum(values[name] * weight for name, weight in INFLUENCE_WEIGHTS.items())
    return round(score, INFLUENCE_SCORE_PRECISION)
