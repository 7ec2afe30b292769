"""Influence leaderboard for users."""

from collections.abc import Iterator

import structlog

from rankflow.ranking.constants import (
    DEFAULT_RANKING_TTL_DAYS,
    DEFAULT_SYNC_BATCH_SIZE,
    DEFAULT_TOP_LIMIT,
    SECONDS_PER_DAY,
    USER_RANKING_KEY,
)
from rankflow.ranking.influence import influence_score_pure
from rankflow.ranking.leaderboard import Leaderboard
from rankflow.ranking.models import (
    EnrichedRankEntry,
    RebuildResult,
    UserRanking,
    UserRankingStatistics,
    UserScore,
)
from rankflow.ranking.protocols import ArticleDirectory, FollowerDirectory, UserDirectory
from rankflow.scores import ScoreStore


logger = structlog.get_logger()


class UserRankingEngine:
    """Maintains the user influence leaderboard.

    Scores are computed from follower count and published-article
    aggregates (see ``rankflow.ranking.influence``). ``update_score``
    overwrites a score; ``increment_score`` applies a delta. The two are
    kept separate so event handlers cannot clobber a recalculated value by
    accident.
    """

    def __init__(  # noqa: PLR0913
        self,
        store: ScoreStore,
        users: UserDirectory,
        followers: FollowerDirectory,
        articles: ArticleDirectory,
        ttl_seconds: int = DEFAULT_RANKING_TTL_DAYS * SECONDS_PER_DAY,
        batch_size: int = DEFAULT_SYNC_BATCH_SIZE,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Score store holding the leaderboard.
            users: System-of-record access to user profiles.
            followers: Follower counts.
            articles: Per-author article aggregates.
            ttl_seconds: Leaderboard expiration refreshed on every write.
            batch_size: Users written per round trip during a resync.
        """
        self._users = users
        self._followers = followers
        self._articles = articles
        self._board = Leaderboard(store, USER_RANKING_KEY, ttl_seconds, batch_size)
        self._log = logger.bind(component="user_ranking")

    def calculate_influence_score(self, user_id: str) -> float:
        """Compute a user's influence score from the system of record.

        Args:
            user_id: User to score.

        Returns:
            Score rounded to two decimals, 0.0 when the user does not exist.
        """
        if self._users.find_user_by_id(user_id) is None:
            return 0.0
        return self._score_existing(user_id)

    def _score_existing(self, user_id: str) -> float:
        followers = self._followers.get_follower_count(user_id)
        stats = self._articles.get_published_article_stats_by_author(user_id)
        return influence_score_pure(followers, stats)

    def update_score(self, user_id: str, score: float) -> None:
        """Overwrite a user's influence score."""
        self._board.overwrite(user_id, score)

    def increment_score(self, user_id: str, delta: float = 1.0) -> None:
        """Add ``delta`` to a user's influence score."""
        self._board.increment(user_id, delta)

    def remove_user(self, user_id: str) -> None:
        """Evict a user from the leaderboard."""
        self._board.remove(user_id)

    def reset_ranking(self) -> None:
        """Delete the whole leaderboard."""
        self._board.reset()

    def get_top_users(self, limit: int = DEFAULT_TOP_LIMIT) -> list[UserScore]:
        """Return the most influential users, highest first."""
        return [
            UserScore(user_id=entry.member, score=entry.score)
            for entry in self._board.top(limit)
        ]

    def get_user_rank(self, user_id: str) -> int | None:
        """Return a user's 1-based rank, or None when unranked."""
        return self._board.rank(user_id)

    def get_user_score(self, user_id: str) -> float:
        """Return a user's influence score, 0.0 when unranked."""
        return self._board.score(user_id)

    def get_statistics(self) -> UserRankingStatistics:
        """Return cardinality, total, top and average score."""
        summary = self._board.summary()
        average = round(summary.total / summary.count, 2) if summary.count > 0 else 0.0
        return UserRankingStatistics(
            total_users=summary.count,
            total_score=round(summary.total, 2),
            top_score=summary.top,
            average_score=average,
        )

    def sync_from_database(self) -> RebuildResult:
        """Recompute every user's score and rebuild the leaderboard.

        Every user is written, including those with a zero score. User ids
        are streamed and scored lazily, so only one batch is held in memory.

        Returns:
            Rebuild outcome with the number of users written.
        """
        self._log.info("user_ranking_sync_started")
        result = self._board.rebuild(self._all_scores())
        self._log.info(
            "user_ranking_sync_complete",
            entries_written=result.entries_written,
            completed=result.completed,
        )
        return result

    def _all_scores(self) -> Iterator[tuple[str, float]]:
        for user_id in self._users.iter_user_ids():
            yield user_id, self._score_existing(user_id)

    def recalculate_user(self, user_id: str) -> float:
        """Recompute and store one user's score.

        Called after events that change the inputs, such as a new follower.

        Returns:
            The score that was written.
        """
        score = self.calculate_influence_score(user_id)
        self.update_score(user_id, score)
        self._log.debug("user_score_recalculated", user_id=user_id, score=score)
        return score

    def get_enriched_top_users(self, limit: int = DEFAULT_TOP_LIMIT) -> list[EnrichedRankEntry]:
        """Return the top users joined with their profiles.

        Profiles are loaded with one bulk lookup. A user deleted after being
        ranked keeps its rank and score with ``user=None``.
        """
        ranking = self.get_top_users(limit)
        if not ranking:
            return []

        profiles = self._users.find_users_by_ids([r.user_id for r in ranking])
        return [
            EnrichedRankEntry(
                rank=index,
                user_id=entry.user_id,
                score=entry.score,
                user=profiles.get(entry.user_id),
            )
            for index, entry in enumerate(ranking, start=1)
        ]

    def get_enriched_user_ranking(self, user_id: str) -> UserRanking:
        """Return one user's rank, score, influence inputs and profile.

        A missing user yields a zero-score result with ``rank=None``.
        """
        profile = self._users.find_user_by_id(user_id)
        if profile is None:
            return UserRanking(user_id=user_id)

        stats = self._articles.get_published_article_stats_by_author(user_id)
        return UserRanking(
            user_id=user_id,
            rank=self.get_user_rank(user_id),
            score=self.get_user_score(user_id),
            followers_count=self._followers.get_follower_count(user_id),
            articles_count=stats.articles_count,
            total_views=stats.total_views,
            total_likes=stats.total_likes,
            total_comments=stats.total_comments,
            user=profile,
        )
