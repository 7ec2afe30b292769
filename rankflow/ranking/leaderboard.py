"""Single-key leaderboard shared by the article and user engines."""

import itertools
from collections.abc import Iterable

import structlog

from rankflow.ranking.constants import DEFAULT_SYNC_BATCH_SIZE
from rankflow.ranking.models import LeaderboardSummary, RebuildResult
from rankflow.scores import RankEntry, ScoreStore, ScoreStoreUnavailableError


logger = structlog.get_logger()


class Leaderboard:
    """One ordered key in the score store.

    Keeps two write paths apart: ``increment`` applies an event delta,
    ``overwrite`` and ``rebuild`` replace scores with authoritative values.
    Store failures never escape; reads degrade to zero or empty results and
    writes report whether they were applied.
    """

    def __init__(
        self,
        store: ScoreStore,
        key: str,
        ttl_seconds: int,
        batch_size: int = DEFAULT_SYNC_BATCH_SIZE,
    ) -> None:
        """Initialize the leaderboard.

        Args:
            store: Backing score store.
            key: Ordered key holding the scores.
            ttl_seconds: Expiration refreshed on every write.
            batch_size: Members written per round trip during a rebuild.
        """
        self._store = store
        self._key = key
        self._ttl_seconds = ttl_seconds
        self._batch_size = batch_size
        self._log = logger.bind(component="leaderboard", key=key)

    @property
    def key(self) -> str:
        """Get the leaderboard key."""
        return self._key

    def increment(self, member: str, delta: float) -> float | None:
        """Add ``delta`` to a member's score.

        Args:
            member: Entity id.
            delta: Amount to add.

        Returns:
            The new score, or None if the store was unavailable.
        """
        try:
            new_score = self._store.increment(self._key, member, delta)
            self._store.set_expiration(self._key, self._ttl_seconds)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_increment_failed", member=member, delta=delta)
            return None
        return new_score

    def overwrite(self, member: str, score: float) -> bool:
        """Replace a member's score.

        Args:
            member: Entity id.
            score: Authoritative score.

        Returns:
            True if the write was applied.
        """
        try:
            self._store.set_score(self._key, member, score)
            self._store.set_expiration(self._key, self._ttl_seconds)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_overwrite_failed", member=member)
            return False
        return True

    def top(self, limit: int) -> list[RankEntry]:
        """Return the ``limit`` highest entries, highest first."""
        if limit <= 0:
            return []
        try:
            return self._store.range(self._key, 0, limit - 1)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_read_failed", op="top", limit=limit)
            return []

    def rank(self, member: str) -> int | None:
        """Return a member's 1-based rank, or None when unranked."""
        try:
            return self._store.rank(self._key, member)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_read_failed", op="rank", member=member)
            return None

    def score(self, member: str) -> float:
        """Return a member's score, 0.0 when unranked."""
        try:
            value = self._store.score(self._key, member)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_read_failed", op="score", member=member)
            return 0.0
        return 0.0 if value is None else value

    def remove(self, member: str) -> bool:
        """Evict a member. Returns True if the command was applied."""
        try:
            self._store.remove(self._key, member)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_remove_failed", member=member)
            return False
        return True

    def reset(self) -> bool:
        """Delete every score. Returns True if the command was applied."""
        try:
            self._store.clear(self._key)
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_reset_failed")
            return False
        return True

    def rebuild(self, scores: Iterable[tuple[str, float]]) -> RebuildResult:
        """Replace the whole leaderboard with authoritative scores.

        The key is cleared first, then ``scores`` is consumed lazily and
        written in batches, so memory stays bounded by the batch size.

        Args:
            scores: Stream of (member, score) pairs.

        Returns:
            How many members were written and whether the rebuild finished.
        """
        written = 0
        try:
            self._store.clear(self._key)
            for batch in itertools.batched(scores, self._batch_size):
                self._store.set_scores(self._key, dict(batch))
                written += len(batch)
            self._store.set_expiration(self._key, self._ttl_seconds)
        except ScoreStoreUnavailableError:
            self._log.error("leaderboard_rebuild_failed", entries_written=written)
            return RebuildResult(entries_written=written, completed=False)

        self._log.info("leaderboard_rebuilt", entries_written=written)
        return RebuildResult(entries_written=written, completed=True)

    def summary(self) -> LeaderboardSummary:
        """Compute count, total and top score over every entry."""
        try:
            count = self._store.cardinality(self._key)
            head = self._store.range(self._key, 0, 0)
            total = sum(entry.score for entry in self._store.iter_entries(self._key))
        except ScoreStoreUnavailableError:
            self._log.warning("leaderboard_read_failed", op="summary")
            return LeaderboardSummary()
        return LeaderboardSummary(
            count=count,
            total=total,
            top=head[0].score if head else 0.0,
        )
