"""Redis sorted-set implementation of the score store."""

from collections.abc import Generator, Iterator, Mapping
from contextlib import contextmanager
from typing import Protocol

import redis
import structlog
from redis.exceptions import RedisError

from rankflow.scores.errors import ScoreStoreUnavailableError
from rankflow.scores.models import RankEntry


logger = structlog.get_logger()


class ScoreStore(Protocol):
    """Protocol for an ordered member -> score collection.

    Ranks and ranges are descending by score. Ties are broken by the
    backing store and are not part of the contract.
    """

    def increment(self, key: str, member: str, delta: float) -> float:
        """Add ``delta`` to a member's score, creating it at zero first."""
        ...

    def set_score(self, key: str, member: str, score: float) -> None:
        """Overwrite a member's score."""
        ...

    def set_scores(self, key: str, scores: Mapping[str, float]) -> None:
        """Overwrite the scores of several members in one round trip."""
        ...

    def rank(self, key: str, member: str) -> int | None:
        """Return the 1-based descending rank of a member, or None."""
        ...

    def score(self, key: str, member: str) -> float | None:
        """Return a member's score, or None when absent."""
        ...

    def range(self, key: str, start: int, end: int) -> list[RankEntry]:
        """Return entries between two 0-based inclusive positions."""
        ...

    def iter_entries(self, key: str) -> Iterator[RankEntry]:
        """Iterate every entry without materializing the whole set."""
        ...

    def cardinality(self, key: str) -> int:
        """Return the number of members."""
        ...

    def remove(self, key: str, member: str) -> None:
        """Remove a member."""
        ...

    def clear(self, key: str) -> None:
        """Delete the whole collection."""
        ...

    def set_expiration(self, key: str, seconds: int) -> None:
        """Expire the whole collection after ``seconds`` of inactivity."""
        ...


class RedisScoreStore:
    """Score store backed by Redis sorted sets.

    Every client error is translated into ScoreStoreUnavailableError so
    callers only deal with one failure type.
    """

    def __init__(self, client: redis.Redis) -> None:
        """Initialize the store.

        Args:
            client: Redis client created with ``decode_responses=True``.
        """
        self._client = client
        self._log = logger.bind(component="score_store")

    @classmethod
    def from_url(cls, url: str) -> "RedisScoreStore":
        """Create a store from a Redis connection URL.

        Args:
            url: Redis URL, e.g. ``redis://localhost:6379/0``.

        Returns:
            A store using a lazily connecting client.
        """
        return cls(redis.Redis.from_url(url, decode_responses=True))

    @contextmanager
    def _command(self, operation: str, key: str) -> Generator[None]:
        """Translate client errors raised inside the block.

        Args:
            operation: Operation name for logging.
            key: Leaderboard key involved.

        Yields:
            Nothing; wraps the command.

        Raises:
            ScoreStoreUnavailableError: If the client raised.
        """
        try:
            yield
        except RedisError as e:
            self._log.warning(
                "score_store_command_failed",
                op=operation,
                key=key,
                error=str(e),
            )
            raise ScoreStoreUnavailableError(operation, key, str(e)) from e

    def increment(self, key: str, member: str, delta: float) -> float:
        with self._command("increment", key):
            return float(self._client.zincrby(key, delta, member))

    def set_score(self, key: str, member: str, score: float) -> None:
        with self._command("set_score", key):
            self._client.zadd(key, {member: score})

    def set_scores(self, key: str, scores: Mapping[str, float]) -> None:
        if not scores:
            return
        with self._command("set_scores", key):
            self._client.zadd(key, dict(scores))

    def rank(self, key: str, member: str) -> int | None:
        with self._command("rank", key):
            position = self._client.zrevrank(key, member)
        if position is None:
            return None
        return int(position) + 1

    def score(self, key: str, member: str) -> float | None:
        with self._command("score", key):
            value = self._client.zscore(key, member)
        return None if value is None else float(value)

    def range(self, key: str, start: int, end: int) -> list[RankEntry]:
        with self._command("range", key):
            rows = self._client.zrevrange(key, start, end, withscores=True)
        return [RankEntry(member=member, score=float(score)) for member, score in rows]

    def iter_entries(self, key: str) -> Iterator[RankEntry]:
        with self._command("iter_entries", key):
            for member, score in self._client.zscan_iter(key):
                yield RankEntry(member=member, score=float(score))

    def cardinality(self, key: str) -> int:
        with self._command("cardinality", key):
            return int(self._client.zcard(key))

    def remove(self, key: str, member: str) -> None:
        with self._command("remove", key):
            self._client.zrem(key, member)

    def clear(self, key: str) -> None:
        with self._command("clear", key):
            self._client.delete(key)

    def set_expiration(self, key: str, seconds: int) -> None:
        with self._command("set_expiration", key):
            self._client.expire(key, seconds)
