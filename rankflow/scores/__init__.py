"""Ordered score store used by the leaderboards.

Wraps Redis sorted sets behind a small protocol so the ranking engines can
be exercised against any store with the same semantics.
"""

from rankflow.scores.errors import ScoreStoreError, ScoreStoreUnavailableError
from rankflow.scores.models import RankEntry
from rankflow.scores.store import RedisScoreStore, ScoreStore


__all__ = [
    "RankEntry",
    "RedisScoreStore",
    "ScoreStore",
    "ScoreStoreError",
    "ScoreStoreUnavailableError",
]
