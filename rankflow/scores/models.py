"""Data models for the score store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RankEntry:
    """One member of a leaderboard with its score.

    Attributes:
        member: Entity identifier.
        score: Current score.
    """

    member: str
    score: float
