"""Leaderboards and graph-based recommendations for a content platform."""
