"""Application settings loading."""

from .app import AppSettings, RecommendationLimits, get_settings


__all__ = ["AppSettings", "RecommendationLimits", "get_settings"]
