"""Fetchers for YouTrack entities used during data collection."""

from . import articles, issues, projects, users

__all__ = [
    "articles",
    "issues",
    "projects",
    "users",
]
