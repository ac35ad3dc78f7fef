"""Productivity growth tracker with remote sync and leaderboard."""

__version__ = "0.1.0"
