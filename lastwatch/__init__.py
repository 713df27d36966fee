"""LastWatch: Last.fm now-playing watcher with pluggable output hooks."""

__version__ = "1.0.0"
