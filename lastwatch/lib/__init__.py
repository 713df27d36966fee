"""Shared plumbing: configuration loading and systemd supervision."""
