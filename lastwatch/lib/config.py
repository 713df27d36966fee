# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Configuration loader for LastWatch.

Settings are layered, lowest precedence first:
  1. built-in defaults
  2. the JSON config file (candidate users, hooks, log level)
  3. environment variables (LASTFM_API_KEY and other secrets live here)
  4. command line flags

Config file search order:
  1. --config <path> or $LASTWATCH_CONFIG
  2. /etc/lastwatch/config.json
  3. config.json                    (CWD: handy for local dev)

Usage:
    from lastwatch.lib.config import cfg, load_settings

    users     = cfg("users", default=[])
    api_url   = cfg("lastfm", "api_url", default=DEFAULT_API_URL)
    settings  = load_settings(os.environ, interval=5000)
"""

import json
import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://ws.audioscrobbler.com/2.0/"
DEFAULT_INTERVAL_MS = 10000
DEFAULT_CYCLE_TIMEOUT_S = 30.0
DEFAULT_LOG_LEVEL = "INFO"

_SEARCH_PATHS = [
    "/etc/lastwatch/config.json",
    "config.json",
]

_TRUTHY = ("true", "1", "yes", "on")
_FALSY = ("false", "0", "no", "off", "")

_config: dict | None = None


class ConfigError(Exception):
    """A required setting is missing or invalid.  Fatal at startup."""


def _validate(config: dict, path: str) -> None:
    """Warn about missing or suspicious config values."""
    users = config.get("users")
    if users is not None and not isinstance(users, list):
        raise ConfigError(f"Config {path}: 'users' must be a list")
    if not users:
        logger.warning("Config %s: no 'users', falling back to $LASTFM_USERNAME", path)
    hooks = config.get("hooks")
    if hooks is not None and not isinstance(hooks, list):
        raise ConfigError(f"Config {path}: 'hooks' must be a list")
    if not hooks:
        logger.warning("Config %s: no 'hooks', track changes will only be logged", path)


def load_config(path: str | None = None) -> dict:
    """Load config from the first JSON file found.  Cached after first call.

    An explicit *path* must exist and parse; the default search paths are
    skipped when missing or broken.
    """
    global _config
    if _config is not None:
        return _config

    path = path or os.environ.get("LASTWATCH_CONFIG")
    if path:
        try:
            with open(path) as f:
                config = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}") from None
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from None
        return _accept(config, path)

    for candidate in _SEARCH_PATHS:
        try:
            with open(candidate) as f:
                config = json.load(f)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", candidate, e)
            continue
        return _accept(config, candidate)

    logger.warning("No config.json found, using empty config")
    _config = {}
    return _config


def _accept(config, path: str) -> dict:
    global _config
    if not isinstance(config, dict):
        raise ConfigError(f"Config {path}: top level must be a JSON object")
    logger.info("Config loaded from %s", path)
    _validate(config, path)
    _config = config
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Read a config value.

    cfg("users")                       → config["users"]
    cfg("lastfm", "api_url")           → config["lastfm"]["api_url"]
    cfg("log_level", default="INFO")   → config["log_level"] or "INFO"
    """
    config = load_config()
    val = config.get(section)
    if key is None:
        return val if val is not None else default
    if isinstance(val, dict):
        return val.get(key, default)
    return default


def reload_config(path: str | None = None) -> dict:
    """Force re-read from disk (for testing or hot-reload)."""
    global _config
    _config = None
    return load_config(path)


# ── Value parsing ──

def parse_bool(value, name: str) -> bool:
    """Accept a bool or a boolean-ish string ("true", "0", "off", ...)."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def parse_number(value, name: str, *, minimum: float, integer: bool = True):
    try:
        number = int(value) if integer else float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if number < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {number}")
    return number


def parse_url(value, name: str) -> str:
    url = str(value or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"{name} must be an http(s) URL, got {value!r}")
    return url


def parse_log_level(value, name: str) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{name} must be a logging level name, got {value!r}")
    return level


# ── Resolved runtime settings ──

@dataclass(frozen=True)
class Settings:
    """Everything the poll loop and the hook factories need at runtime."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    interval_ms: int = DEFAULT_INTERVAL_MS
    show_inactive: bool = False
    users: tuple[str, ...] = ()
    hooks: tuple[dict, ...] = ()
    log_level: str = DEFAULT_LOG_LEVEL
    cycle_timeout_s: float = DEFAULT_CYCLE_TIMEOUT_S

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000


def _layer(environ, env_name: str, section: str, key: str | None = None, default=None):
    """Environment beats config file beats *default*."""
    if env_name in environ and environ[env_name] != "":
        return environ[env_name], env_name
    val = cfg(section, key)
    if val is not None:
        return val, f"config {section}.{key}" if key else f"config {section}"
    return default, env_name


def load_settings(environ=None, *, interval=None, allow_inactive=None,
                  log_level=None, config_path=None) -> Settings:
    """Resolve settings from config file, *environ* and CLI overrides.

    Raises ConfigError on the first invalid or missing value.
    """
    environ = os.environ if environ is None else environ
    load_config(config_path or environ.get("LASTWATCH_CONFIG"))

    api_key = str(environ.get("LASTFM_API_KEY", "")).strip()
    if not api_key:
        raise ConfigError("LASTFM_API_KEY is required")

    raw, name = _layer(environ, "LASTFM_API_URL", "lastfm", "api_url", DEFAULT_API_URL)
    api_url = parse_url(raw, name)

    if interval is not None:
        interval_ms = parse_number(interval, "--interval", minimum=1)
    else:
        raw, name = _layer(environ, "REQUEST_INTERVAL_MS", "interval_ms", default=DEFAULT_INTERVAL_MS)
        interval_ms = parse_number(raw, name, minimum=1)

    if allow_inactive:
        show_inactive = True
    else:
        raw, name = _layer(environ, "SHOW_INACTIVE_TRACKS", "show_inactive_tracks", default=False)
        show_inactive = parse_bool(raw, name)

    if log_level is not None:
        level = parse_log_level(log_level, "--log-level")
    else:
        raw, name = _layer(environ, "LOG_LEVEL", "log_level", default=DEFAULT_LOG_LEVEL)
        level = parse_log_level(raw, name)

    raw, name = _layer(environ, "CYCLE_TIMEOUT_S", "cycle_timeout_s", default=DEFAULT_CYCLE_TIMEOUT_S)
    cycle_timeout_s = parse_number(raw, name, minimum=0.001, integer=False)

    users = cfg("users", default=[])
    if not users and environ.get("LASTFM_USERNAME"):
        users = [environ["LASTFM_USERNAME"]]
    if not all(isinstance(u, str) and u.strip() for u in users):
        raise ConfigError("users must be non-empty strings")

    hooks = cfg("hooks", default=[])
    for entry in hooks:
        if not isinstance(entry, dict) or not entry.get("type"):
            raise ConfigError(f"Hook entry needs a 'type': {entry!r}")

    return Settings(
        api_key=api_key,
        api_url=api_url,
        interval_ms=interval_ms,
        show_inactive=show_inactive,
        users=tuple(u.strip() for u in users),
        hooks=tuple(hooks),
        log_level=level,
        cycle_timeout_s=cycle_timeout_s,
    )
