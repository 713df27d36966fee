"""
Pluggable output hooks for LastWatch.

Each hook is notified when the current track changes.  The factory function
``create_hooks`` reads the "hooks" list from config.json and returns the
hooks in configured order:

    "hooks": [
        {"type": "file_dump", "out_file": "np.txt", "max_length": 50},
        {"type": "http_server", "port": 1457},
        {"type": "mqtt", "hostname": "broker.local", "topic": "lastwatch/track"},
        {"type": "geekmagic", "url": "http://192.168.0.42"}
    ]

Supported types:
  - ``file_dump``    – write "Artist - Title" to a text file
  - ``http_server``  – serve the current track at GET /current
  - ``mqtt``         – publish "Artist - Title" to a broker topic
  - ``geekmagic``    – upload the album cover to a GeekMagic display
"""

import logging

from ..lib.config import ConfigError, Settings
from .base import Hook
from .file_dump import FileDumpHook
from .geekmagic import GeekMagicHook
from .http_server import HttpServerHook
from .mqtt import MqttHook

logger = logging.getLogger(__name__)

HOOK_TYPES: dict[str, type[Hook]] = {
    cls.type: cls
    for cls in (FileDumpHook, HttpServerHook, MqttHook, GeekMagicHook)
}

__all__ = [
    "Hook",
    "FileDumpHook",
    "GeekMagicHook",
    "HttpServerHook",
    "MqttHook",
    "HOOK_TYPES",
    "create_hook",
    "create_hooks",
]


def create_hook(entry: dict, settings: Settings, registry=None) -> Hook:
    """Build one hook from a config entry ``{"type": ..., **options}``."""
    registry = HOOK_TYPES if registry is None else registry
    options = dict(entry)
    hook_type = str(options.pop("type", "")).lower()
    cls = registry.get(hook_type)
    if cls is None:
        raise ConfigError(f"Unknown hook type '{hook_type}' (known: {', '.join(sorted(registry))})")
    return cls(options, settings)


def create_hooks(entries, settings: Settings, registry=None) -> list[Hook]:
    """Build every configured hook, in order.

    A ConfigError (unknown type, missing mandatory option) propagates: the
    hook list is fixed for the process lifetime and cannot start half-built.
    Any other constructor failure drops only that hook.
    """
    hooks = []
    for entry in entries:
        try:
            hook = create_hook(entry, settings, registry)
        except ConfigError:
            raise
        except Exception:
            logger.exception("Could not construct hook %r: skipping it", entry.get("type"))
            continue
        logger.info("Hook enabled: %s", hook.type)
        hooks.append(hook)
    return hooks
