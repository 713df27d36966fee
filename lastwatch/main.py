#!/usr/bin/env python3
# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
LastWatch (lastwatch)

Polls Last.fm for what a set of users is playing and notifies the
configured hooks whenever the current track changes.

Environment:
  LASTFM_API_KEY        : required
  LASTFM_API_URL        : default https://ws.audioscrobbler.com/2.0/
  REQUEST_INTERVAL_MS   : default 10000
  SHOW_INACTIVE_TRACKS  : true/false, default false
  LASTFM_USERNAME       : single user when config.json lists none
  LOG_LEVEL             : DEBUG / INFO / WARNING / ERROR
  CYCLE_TIMEOUT_S       : seconds a Last.fm query round may take, default 30
  LASTWATCH_CONFIG      : path to config.json

Exit status: 0 after --help or a clean shutdown, 1 on a configuration error.
"""

import argparse
import asyncio
import logging
import sys

from .dispatcher import HookDispatcher
from .hooks import create_hooks
from .lastfm import LastFmClient
from .lib.config import ConfigError, load_settings
from .poller import Poller

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("lastwatch")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ConfigError(f"Invalid command line arguments: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="lastwatch",
        description="Watch Last.fm now-playing and notify hooks on track change.",
    )
    parser.add_argument("--interval", metavar="MS",
                        help="Request interval in milliseconds (default: 10000)")
    parser.add_argument("--allow-inactive-tracks", action="store_true", default=None,
                        help="Include inactive tracks in the output")
    parser.add_argument("--config", metavar="PATH",
                        help="Path to config.json (default: search /etc/lastwatch, CWD)")
    parser.add_argument("--log-level", metavar="LEVEL",
                        help="Minimum log level (default: INFO)")
    return parser


async def _serve(settings, hooks) -> int:
    client = LastFmClient(settings.api_url, settings.api_key)
    poller = Poller(
        client,
        HookDispatcher(hooks),
        settings.users,
        settings.interval_ms,
        show_inactive=settings.show_inactive,
        cycle_timeout=settings.cycle_timeout_s,
    )
    return await poller.run()


def main(argv=None, environ=None) -> int:
    """Parse arguments and settings, build hooks, poll until signalled."""
    try:
        args = build_parser().parse_args(argv)
        settings = load_settings(
            environ,
            interval=args.interval,
            allow_inactive=args.allow_inactive_tracks,
            log_level=args.log_level,
            config_path=args.config,
        )
        logging.getLogger().setLevel(settings.log_level)
        hooks = create_hooks(settings.hooks, settings)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    logger.info("Environment created (%d users, %d hooks)", len(settings.users), len(hooks))
    return asyncio.run(_serve(settings, hooks))


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
