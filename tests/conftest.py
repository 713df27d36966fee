import logging

import pytest

from lastwatch.lib import config
from lastwatch.lib.config import Settings


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Every test starts without a cached or discoverable config.json."""
    monkeypatch.setattr(config, "_config", None)
    monkeypatch.setattr(config, "_SEARCH_PATHS", [str(tmp_path / "missing.json")])
    monkeypatch.delenv("LASTWATCH_CONFIG", raising=False)
    monkeypatch.delenv("NOTIFY_SOCKET", raising=False)
    yield


@pytest.fixture(autouse=True)
def _restore_log_level():
    # main() sets the root level from settings
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def settings():
    return Settings(api_key="test-key", api_url="http://lastfm.test/2.0/")


@pytest.fixture
def settings_inactive():
    return Settings(api_key="test-key", api_url="http://lastfm.test/2.0/", show_inactive=True)
