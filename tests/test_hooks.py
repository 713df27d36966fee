import logging

import pytest

from lastwatch.hooks import (
    HOOK_TYPES,
    FileDumpHook,
    GeekMagicHook,
    HttpServerHook,
    MqttHook,
    create_hook,
    create_hooks,
)
from lastwatch.hooks.base import Hook
from lastwatch.lib.config import ConfigError


def test_registry_knows_every_hook() -> None:
    assert HOOK_TYPES == {
        "file_dump": FileDumpHook,
        "http_server": HttpServerHook,
        "mqtt": MqttHook,
        "geekmagic": GeekMagicHook,
    }


def test_hooks_are_built_in_configured_order(settings) -> None:
    hooks = create_hooks([
        {"type": "http_server", "port": 8080},
        {"type": "file_dump", "out_file": "np.txt"},
        {"type": "mqtt", "topic": "np"},
    ], settings)

    assert [type(h) for h in hooks] == [HttpServerHook, FileDumpHook, MqttHook]
    assert hooks[0].port == 8080
    assert hooks[1].out_file == "np.txt"
    assert all(h.settings is settings for h in hooks)


def test_options_do_not_include_type(settings) -> None:
    hook = create_hook({"type": "FILE_DUMP", "max_length": 20}, settings)

    assert hook.options == {"max_length": 20}
    assert hook.max_length == 20


def test_unknown_type_is_a_config_error(settings) -> None:
    with pytest.raises(ConfigError, match="Unknown hook type 'lcd'"):
        create_hooks([{"type": "lcd"}], settings)


@pytest.mark.parametrize("entry, missing", [
    ({"type": "geekmagic"}, "url"),
    ({"type": "mqtt"}, "topic"),
])
def test_missing_mandatory_option_is_fatal(settings, entry, missing) -> None:
    with pytest.raises(ConfigError, match=f"'{missing}' is required"):
        create_hooks([entry], settings)


@pytest.mark.parametrize("entry", [
    {"type": "file_dump", "max_length": 0},
    {"type": "http_server", "port": "eighty"},
    {"type": "mqtt", "topic": "np", "qos": 3},
    {"type": "mqtt", "topic": "np", "retain": "sometimes"},
])
def test_invalid_options_are_config_errors(settings, entry) -> None:
    with pytest.raises(ConfigError):
        create_hooks([entry], settings)


def test_unexpected_constructor_failure_drops_only_that_hook(settings, caplog) -> None:
    class Exploding(Hook):
        type = "exploding"

        def __init__(self, options, settings):
            raise RuntimeError("boom")

        async def on_track_change(self, track):
            pass

    registry = dict(HOOK_TYPES, exploding=Exploding)

    with caplog.at_level(logging.ERROR):
        hooks = create_hooks(
            [{"type": "exploding"}, {"type": "file_dump"}], settings, registry=registry)

    assert [type(h) for h in hooks] == [FileDumpHook]
    assert "Could not construct hook 'exploding'" in caplog.text
