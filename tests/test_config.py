from __future__ import annotations

import json

from nowplaying.lib import config
from nowplaying.lib.config import cfg, reload_config


def _write(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return str(path)


def test_override_file_wins(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("NOWPLAYING_CONFIG", _write(tmp_path, {
        "server": {"port": 9999, "push": False},
        "poll": {"interval": 2.5},
    }))

    assert cfg("server", "port") == 9999
    assert cfg("server", "push") is False
    assert cfg("poll", "interval") == 2.5
    assert cfg("webhelper", "timeout", default=10) == 10
    assert cfg("server") == {"port": 9999, "push": False}


def test_repo_default_is_fallback() -> None:
    assert cfg("server", "port") == 8080
    assert cfg("webhelper", "port") == 4370
    assert cfg("webhelper", "insecure_tls") is True


def test_invalid_json_is_skipped(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("NOWPLAYING_CONFIG", _write(tmp_path, "{not json"))
    assert cfg("server", "port") == 8080


def test_non_object_is_skipped(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("NOWPLAYING_CONFIG", _write(tmp_path, "[1, 2]"))
    assert cfg("server", "port") == 8080


def test_non_dict_section_returns_default(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("NOWPLAYING_CONFIG", _write(tmp_path, {"server": 5}))
    assert cfg("server", "port", default=1234) == 1234
    assert cfg("server") == 5


def test_cached_until_reload(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, {"server": {"port": 1}})
    monkeypatch.setenv("NOWPLAYING_CONFIG", path)
    assert cfg("server", "port") == 1

    _write(tmp_path, {"server": {"port": 2}})
    assert cfg("server", "port") == 1
    reload_config()
    assert cfg("server", "port") == 2


def test_no_file_found_gives_empty_config(monkeypatch) -> None:
    monkeypatch.setattr(config, "_SEARCH_PATHS", [])
    assert config.load_config() == {}
    assert cfg("server", "port", default=8080) == 8080
