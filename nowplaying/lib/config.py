"""
Shared configuration loader for the now-playing relay.

Loads a single JSON config file.  Search order:
  1. $NOWPLAYING_CONFIG              (explicit override)
  2. /etc/nowplaying/config.json     (system install)
  3. config.json                     (CWD — handy for local dev)
  4. ../../config/default.json       (repo fallback)

Keys are read as (section, key) pairs, e.g. cfg("webhelper", "timeout").
Defaults live next to the code that uses them, not here.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

_config: dict | None = None

_SEARCH_PATHS = [
    "/etc/nowplaying/config.json",
    "config.json",
    os.path.join(os.path.dirname(__file__), "..", "..", "config", "default.json"),
]

_KNOWN_SECTIONS = ("server", "poll", "webhelper", "logging")


def _search_paths() -> list[str]:
    override = os.environ.get("NOWPLAYING_CONFIG")
    return ([override] if override else []) + _SEARCH_PATHS


def _validate(config: dict, path: str) -> None:
    """Warn about unknown sections or suspicious values."""
    for section in config:
        if section not in _KNOWN_SECTIONS:
            logger.warning("Config %s: unknown section '%s' ignored", path, section)
    webhelper = config.get("webhelper") or {}
    if webhelper.get("insecure_tls") is False:
        logger.warning("Config %s: webhelper.insecure_tls is false — the local "
                       "certificate will not validate against a public CA", path)
    interval = (config.get("poll") or {}).get("interval")
    if interval is not None and (not isinstance(interval, (int, float)) or interval <= 0):
        logger.warning("Config %s: poll.interval must be a positive number, got %r",
                       path, interval)


def load_config() -> dict:
    """Load config from the first JSON file found. Cached after first call."""
    global _config
    if _config is not None:
        return _config

    for path in _search_paths():
        try:
            with open(path) as f:
                loaded = json.load(f)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            continue
        if not isinstance(loaded, dict):
            logger.error("Config %s: top level must be an object", path)
            continue
        _config = loaded
        logger.info("Config loaded from %s", path)
        _validate(_config, path)
        return _config

    logger.warning("No config.json found — using built-in defaults")
    _config = {}
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Value of *section* (or *section*.*key*), else *default*.

    A section that is not an object has no keys.
    """
    val = load_config().get(section)
    if key is not None:
        val = val.get(key) if isinstance(val, dict) else None
    return default if val is None else val


def reload_config() -> dict:
    """Drop the cached config and read it again."""
    global _config
    _config = None
    return load_config()
