"""
Immutable records decoded from webhelper JSON responses.

The upstream schema is treated as append-only: unknown fields are ignored
and a missing (or wrongly typed) field decodes to its zero value instead
of raising.  ``context`` has no stable shape and is carried through
untouched.
"""

import math
from dataclasses import dataclass, field
from typing import Any


def _obj(data: Any, key: str) -> dict:
    val = data.get(key) if isinstance(data, dict) else None
    return val if isinstance(val, dict) else {}


def _str(data: dict, key: str) -> str:
    val = data.get(key)
    return val if isinstance(val, str) else ""


def _bool(data: dict, key: str) -> bool:
    val = data.get(key)
    return val if isinstance(val, bool) else False


def _int(data: dict, key: str) -> int:
    val = data.get(key)
    if isinstance(val, bool):
        return 0
    if isinstance(val, int):
        return val
    if isinstance(val, float) and math.isfinite(val):
        return int(val)
    return 0


def _float(data: dict, key: str) -> float:
    val = data.get(key)
    if isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)) and math.isfinite(val):
        return float(val)
    return 0.0


@dataclass(frozen=True)
class Resource:
    """A track, artist or album reference."""

    name: str = ""
    uri: str = ""
    og_url: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "Resource":
        return cls(
            name=_str(data, "name"),
            uri=_str(data, "uri"),
            og_url=_str(_obj(data, "location"), "og"),
        )


@dataclass(frozen=True)
class Track:
    length: int = 0
    track_type: str = ""
    track_resource: Resource = field(default_factory=Resource)
    artist_resource: Resource = field(default_factory=Resource)
    album_resource: Resource = field(default_factory=Resource)

    @classmethod
    def from_json(cls, data: dict) -> "Track":
        return cls(
            length=_int(data, "length"),
            track_type=_str(data, "track_type"),
            track_resource=Resource.from_json(_obj(data, "track_resource")),
            artist_resource=Resource.from_json(_obj(data, "artist_resource")),
            album_resource=Resource.from_json(_obj(data, "album_resource")),
        )

    @property
    def title(self) -> str:
        return self.track_resource.name

    @property
    def artist(self) -> str:
        return self.artist_resource.name

    @property
    def album(self) -> str:
        return self.album_resource.name

    @property
    def url(self) -> str:
        """Canonical open.spotify.com link for the track."""
        return self.track_resource.og_url


@dataclass(frozen=True)
class OpenGraphState:
    private_session: bool = False
    posting_disabled: bool = False

    @classmethod
    def from_json(cls, data: dict) -> "OpenGraphState":
        return cls(
            private_session=_bool(data, "private_session"),
            posting_disabled=_bool(data, "posting_disabled"),
        )


@dataclass(frozen=True)
class VersionInfo:
    version: int = 0
    client_version: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "VersionInfo":
        return cls(version=_int(data, "version"),
                   client_version=_str(data, "client_version"))


@dataclass(frozen=True)
class StatusSnapshot:
    """One complete capture of player state, as returned by /remote/status.json."""

    version: int = 0
    client_version: str = ""
    running: bool = False
    playing: bool = False
    shuffle: bool = False
    repeat: bool = False
    play_enabled: bool = False
    prev_enabled: bool = False
    next_enabled: bool = False
    online: bool = False
    playing_position: float = 0.0
    server_time: int = 0
    volume: float = 0.0
    context: Any = None
    open_graph_state: OpenGraphState = field(default_factory=OpenGraphState)
    track: Track = field(default_factory=Track)

    @classmethod
    def from_json(cls, data: dict) -> "StatusSnapshot":
        return cls(
            version=_int(data, "version"),
            client_version=_str(data, "client_version"),
            running=_bool(data, "running"),
            playing=_bool(data, "playing"),
            shuffle=_bool(data, "shuffle"),
            repeat=_bool(data, "repeat"),
            play_enabled=_bool(data, "play_enabled"),
            prev_enabled=_bool(data, "prev_enabled"),
            next_enabled=_bool(data, "next_enabled"),
            online=_bool(data, "online"),
            playing_position=_float(data, "playing_position"),
            server_time=_int(data, "server_time"),
            volume=_float(data, "volume"),
            context=data.get("context"),
            open_graph_state=OpenGraphState.from_json(_obj(data, "open_graph_state")),
            track=Track.from_json(_obj(data, "track")),
        )
