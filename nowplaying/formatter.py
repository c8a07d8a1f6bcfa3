"""
Formatter — snapshot → text / HTML / push fragment.

Pure functions.  No snapshot, or a snapshot with running == False,
renders as "" in every format.
"""

import html
import math
from dataclasses import dataclass
from typing import Any

from .webhelper.models import StatusSnapshot

REFRESH_SECONDS = 1


@dataclass(frozen=True)
class RenderedView:
    artist: str
    track: str
    album: str
    url: str
    duration: str
    position: str
    context: Any = None

    @property
    def summary(self) -> str:
        return f"[{self.position}/{self.duration}] {self.artist} - {self.track} ({self.album})"


def humanize(seconds: int) -> str:
    """Seconds → "MM:SS".  Minutes are not wrapped into hours (3661 → "61:01")."""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def _whole_seconds(value: float) -> int:
    return int(value) if math.isfinite(value) else 0


def render_view(snapshot: StatusSnapshot | None) -> RenderedView | None:
    if snapshot is None or not snapshot.running:
        return None
    track = snapshot.track
    return RenderedView(
        artist=track.artist,
        track=track.title,
        album=track.album,
        url=track.url,
        duration=humanize(track.length),
        # int() truncates toward zero: 125.9 s is still 02:05
        position=humanize(_whole_seconds(snapshot.playing_position)),
        context=snapshot.context,
    )


def render_text(snapshot: StatusSnapshot | None) -> str:
    view = render_view(snapshot)
    if view is None:
        return ""
    return f"{view.summary}\n{view.url}\n"


def _fragment(view: RenderedView) -> str:
    e = html.escape
    return (f'[{e(view.position)}/{e(view.duration)}] '
            f'<a href="{e(view.url)}">{e(view.artist)} - {e(view.track)}</a> '
            f'({e(view.album)})')


def render_fragment(snapshot: StatusSnapshot | None) -> str:
    view = render_view(snapshot)
    if view is None:
        return ""
    return _fragment(view)


_PUSH_SCRIPT = """  <script>
  const statusNode = document.querySelector("#status");
  const socket = new WebSocket((location.protocol === "https:" ? "wss://" : "ws://") + location.host + "/ws");
  socket.onmessage = function(event) {
    statusNode.innerHTML = event.data;
    document.title = statusNode.textContent;
  };
  </script>
"""


def render_html(snapshot: StatusSnapshot | None, push: bool = True) -> str:
    """Full page.  With *push* the page follows /ws; otherwise it reloads itself."""
    view = render_view(snapshot)
    if view is None:
        return ""
    refresh = "" if push else f'  <meta http-equiv="refresh" content="{REFRESH_SECONDS}">\n'
    script = _PUSH_SCRIPT if push else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="utf-8">\n'
        f"{refresh}"
        f"  <title>{html.escape(view.summary)}</title>\n"
        "</head>\n"
        "<body>\n"
        f'  <div id="status">{_fragment(view)}</div>\n'
        f"{script}"
        "</body>\n"
        "</html>\n"
    )
