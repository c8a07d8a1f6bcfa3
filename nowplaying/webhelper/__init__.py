"""
Webhelper — client for the Spotify desktop client's local HTTP API.

The API listens on port 4370 of any ``*.spotilocal.com`` subdomain (which
resolves to 127.0.0.1) and requires two tokens on every call:

  oauth  — fetched from the public http://open.spotify.com/token endpoint
  csrf   — fetched from the local /simplecsrf/token.json endpoint

  auth.py     — token handshake, SessionDescriptor
  client.py   — WebhelperClient (status long-poll, play/pause, version)
  models.py   — StatusSnapshot / VersionInfo decoding
  errors.py   — AuthError (fatal) and TransportError (recoverable)
"""

from .auth import Authenticator, SessionDescriptor
from .client import WebhelperClient
from .errors import AuthError, TransportError, WebhelperError
from .models import StatusSnapshot, Track, VersionInfo

__all__ = [
    "AuthError",
    "Authenticator",
    "SessionDescriptor",
    "StatusSnapshot",
    "Track",
    "TransportError",
    "VersionInfo",
    "WebhelperClient",
    "WebhelperError",
]
