"""
Now-playing relay for the Spotify desktop client.

Authenticates against the client's local webhelper API, long-polls its
status endpoint and serves the latest playback state as text, HTML or a
WebSocket push feed.
"""

__version__ = "0.1.0"
