"""Exceptions raised by the webhelper client."""


class WebhelperError(Exception):
    """Base class for webhelper failures."""


class AuthError(WebhelperError):
    """Token fetch or parse failed while establishing a session.

    Fatal: without a session no API call can succeed.
    """


class TransportError(WebhelperError):
    """An authenticated call failed (network, non-2xx, undecodable body).

    Recoverable: the poller logs it and keeps the previous snapshot.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
