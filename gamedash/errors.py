"""
Exception hierarchy for gamedash.

Service-level errors derive from ``GamedashError`` so callers can catch
broadly or specifically depending on context.
"""

from typing import Optional


class GamedashError(Exception):
    """Base class for all gamedash exceptions."""


class ConfigError(GamedashError):
    """Raised when an environment setting cannot be parsed."""


class UpstreamError(GamedashError):
    """
    Raised when a page of games cannot be fetched or decoded.

    Attributes
    ----------
    url    : The URL that was requested (with the API key redacted).
    status : HTTP status returned by the upstream, or ``None`` when the
             request never got a response.
    """

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        detail = f"status {status}" if status is not None else (reason or "unreachable")
        super().__init__(f"Upstream request to {url} failed: {detail}")
