"""
Relay gateway: static file serving plus a single proxied RAWG query.

The proxy injects the API key server side and adds a permissive
cross-origin header so a browser page can read the result.
"""

from .router import router as gateway_router  # noqa: F401
