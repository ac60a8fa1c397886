"""
Route definitions for the relay gateway.

- GET /trending  : proxy the fixed RAWG trending query
- *   /{path}    : static files below the document root

The static catch-all accepts every method so that anything which is not
an exact ``GET /trending`` falls through to file handling. Include this
router after every other router.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from .proxy import proxy_trending
from .static import serve_static


router = APIRouter(tags=["gateway"])

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.get("/trending", include_in_schema=False)
def trending(request: Request) -> Response:
    return proxy_trending(request.app.state.settings)


@router.api_route("/{request_path:path}", methods=_ALL_METHODS, include_in_schema=False)
def static_files(request_path: str, request: Request) -> Response:
    settings = request.app.state.settings
    return serve_static(settings.static_root, request_path, settings.index_document)
