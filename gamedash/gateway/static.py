"""Static asset serving for the dashboard page."""

from __future__ import annotations

import errno
import logging
from pathlib import Path

from fastapi import Response


logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
}
DEFAULT_MIME_TYPE = "application/octet-stream"
NOT_FOUND_BODY = "<h1>404 - File Not Found</h1>"


def content_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_path(root: Path, request_path: str, index_document: str = "index.html") -> Path:
    """Map a URL path onto a file below ``root``.

    ``/`` maps to ``index_document``. Raises ``FileNotFoundError`` when the
    path would leave the document root.
    """
    relative = request_path.split("?", 1)[0].lstrip("/")
    if not relative:
        relative = index_document
    base = root.resolve()
    target = (base / relative).resolve()
    if target != base and base not in target.parents:
        raise FileNotFoundError(errno.ENOENT, "outside document root", relative)
    return target


def serve_static(root: Path, request_path: str, index_document: str = "index.html") -> Response:
    try:
        target = resolve_path(root, request_path, index_document)
        content = target.read_bytes()
    except FileNotFoundError:
        return Response(content=NOT_FOUND_BODY, status_code=404, media_type="text/html")
    except OSError as exc:
        code = errno.errorcode.get(exc.errno, "UNKNOWN") if exc.errno else "UNKNOWN"
        logger.error("Could not read %s: %s", request_path, exc)
        return Response(content=f"Server Error: {code}", status_code=500)
    return Response(content=content, media_type=content_type_for(target))
