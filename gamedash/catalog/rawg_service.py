"""
RAWG integration for the catalogue.

This module owns every outbound request gamedash makes. It exposes two
page sources with the same ``fetch_page(page, page_size)`` interface:

* ``RawgSource`` talks to the RAWG games endpoint directly, sending the
  API key from configuration.

* ``GatewaySource`` goes through a running relay gateway's ``/trending``
  route so the key never leaves the server. The relay forwards one fixed
  query, so this source always reports that no further page exists.

Only the Python standard library is used for HTTP requests. Failures
raise ``UpstreamError``; nothing is retried.
"""

from __future__ import annotations

import http.client
import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional, Tuple

from ..config import Settings
from ..errors import UpstreamError
from ..models import Genre, Item, UpstreamPage


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


_HEADERS = {
    "User-Agent": "gamedash/1.0 (+https://rawg.io/apidocs)",
    "Accept": "application/json",
}


def _redact(url: str) -> str:
    """Hide the ``key`` query parameter so it never reaches the logs."""
    return re.sub(r"([?&]key=)[^&]*", r"\1***", url)


def http_get(url: str, timeout: float) -> Tuple[int, bytes]:
    """Perform an HTTP GET and return ``(status, body)``.

    Non-success responses are returned rather than raised so callers can
    relay them. Transport failures (DNS, refused connection, timeout, a
    body cut short) and malformed URLs raise ``UpstreamError`` with no
    status.
    """
    try:
        request = urllib.request.Request(url, headers=_HEADERS)
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.status, response.read()
    except urllib.error.HTTPError as exc:
        try:
            body = exc.read() if exc.fp is not None else b""
        except (http.client.HTTPException, OSError):
            body = b""
        return exc.code, body
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        reason = _redact(str(getattr(exc, "reason", None) or repr(exc)))
        logger.error("Error fetching %s: %s", _redact(url), reason)
        raise UpstreamError(_redact(url), reason=reason) from exc


def _get_json(url: str, timeout: float) -> Dict[str, Any]:
    status, body = http_get(url, timeout)
    if not 200 <= status < 300:
        logger.warning("Request to %s returned status %s", _redact(url), status)
        raise UpstreamError(_redact(url), status=status)
    try:
        data = json.loads(body.decode("utf-8", errors="ignore"))
    except ValueError as exc:
        raise UpstreamError(_redact(url), status=status, reason="invalid JSON") from exc
    if not isinstance(data, dict):
        raise UpstreamError(_redact(url), status=status, reason="unexpected payload")
    return data


def _to_item(doc: Dict[str, Any]) -> Optional[Item]:
    """Map one RAWG result to an ``Item``; ``None`` when it has no id."""
    game_id = doc.get("id")
    if game_id is None or isinstance(game_id, bool) or not isinstance(game_id, (int, str)):
        return None
    rating = doc.get("rating")
    rating = float(rating) if isinstance(rating, (int, float)) and not isinstance(rating, bool) else None
    ratings_count = doc.get("ratings_count")
    ratings_count = ratings_count if isinstance(ratings_count, int) and not isinstance(ratings_count, bool) else 0
    genres: List[Genre] = []
    for g in doc.get("genres") or []:
        if isinstance(g, dict) and isinstance(g.get("name"), str):
            genres.append(Genre(name=g["name"]))
    cover = doc.get("background_image")
    return Item(
        id=game_id,
        name=str(doc.get("name") or ""),
        rating=rating,
        ratings_count=ratings_count,
        genres=genres,
        cover_image_url=cover if isinstance(cover, str) and cover else None,
    )


def parse_page(data: Dict[str, Any]) -> UpstreamPage:
    """Convert a decoded ``{results, next}`` payload into an ``UpstreamPage``."""
    items: List[Item] = []
    for doc in data.get("results") or []:
        if not isinstance(doc, dict):
            continue
        item = _to_item(doc)
        if item is not None:
            items.append(item)
    return UpstreamPage(results=items, has_next=data.get("next") is not None)


class RawgSource:
    """Fetch pages straight from the RAWG games endpoint."""

    def __init__(self, base_url: str, api_key: Optional[str], timeout: float = 10.0) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    def page_url(self, page: int, page_size: int) -> str:
        params: Dict[str, Any] = {}
        if self.api_key:
            params["key"] = self.api_key
        params["page"] = page
        params["page_size"] = page_size
        return f"{self.base_url}?{urllib.parse.urlencode(params)}"

    def fetch_page(self, page: int, page_size: int) -> UpstreamPage:
        return parse_page(_get_json(self.page_url(page, page_size), self.timeout))


class GatewaySource:
    """Fetch the relay gateway's fixed ``/trending`` page."""

    def __init__(self, gateway_url: str, timeout: float = 10.0) -> None:
        self.url = gateway_url.rstrip("/") + "/trending"
        self.timeout = timeout

    def fetch_page(self, page: int, page_size: int) -> UpstreamPage:
        page_data = parse_page(_get_json(self.url, self.timeout))
        return UpstreamPage(results=page_data.results, has_next=False)


def build_source(settings: Settings):
    if settings.gateway_url:
        logger.info("Fetching games through relay gateway %s", settings.gateway_url)
        return GatewaySource(settings.gateway_url, timeout=settings.timeout)
    return RawgSource(settings.upstream_url, settings.api_key, timeout=settings.timeout)
