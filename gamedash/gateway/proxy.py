"""
Pass-through proxy for the trending games query.

The browser cannot call RAWG directly without exposing the API key and
running into cross-origin restrictions, so the gateway makes one fixed
request on its behalf and relays the answer untouched.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Optional

from fastapi import Response

from ..catalog.rawg_service import http_get
from ..config import Settings
from ..errors import UpstreamError


logger = logging.getLogger(__name__)

TRENDING_ORDERING = "-rating"
TRENDING_PAGE_SIZE = 20
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PROXY_ERROR_BODY = json.dumps({"error": "Failed to fetch from RAWG API"})


def trending_url(upstream_url: str, api_key: Optional[str]) -> str:
    params = {}
    if api_key:
        params["key"] = api_key
    params["ordering"] = TRENDING_ORDERING
    params["page_size"] = TRENDING_PAGE_SIZE
    return f"{upstream_url}?{urllib.parse.urlencode(params)}"


def proxy_trending(settings: Settings) -> Response:
    """Forward the fixed trending query and relay status and body as-is.

    Every call goes upstream; responses are never cached or shared
    between requests. A transport failure becomes a fixed JSON 500.
    """
    url = trending_url(settings.upstream_url, settings.api_key)
    try:
        status, body = http_get(url, settings.timeout)
    except UpstreamError as exc:
        logger.error("Trending proxy failed: %s", exc)
        return Response(
            content=PROXY_ERROR_BODY,
            status_code=500,
            media_type="application/json",
            headers=CORS_HEADERS,
        )
    return Response(
        content=body,
        status_code=status,
        media_type="application/json",
        headers=CORS_HEADERS,
    )
