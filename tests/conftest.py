"""Shared fixtures and fakes for the gamedash tests."""

from __future__ import annotations

import http.client
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

from gamedash.catalog.store import CatalogAggregator
from gamedash.errors import UpstreamError
from gamedash.models import Genre, Item, UpstreamPage
from gamedash.storage import FavoritesStore


def make_item(
    item_id: Any,
    name: str = "",
    rating: Optional[float] = None,
    ratings_count: int = 0,
    genres: Optional[List[str]] = None,
) -> Item:
    return Item(
        id=item_id,
        name=name or f"Game {item_id}",
        rating=rating,
        ratings_count=ratings_count,
        genres=[Genre(name=g) for g in (genres or [])],
    )


class FakeSource:
    """Page source that replays queued pages (or errors) and records calls."""

    def __init__(self, pages: Optional[List[Union[UpstreamPage, Exception]]] = None) -> None:
        self.pages: List[Union[UpstreamPage, Exception]] = list(pages or [])
        self.calls: List[int] = []

    def queue(self, page: Union[UpstreamPage, Exception]) -> None:
        self.pages.append(page)

    def fetch_page(self, page: int, page_size: int) -> UpstreamPage:
        self.calls.append(page)
        result = self.pages.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200) -> None:
        self._body = body
        self.status = status

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> bool:
        return False


def rawg_payload(results: List[Dict[str, Any]], next_url: Optional[str] = None) -> bytes:
    return json.dumps({"count": len(results), "next": next_url, "results": results}).encode("utf-8")


def upstream_error() -> UpstreamError:
    return UpstreamError("https://api.rawg.io/api/games?key=***", status=502)


@pytest.fixture
def favorites_store(tmp_path: Path) -> FavoritesStore:
    return FavoritesStore(tmp_path / "favorites.json")


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def aggregator(source: FakeSource, favorites_store: FavoritesStore) -> CatalogAggregator:
    return CatalogAggregator(source, favorites_store)


class UpstreamRecorder(list):
    """URLs passed to ``urlopen``; ``responses`` is the reply queue."""

    def __init__(self) -> None:
        super().__init__()
        self.responses: List[object] = []


@pytest.fixture
def upstream(monkeypatch: pytest.MonkeyPatch) -> UpstreamRecorder:
    recorder = UpstreamRecorder()

    def fake_urlopen(request, timeout=None):
        recorder.append(request.full_url)
        result = recorder.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    return recorder


class TruncatedResponse(FakeResponse):
    """Response whose connection drops part-way through the body."""

    def __init__(self, partial: bytes = b'{"resu', expected: int = 500) -> None:
        super().__init__(partial)
        self.expected = expected

    def read(self) -> bytes:
        raise http.client.IncompleteRead(self._body, self.expected)
