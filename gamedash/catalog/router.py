"""
Route definitions for the dashboard API.

Endpoints under /api/dashboard:
- GET  /                     : current dashboard snapshot
- GET  /genres               : genre name -> games (empty while searching)
- POST /search               : set the search filter
- POST /favorites/{item_id}  : toggle a favourite
- POST /load-more            : fetch the next page of games
"""

from __future__ import annotations

import re
from typing import Dict, List

from fastapi import APIRouter, Body, Depends, Request

from ..models import Item, ItemId
from .schemas import DashboardSnapshot, SearchRequest
from .store import CatalogAggregator


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def get_aggregator(request: Request) -> CatalogAggregator:
    return request.app.state.aggregator


def _coerce_id(raw: str) -> ItemId:
    # RAWG ids are integers; path parameters always arrive as text.
    text = raw.strip()
    if re.fullmatch(r"-?[0-9]+", text):
        return int(text)
    return text


@router.get("", response_model=DashboardSnapshot)
def get_dashboard(aggregator: CatalogAggregator = Depends(get_aggregator)) -> DashboardSnapshot:
    return aggregator.snapshot()


@router.get("/genres", response_model=Dict[str, List[Item]])
def get_genres(aggregator: CatalogAggregator = Depends(get_aggregator)) -> Dict[str, List[Item]]:
    return aggregator.grouped_by_genre()


@router.post("/search", response_model=DashboardSnapshot)
def set_search(
    req: SearchRequest = Body(...),
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> DashboardSnapshot:
    aggregator.set_search(req.text)
    return aggregator.snapshot()


@router.post("/favorites/{item_id}", response_model=DashboardSnapshot)
def toggle_favorite(
    item_id: str,
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> DashboardSnapshot:
    aggregator.toggle_favorite(_coerce_id(item_id))
    return aggregator.snapshot()


@router.post("/load-more", response_model=DashboardSnapshot)
def load_more(aggregator: CatalogAggregator = Depends(get_aggregator)) -> DashboardSnapshot:
    aggregator.load_next_page()
    return aggregator.snapshot()
