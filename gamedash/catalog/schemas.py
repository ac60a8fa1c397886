"""
Pydantic schema definitions for the dashboard views.

``DashboardSnapshot`` bundles everything a front-end needs to draw the
page in one immutable object: the trending row, the favourites row, the
top genre rows, the current search results, the winner and the
pagination status. ``ItemCard`` wraps a game with the display fields a
card shows so clients do not have to recompute them.
"""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..models import Item, ItemId


class ItemCard(BaseModel):
    """A single game card.

    ``display_rating`` is the rating with two decimals, or ``"N/A"``
    when the game is unrated. ``genre_label`` joins the first two genre
    names with ``" | "`` and falls back to ``"Game"``.
    """

    model_config = ConfigDict(frozen=True)

    item: Item
    display_rating: str
    genre_label: str
    is_favorite: bool = False
    is_winner: bool = False


class GenreRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    items: Tuple[ItemCard, ...] = ()


class CatalogStats(BaseModel):
    """Chart data: items per genre and a histogram of ratings."""

    model_config = ConfigDict(frozen=True)

    genre_counts: Dict[str, int] = Field(default_factory=dict)
    rating_buckets: Dict[str, int] = Field(default_factory=dict)


class PaginationStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_page: int = 1
    has_more: bool = True
    loading: bool = False


class DashboardSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    items: Tuple[ItemCard, ...] = ()
    trending: Tuple[ItemCard, ...] = ()
    favorites: Tuple[ItemCard, ...] = ()
    genre_rows: Tuple[GenreRow, ...] = ()
    winner_id: Optional[ItemId] = None
    stats: CatalogStats = Field(default_factory=CatalogStats)
    pagination: PaginationStatus = Field(default_factory=PaginationStatus)
    # True until the first page has been fetched (or failed).
    loading: bool = False
    error: Optional[str] = None


class SearchRequest(BaseModel):
    text: str = ""
