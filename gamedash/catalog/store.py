"""
In-memory catalogue of trending games.

``CatalogAggregator`` owns the catalog, the pagination cursor, the
favourites set and the active search filter. Every mutation produces a
fresh, immutable ``DashboardSnapshot`` that is pushed to subscribers;
the only way back in is through the three commands
(``toggle_favorite``, ``set_search``, ``load_next_page``).

The grouping, filtering and ranking rules are plain functions at module
level so they can be reused and tested on their own.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..config import Settings
from ..errors import UpstreamError
from ..models import Item, ItemId, UpstreamPage
from ..storage import FavoritesStore
from .rawg_service import build_source
from .schemas import (
    CatalogStats,
    DashboardSnapshot,
    GenreRow,
    ItemCard,
    PaginationStatus,
)


logger = logging.getLogger(__name__)

PAGE_SIZE = 40
TRENDING_ROW_SIZE = 40
TOP_GENRE_ROWS = 5
LOAD_ERROR_MESSAGE = "Failed to load games. Please check your API key or use the proxy server."

Listener = Callable[[DashboardSnapshot], None]


def merge_items(existing: Sequence[Item], incoming: Iterable[Item]) -> List[Item]:
    """Append ``incoming`` to ``existing`` skipping ids already present.

    The first occurrence of an id wins, including duplicates inside
    ``incoming`` itself.
    """
    merged = list(existing)
    seen = {item.id for item in merged}
    for item in incoming:
        if item.id in seen:
            continue
        seen.add(item.id)
        merged.append(item)
    return merged


def filter_items(items: Sequence[Item], text: str) -> List[Item]:
    """Case-insensitive substring match on the name or any genre name."""
    if not text:
        return list(items)
    needle = text.lower()

    def _matches(item: Item) -> bool:
        if needle in item.name.lower():
            return True
        return any(needle in name.lower() for name in item.genre_names())

    return [item for item in items if _matches(item)]


def group_by_genre(items: Sequence[Item]) -> Dict[str, List[Item]]:
    groups: Dict[str, List[Item]] = {}
    for item in items:
        for name in item.genre_names():
            members = groups.setdefault(name, [])
            if not any(m.id == item.id for m in members):
                members.append(item)
    return groups


def top_genres(groups: Dict[str, List[Item]], k: int = TOP_GENRE_ROWS) -> List[str]:
    # sorted() is stable with reverse=True, so ties keep first-seen order.
    ranked = sorted(groups, key=lambda name: len(groups[name]), reverse=True)
    return ranked[:max(0, k)]


def compute_winner(items: Iterable[Item]) -> Optional[Item]:
    """Return the most popular item.

    Highest ``ratings_count`` wins, then highest ``rating``; missing values
    count as 0. On a full tie the earliest item is kept.
    """
    best: Optional[Item] = None
    for item in items:
        if best is None:
            best = item
            continue
        score = (item.ratings_count or 0, item.rating or 0.0)
        best_score = (best.ratings_count or 0, best.rating or 0.0)
        if score > best_score:
            best = item
    return best


def genre_counts(items: Sequence[Item]) -> Dict[str, int]:
    groups = group_by_genre(items)
    return {name: len(groups[name]) for name in top_genres(groups, k=len(groups))}


def rating_buckets(items: Sequence[Item]) -> Dict[str, int]:
    """Histogram of ratings floored to whole stars (0-5)."""
    buckets = {str(star): 0 for star in range(6)}
    buckets["unrated"] = 0
    for item in items:
        if not item.rating:
            buckets["unrated"] += 1
        else:
            buckets[str(min(5, max(0, int(item.rating))))] += 1
    return buckets


def display_rating(item: Item) -> str:
    return f"{item.rating:.2f}" if item.rating else "N/A"


def genre_label(item: Item) -> str:
    names = item.genre_names()
    return " | ".join(names[:2]) if names else "Game"


class CatalogAggregator:
    """Fetch-and-merge loop plus the derived dashboard views.

    Only one page load runs at a time. A second load requested while one
    is in flight is ignored, not queued. State changes happen under a
    lock; the network call itself does not hold it.
    """

    def __init__(self, source, favorites_store: FavoritesStore, page_size: int = PAGE_SIZE) -> None:
        self.source = source
        self.favorites_store = favorites_store
        self.page_size = page_size

        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

        self._items: List[Item] = []
        self._current_page = 1
        self._has_more = True
        self._loading = False
        self._initial_loading = False
        self._error: Optional[str] = None
        self._search = ""
        self._winner_id: Optional[ItemId] = None
        self._favorites: List[ItemId] = favorites_store.load()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CatalogAggregator":
        return cls(
            build_source(settings),
            FavoritesStore(settings.favorites_file, settings.favorites_key),
            page_size=settings.page_size,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[Item]:
        with self._lock:
            return list(self._items)

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def search(self) -> str:
        return self._search

    @property
    def favorites(self) -> List[ItemId]:
        with self._lock:
            return list(self._favorites)

    @property
    def winner_id(self) -> Optional[ItemId]:
        return self._winner_id

    # ------------------------------------------------------------------
    # Page loading
    # ------------------------------------------------------------------

    def _apply_first_page(self, page: UpstreamPage) -> None:
        self._items = merge_items([], page.results)
        self._current_page = 1
        self._has_more = page.has_next and bool(page.results)
        self._recompute_winner()

    def _apply_next_page(self, page_number: int, page: UpstreamPage) -> None:
        if not page.results:
            self._has_more = False
            return
        self._items = merge_items(self._items, page.results)
        self._current_page = page_number
        self._has_more = page.has_next
        self._recompute_winner()

    def _recompute_winner(self) -> None:
        winner = compute_winner(self._items)
        self._winner_id = winner.id if winner is not None else None

    def load_first_page(self) -> bool:
        """Fetch page 1 and replace the catalog.

        Returns ``False`` without fetching when a load is already running.
        A failure sets the user-facing error and leaves the catalog empty.
        """
        with self._lock:
            if self._loading:
                return False
            self._loading = True
            self._initial_loading = True
        self._notify()

        page: Optional[UpstreamPage] = None
        try:
            page = self.source.fetch_page(1, self.page_size)
        except UpstreamError as exc:
            logger.error("Error fetching games: %s", exc)
        finally:
            with self._lock:
                if page is not None:
                    self._apply_first_page(page)
                    self._error = None
                else:
                    self._items = []
                    self._winner_id = None
                    self._error = LOAD_ERROR_MESSAGE
                self._loading = False
                self._initial_loading = False
        self._notify()
        return True

    def load_next_page(self) -> bool:
        """Fetch the page after the cursor and append its new items.

        Does nothing (returns ``False``) while a load is in flight, when
        the upstream has no more pages or while a search filter is active.
        On failure the cursor is left where it was, so asking again
        refetches the same page.
        """
        with self._lock:
            if self._loading or not self._has_more or self._search:
                return False
            self._loading = True
            next_page = self._current_page + 1
        self._notify()

        page: Optional[UpstreamPage] = None
        try:
            page = self.source.fetch_page(next_page, self.page_size)
        except UpstreamError as exc:
            logger.warning("Error loading more games (page %s): %s", next_page, exc)
        finally:
            with self._lock:
                if page is not None:
                    self._apply_next_page(next_page, page)
                self._loading = False
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle_favorite(self, item_id: ItemId) -> bool:
        """Flip ``item_id`` in the favourites set and persist it.

        Returns ``True`` when the id is a favourite afterwards.
        """
        with self._lock:
            if item_id in self._favorites:
                self._favorites = [i for i in self._favorites if i != item_id]
                added = False
            else:
                self._favorites = self._favorites + [item_id]
                added = True
            ids = list(self._favorites)
        self.favorites_store.save(ids)
        self._notify()
        return added

    def set_search(self, text: str) -> None:
        with self._lock:
            self._search = text or ""
        self._notify()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def filtered_view(self) -> List[Item]:
        with self._lock:
            return filter_items(self._items, self._search)

    def favorites_view(self) -> List[Item]:
        with self._lock:
            wanted = set(self._favorites)
            return [item for item in self._items if item.id in wanted]

    def grouped_by_genre(self) -> Dict[str, List[Item]]:
        with self._lock:
            if self._search:
                return {}
            return group_by_genre(self._items)

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            items = list(self._items)
            search = self._search
            favorites = set(self._favorites)
            winner_id = self._winner_id
            pagination = PaginationStatus(
                current_page=self._current_page,
                has_more=self._has_more,
                loading=self._loading,
            )
            initial_loading = self._initial_loading
            error = self._error

        def _card(item: Item) -> ItemCard:
            return ItemCard(
                item=item,
                display_rating=display_rating(item),
                genre_label=genre_label(item),
                is_favorite=item.id in favorites,
                is_winner=winner_id is not None and item.id == winner_id,
            )

        genre_rows: List[GenreRow] = []
        if not search:
            groups = group_by_genre(items)
            genre_rows = [
                GenreRow(name=name, items=[_card(i) for i in groups[name]])
                for name in top_genres(groups)
            ]

        return DashboardSnapshot(
            search=search,
            items=[_card(i) for i in filter_items(items, search)],
            trending=[_card(i) for i in items[:TRENDING_ROW_SIZE]],
            favorites=[_card(i) for i in items if i.id in favorites],
            genre_rows=genre_rows,
            winner_id=winner_id,
            stats=CatalogStats(genre_counts=genre_counts(items), rating_buckets=rating_buckets(items)),
            pagination=pagination,
            loading=initial_loading,
            error=error,
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
