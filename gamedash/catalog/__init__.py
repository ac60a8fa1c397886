"""
Catalog package for the trending games dashboard.

This package keeps the in-memory collection of games fetched from RAWG,
the pagination cursor and the favourites list, and derives the views a
dashboard page renders: the trending row, the favourites row, the top
genre rows, search results and the most popular game. The routes in
``router`` expose those views as JSON.
"""

from .router import router as dashboard_router  # noqa: F401
from .store import CatalogAggregator  # noqa: F401
