# gamedash/storage.py
"""
Durable key-value storage for the favourites list.

The file is a small JSON object. The favourites live under a single key
(``gameFavorites`` by default) as an array of game ids in toggle order.
Other keys in the file are preserved on rewrite. All writes are
synchronised with a ``threading.Lock`` since FastAPI runs sync handlers
on a thread pool.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List

from .config import FAVORITES_KEY
from .models import ItemId


logger = logging.getLogger(__name__)


class FavoritesStore:
    def __init__(self, path: Path, key: str = FAVORITES_KEY) -> None:
        self.path = Path(path)
        self.key = key
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def load(self) -> List[ItemId]:
        """Return the stored favourite ids.

        A missing file or key yields an empty list. An unreadable or
        malformed file is logged and also yields an empty list.
        """
        try:
            data = self._read_all()
        except (OSError, ValueError) as exc:
            logger.warning("Could not read favourites from %s: %s", self.path, exc)
            return []
        ids = data.get(self.key)
        if not isinstance(ids, list):
            return []
        return [i for i in ids if isinstance(i, (int, str)) and not isinstance(i, bool)]

    def save(self, ids: List[ItemId]) -> None:
        """Rewrite the favourites key with ``ids``.

        Failures are logged rather than raised; the in-memory list stays
        authoritative for the rest of the session.
        """
        with self._lock:
            try:
                data = self._read_all()
            except (OSError, ValueError):
                data = {}
            data[self.key] = list(ids)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
            except OSError as exc:
                logger.error("Could not write favourites to %s: %s", self.path, exc)
