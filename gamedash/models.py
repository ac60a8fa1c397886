# gamedash/models.py
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


ItemId = Union[int, str]


class Genre(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ItemId
    name: str = ""
    # None when the upstream has no rating; comparisons treat it as 0.
    rating: Optional[float] = None
    ratings_count: int = 0
    genres: Tuple[Genre, ...] = ()
    cover_image_url: Optional[str] = None

    def genre_names(self) -> List[str]:
        return [g.name for g in self.genres]


class UpstreamPage(BaseModel):
    results: List[Item] = Field(default_factory=list)
    has_next: bool = False
