from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class MediaKind(str, Enum):
    MOVIE = "movie"
    TV = "tv"
    BOOK = "book"

    @property
    def label(self) -> str:
        return {"movie": "Movie", "tv": "TV Show", "book": "Book"}[self.value]

    @property
    def noun(self) -> str:
        # Used in "No ... results found."
        return {"movie": "movie", "tv": "TV show", "book": "book"}[self.value]

    @property
    def manager(self) -> str:
        return {"movie": "Radarr", "tv": "Sonarr", "book": "Readarr"}[self.value]

    @property
    def resource(self) -> str:
        return {"movie": "movie", "tv": "series", "book": "book"}[self.value]


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class SearchResult:
    """One candidate returned by a manager lookup.

    Only the fields the bot displays or forwards are lifted out. ``year`` is
    kept exactly as the manager reported it, including 0 for unknown.
    """

    title: str
    year: Optional[int] = None
    overview: Optional[str] = None
    images: Tuple[Dict[str, Any], ...] = ()
    title_slug: Optional[str] = None
    tmdb_id: Optional[int] = None
    tvdb_id: Optional[int] = None
    seasons: Optional[Tuple[Dict[str, Any], ...]] = None

    @classmethod
    def from_lookup(cls, data: Dict[str, Any]) -> "SearchResult":
        images = data.get("images")
        seasons = data.get("seasons")
        return cls(
            title=str(data.get("title") or "Unknown"),
            year=_optional_int(data.get("year")),
            overview=data.get("overview") or None,
            images=tuple(img for img in images if isinstance(img, dict)) if isinstance(images, list) else (),
            title_slug=data.get("titleSlug") or None,
            tmdb_id=_optional_int(data.get("tmdbId")),
            tvdb_id=_optional_int(data.get("tvdbId")),
            seasons=tuple(s for s in seasons if isinstance(s, dict)) if isinstance(seasons, list) else None,
        )

    def image_list(self) -> List[Dict[str, Any]]:
        return [dict(img) for img in self.images]
