import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from .config import Config
from .models import MediaKind, SearchResult

logger = logging.getLogger(__name__)


class ArrError(Exception):
    """A manager call failed, either on the wire or with a non-2xx status."""

    def __init__(self, manager: str, status: Optional[int] = None, body: Any = None, message: Optional[str] = None):
        self.manager = manager
        self.status = status
        self.body = body
        if message is None:
            message = f"{manager} returned HTTP {status}" if status is not None else f"{manager} request failed"
        super().__init__(message)


def slugify(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower())


@dataclass
class PayloadDefaults:
    movie_quality_profile_id: int = 1
    movie_root_folder: str = "/movies"
    tv_quality_profile_id: int = 1
    tv_language_profile_id: int = 1
    tv_root_folder: str = "/tv"
    book_quality_profile_id: int = 1
    book_root_folder: str = "/books"

    @classmethod
    def from_config(cls, cfg: Config) -> "PayloadDefaults":
        return cls(
            movie_quality_profile_id=cfg.movie_quality_profile_id,
            movie_root_folder=cfg.movie_root_folder,
            tv_quality_profile_id=cfg.tv_quality_profile_id,
            tv_language_profile_id=cfg.tv_language_profile_id,
            tv_root_folder=cfg.tv_root_folder,
            book_quality_profile_id=cfg.book_quality_profile_id,
            book_root_folder=cfg.book_root_folder,
        )


def build_movie_payload(movie: SearchResult, defaults: PayloadDefaults) -> Dict[str, Any]:
    return {
        "title": movie.title,
        "qualityProfileId": defaults.movie_quality_profile_id,
        "titleSlug": movie.title_slug,
        "images": movie.image_list(),
        "tmdbId": movie.tmdb_id,
        "year": movie.year,
        "monitored": True,
        "rootFolderPath": defaults.movie_root_folder,
        "addOptions": {"searchForMovie": True},
    }


def build_series_payload(show: SearchResult, defaults: PayloadDefaults) -> Dict[str, Any]:
    seasons: List[Dict[str, Any]] = []
    for s in show.seasons or ():
        try:
            number = int(s.get("seasonNumber"))
        except (TypeError, ValueError):
            continue
        # Season 0 holds specials
        if number > 0:
            seasons.append({"seasonNumber": number, "monitored": True})
    return {
        "title": show.title,
        "qualityProfileId": defaults.tv_quality_profile_id,
        "languageProfileId": defaults.tv_language_profile_id,
        "titleSlug": show.title_slug or slugify(show.title),
        "images": show.image_list(),
        "tvdbId": show.tvdb_id,
        "year": show.year,
        "monitored": True,
        "rootFolderPath": defaults.tv_root_folder,
        "seriesType": "standard",
        "seasonFolder": True,
        "seasons": seasons,
        "addOptions": {"searchForMissingEpisodes": True},
    }


def build_book_payload(book: SearchResult, defaults: PayloadDefaults) -> Dict[str, Any]:
    return {
        "title": book.title,
        "qualityProfileId": defaults.book_quality_profile_id,
        "titleSlug": book.title_slug,
        "images": book.image_list(),
        "monitored": True,
        "rootFolderPath": defaults.book_root_folder,
        "addOptions": {"searchForBook": True},
    }


PAYLOAD_BUILDERS = {
    MediaKind.MOVIE: build_movie_payload,
    MediaKind.TV: build_series_payload,
    MediaKind.BOOK: build_book_payload,
}


class ArrClient:
    def __init__(
        self,
        name: str,
        base_url: str,
        api_key: str,
        resource: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: int = 0,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.resource = resource
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds) if self.timeout_seconds else None
            if timeout is not None:
                self._session = aiohttp.ClientSession(timeout=timeout)
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    def _headers(self) -> Dict[str, str]:
        return {"X-Api-Key": self.api_key}

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        if not self.base_url:
            raise ArrError(self.name, message=f"{self.name} is not configured")
        session = self._get_session()
        try:
            async with session.request(method, url, headers=self._headers(), **kwargs) as resp:
                if resp.status < 200 or resp.status >= 300:
                    body = await resp.text()
                    raise ArrError(self.name, status=resp.status, body=body)
                if resp.status == 204:
                    return None
                try:
                    return await resp.json(content_type=None)
                except ValueError:
                    # Accepted, but the body is not JSON
                    logger.debug(f"{self.name} returned a non-JSON body for {method} {url}")
                    return None
        except aiohttp.ClientError as e:
            raise ArrError(self.name, message=f"{self.name} request failed: {e}") from e

    async def lookup(self, term: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"{self.base_url}/{self.resource}/lookup", params={"term": term})
        if not isinstance(data, list):
            logger.warning(f"{self.name} lookup returned {type(data).__name__}, expected a list")
            return []
        return [item for item in data if isinstance(item, dict)]

    async def add(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", f"{self.base_url}/{self.resource}", json=payload)

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None


class MediaGateway:
    """Routes lookups and adds to the manager responsible for each kind."""

    def __init__(self, clients: Dict[MediaKind, ArrClient], defaults: Optional[PayloadDefaults] = None) -> None:
        self.clients = clients
        self.defaults = defaults or PayloadDefaults()

    @classmethod
    def from_config(cls, cfg: Config, session: Optional[aiohttp.ClientSession] = None) -> "MediaGateway":
        clients = {
            MediaKind.MOVIE: ArrClient("Radarr", cfg.radarr_url, cfg.radarr_api_key, MediaKind.MOVIE.resource, session, cfg.arr_timeout_seconds),
            MediaKind.TV: ArrClient("Sonarr", cfg.sonarr_url, cfg.sonarr_api_key, MediaKind.TV.resource, session, cfg.arr_timeout_seconds),
            MediaKind.BOOK: ArrClient("Readarr", cfg.readarr_url, cfg.readarr_api_key, MediaKind.BOOK.resource, session, cfg.arr_timeout_seconds),
        }
        return cls(clients, PayloadDefaults.from_config(cfg))

    async def lookup(self, kind: MediaKind, query: str) -> List[SearchResult]:
        records = await self.clients[kind].lookup(query)
        logger.debug(f"{kind.manager} lookup for {query!r} returned {len(records)} results")
        return [SearchResult.from_lookup(r) for r in records]

    def build_payload(self, kind: MediaKind, result: SearchResult) -> Dict[str, Any]:
        return PAYLOAD_BUILDERS[kind](result, self.defaults)

    async def add(self, kind: MediaKind, result: SearchResult) -> Any:
        payload = self.build_payload(kind, result)
        logger.info(f"Adding {kind.value} {result.title!r} to {kind.manager}")
        return await self.clients[kind].add(payload)

    async def close(self) -> None:
        for client in self.clients.values():
            await client.close()
