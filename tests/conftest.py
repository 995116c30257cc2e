import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import discord
import pytest

# Ensure root path is available for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from mediabot.models import MediaKind, SearchResult  # noqa: E402
from mediabot.sessions import SessionStore  # noqa: E402


class FakeResponse:
    """Stand-in for ``discord.InteractionResponse`` tracking whether it was used."""

    def __init__(self):
        self._done = False
        self.defer = AsyncMock(side_effect=self._mark_done)
        self.send_message = AsyncMock(side_effect=self._mark_done)
        self.edit_message = AsyncMock(side_effect=self._mark_done)

    async def _mark_done(self, *args, **kwargs):
        self._done = True

    def is_done(self) -> bool:
        return self._done


class FakeGateway:
    def __init__(self, results=None):
        self.results = {kind: list(results or []) for kind in MediaKind}
        self.lookups = []
        self.added = []
        self.add_error = None
        self.close = AsyncMock()

    async def lookup(self, kind, query):
        self.lookups.append((kind, query))
        return list(self.results[kind])

    async def add(self, kind, result):
        self.added.append((kind, result))
        if self.add_error is not None:
            raise self.add_error
        return {"id": 1}


@pytest.fixture
def results():
    return [
        SearchResult.from_lookup({
            "title": "Inception",
            "year": 2010,
            "overview": "A thief who steals corporate secrets through dreams.",
            "titleSlug": "inception-27205",
            "tmdbId": 27205,
            "images": [{"coverType": "poster", "remoteUrl": "https://img/inception.jpg"}],
        }),
        SearchResult.from_lookup({"title": "Inception: The Cobol Job", "year": 2010, "tmdbId": 64956, "titleSlug": "cobol-job"}),
        SearchResult.from_lookup({"title": "Inception: Jump Right Into the Action", "year": 2010, "tmdbId": 613092}),
        SearchResult.from_lookup({"title": "Beyond Inception", "year": 2011, "tmdbId": 1}),
    ]


@pytest.fixture
def gateway(results):
    return FakeGateway(results)


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def make_interaction():
    def _make(user_id: int = 123, interaction_id: int = 1000, custom_id=None):
        return SimpleNamespace(
            id=interaction_id,
            user=SimpleNamespace(id=user_id),
            type=discord.InteractionType.component if custom_id is not None else discord.InteractionType.application_command,
            data={"custom_id": custom_id} if custom_id is not None else {},
            response=FakeResponse(),
            followup=SimpleNamespace(send=AsyncMock()),
            message=Mock(),
        )

    return _make
