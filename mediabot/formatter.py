from dataclasses import dataclass
from typing import Optional

import discord

from .models import MediaKind, SearchResult

OVERVIEW_LIMIT = 400
NO_OVERVIEW = "No overview available."


@dataclass(frozen=True)
class ResultSummary:
    title: str
    description: str
    image_url: Optional[str]


def truncate_overview(result: SearchResult) -> str:
    return result.overview[:OVERVIEW_LIMIT] if result.overview else NO_OVERVIEW


def poster_url(result: SearchResult, kind: MediaKind) -> Optional[str]:
    cover_types = ("poster", "cover") if kind is MediaKind.BOOK else ("poster",)
    for img in result.images:
        if img.get("coverType") in cover_types:
            return img.get("remoteUrl") or img.get("url")
    return None


def summarize(result: SearchResult, index: int, kind: MediaKind) -> ResultSummary:
    title = f"{index + 1}. {result.title}"
    # Books never show a year; 0 from a lookup means unknown
    if kind is not MediaKind.BOOK and result.year:
        title += f" ({result.year})"
    return ResultSummary(title=title, description=truncate_overview(result), image_url=poster_url(result, kind))


def selection_label(result: SearchResult, kind: MediaKind) -> str:
    if kind is MediaKind.BOOK:
        return result.title
    return f"{result.title} ({result.year or 'N/A'})"


def build_embed(result: SearchResult, index: int, kind: MediaKind) -> discord.Embed:
    summary = summarize(result, index, kind)
    embed = discord.Embed(title=summary.title[:256], description=summary.description)
    if summary.image_url:
        embed.set_image(url=summary.image_url)
    embed.set_footer(text=f"Select by clicking the button below. ({kind.label} search)")
    return embed


def build_selection_embed(result: SearchResult, kind: MediaKind) -> discord.Embed:
    return discord.Embed(
        title=f"You selected: {selection_label(result, kind)}"[:256],
        description=truncate_overview(result),
    )
