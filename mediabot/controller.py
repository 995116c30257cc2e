"""Selection workflow for the /movie, /tv and /book commands.

A command creates a session holding the top lookup results and shows one
button per candidate. Selecting a candidate swaps the message for a
Confirm / Cancel prompt; confirming sends the candidate to its manager.
Which candidate is being confirmed travels in the button custom id, the
store only knows which sessions are still open.
"""
import logging
from contextlib import asynccontextmanager
from typing import List

import discord

from .actions import ActionId, InvalidAction, Stage
from .arr import ArrError, MediaGateway
from .formatter import build_embed, build_selection_embed, selection_label
from .models import MediaKind, SearchResult
from .sessions import MAX_CANDIDATES, Session, SessionStore

logger = logging.getLogger(__name__)

MSG_NOT_YOURS = "This selection is not for you."
MSG_EXPIRED = "Session expired."
MSG_UNAVAILABLE = "That option is no longer available."
MSG_CANCELLED = "🚫 Selection cancelled."
MSG_ADD_FAILED = "❌ Error adding item."
MSG_GENERIC_ERROR = "An error occurred. Please try again later."


def _make_button(action: ActionId, label: str, style: discord.ButtonStyle) -> discord.ui.Button:
    return discord.ui.Button(label=label, style=style, custom_id=action.encode())


def build_results_view(kind: MediaKind, session_id: str, count: int) -> discord.ui.View:
    # Buttons are routed by custom id through on_interaction, the view only carries them
    view = discord.ui.View(timeout=600)
    for i in range(count):
        view.add_item(_make_button(ActionId(kind, Stage.SELECT, session_id, i), str(i + 1), discord.ButtonStyle.primary))
    return view


def build_confirm_view(action: ActionId) -> discord.ui.View:
    view = discord.ui.View(timeout=600)
    view.add_item(_make_button(action.with_stage(Stage.CONFIRM), "Confirm", discord.ButtonStyle.success))
    view.add_item(_make_button(action.with_stage(Stage.CANCEL), "Cancel", discord.ButtonStyle.danger))
    return view


def success_message(kind: MediaKind, item: SearchResult) -> str:
    return f"✅ {kind.label} **{selection_label(item, kind)}** added to {kind.manager} and search started!"


async def send_private(interaction: discord.Interaction, content: str) -> None:
    """Reply if nothing was sent for this interaction yet, otherwise follow up."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


@asynccontextmanager
async def respond_on_error(interaction: discord.Interaction, what: str):
    """Guarantee the user hears back when handling an interaction blows up."""
    try:
        yield
    except Exception:
        logger.exception(f"Interaction error while handling {what}")
        try:
            await send_private(interaction, MSG_GENERIC_ERROR)
        except Exception:
            logger.exception("Failed to report interaction error to the user")


class SelectionController:
    def __init__(self, gateway: MediaGateway, store: SessionStore) -> None:
        self.gateway = gateway
        self.store = store

    async def handle_command(self, interaction: discord.Interaction, kind: MediaKind, query: str) -> None:
        async with respond_on_error(interaction, f"/{kind.value}"):
            await self._search(interaction, kind, query)

    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        """Entry point for every component interaction the bot receives."""
        if interaction.type != discord.InteractionType.component:
            return
        custom_id = (interaction.data or {}).get("custom_id")
        try:
            action = ActionId.parse(custom_id)
        except InvalidAction:
            logger.warning(f"Rejecting malformed action id {custom_id!r} from {interaction.user.id}")
            async with respond_on_error(interaction, "malformed action"):
                await send_private(interaction, MSG_GENERIC_ERROR)
            return
        if action is None:
            return
        await self.handle_action(interaction, action)

    async def handle_action(self, interaction: discord.Interaction, action: ActionId) -> None:
        async with respond_on_error(interaction, action.encode()):
            if action.stage is Stage.SELECT:
                await self._select(interaction, action)
            elif action.stage is Stage.CONFIRM:
                await self._confirm(interaction, action)
            else:
                await self._cancel(interaction, action)

    async def _search(self, interaction: discord.Interaction, kind: MediaKind, query: str) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        results: List[SearchResult] = await self.gateway.lookup(kind, query)
        candidates = tuple(results[:MAX_CANDIDATES])
        if not candidates:
            await interaction.followup.send(f"❌ No {kind.noun} results found.", ephemeral=True)
            return
        session = Session(
            session_id=str(interaction.id),
            kind=kind,
            candidates=candidates,
            user_id=interaction.user.id,
        )
        self.store.put(session)
        logger.info(f"Session {kind.value}:{session.session_id} opened by {interaction.user.id} with {len(candidates)} candidates")
        embeds = [build_embed(item, i, kind) for i, item in enumerate(candidates)]
        view = build_results_view(kind, session.session_id, len(candidates))
        await interaction.followup.send(embeds=embeds, view=view, ephemeral=True)

    def _owned_session(self, interaction: discord.Interaction, action: ActionId):
        """Return (session, error message). Ownership is checked before anything else is read."""
        session = self.store.get(action.kind, action.session_id)
        if session is None:
            return None, MSG_EXPIRED
        if session.user_id != interaction.user.id:
            return None, MSG_NOT_YOURS
        return session, None

    async def _select(self, interaction: discord.Interaction, action: ActionId) -> None:
        session, error = self._owned_session(interaction, action)
        if session is None:
            await interaction.response.send_message(error, ephemeral=True)
            return
        item = session.candidate(action.index)
        if item is None:
            await interaction.response.send_message(MSG_UNAVAILABLE, ephemeral=True)
            return
        await interaction.response.edit_message(
            embed=build_selection_embed(item, action.kind),
            view=build_confirm_view(action),
        )

    async def _confirm(self, interaction: discord.Interaction, action: ActionId) -> None:
        session, error = self._owned_session(interaction, action)
        if session is None:
            await interaction.response.send_message(error, ephemeral=True)
            return
        item = session.candidate(action.index)
        if item is None:
            await interaction.response.send_message(MSG_UNAVAILABLE, ephemeral=True)
            return
        # Claim the session before the first await so a racing confirm sees it expired
        self.store.delete(action.kind, action.session_id)
        await interaction.response.edit_message(view=None)
        try:
            await self.gateway.add(action.kind, item)
        except ArrError as e:
            logger.error(f"Error adding {action.kind.value} {item.title!r}: {e} {e.body or ''}".rstrip())
            await interaction.followup.send(MSG_ADD_FAILED, ephemeral=True)
            return
        logger.info(f"Session {action.kind.value}:{action.session_id} finalized with {item.title!r}")
        await interaction.followup.send(success_message(action.kind, item), ephemeral=True)

    async def _cancel(self, interaction: discord.Interaction, action: ActionId) -> None:
        session = self.store.get(action.kind, action.session_id)
        if session is not None and session.user_id != interaction.user.id:
            await interaction.response.send_message(MSG_NOT_YOURS, ephemeral=True)
            return
        self.store.delete(action.kind, action.session_id)
        await interaction.response.edit_message(content=MSG_CANCELLED, embeds=[], view=None)
