import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands, tasks

from .arr import MediaGateway
from .config import Config, load_config
from .controller import SelectionController
from .models import MediaKind
from .sessions import SessionStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("mediabot")


COMMAND_DESCRIPTIONS = {
    MediaKind.MOVIE: ("Search for a movie and add it via Radarr.", "The name of the movie to search for."),
    MediaKind.TV: ("Search for a TV show and add it via Sonarr.", "The name of the TV show to search for."),
    MediaKind.BOOK: ("Search for a book and add it via Readarr.", "The name of the book to search for."),
}


def build_search_command(controller: SelectionController, kind: MediaKind) -> app_commands.Command:
    description, query_help = COMMAND_DESCRIPTIONS[kind]

    @app_commands.describe(query=query_help)
    async def search(interaction: discord.Interaction, query: str):
        await controller.handle_command(interaction, kind, query)

    return app_commands.Command(name=kind.value, description=description, callback=search)


class MediaBot(commands.Bot):
    def __init__(self, cfg: Config, controller: SelectionController, **kwargs):
        intents = discord.Intents.default()
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            application_id=cfg.application_id,
            **kwargs,
        )
        self.cfg = cfg
        self.controller = controller

    async def close(self):
        await self.controller.gateway.close()
        await super().close()


def build_bot(cfg: Config, controller: Optional[SelectionController] = None) -> MediaBot:
    if controller is None:
        gateway = MediaGateway.from_config(cfg)
        controller = SelectionController(gateway, SessionStore(max_age_seconds=cfg.session_ttl_seconds))
    bot = MediaBot(cfg, controller)
    store = controller.store

    search_commands = [build_search_command(controller, kind) for kind in MediaKind]

    _synced = False

    async def register_slash_commands():
        nonlocal _synced
        if _synced:
            return
        try:
            if cfg.guild_ids:
                # Drop global copies so guild commands are not listed twice
                try:
                    bot.tree.clear_commands(guild=None)
                    await bot.tree.sync()
                except discord.HTTPException:
                    logger.exception("Failed to clear global commands prior to guild sync")
                for gid in cfg.guild_ids:
                    guild_obj = discord.Object(id=gid)
                    bot.tree.clear_commands(guild=guild_obj)
                    for cmd in search_commands:
                        bot.tree.add_command(cmd, guild=guild_obj)
                    synced = await bot.tree.sync(guild=guild_obj)
                    logger.info(f"Slash commands synced for guild {gid}: {[c.name for c in synced]}")
            else:
                bot.tree.clear_commands(guild=None)
                for cmd in search_commands:
                    bot.tree.add_command(cmd)
                synced = await bot.tree.sync()
                logger.info(f"Global slash commands synced: {[c.name for c in synced]}")
            _synced = True
        except discord.HTTPException:
            logger.exception("Failed to register/sync slash commands")

    @tasks.loop(minutes=10)
    async def session_sweep():
        removed = store.sweep()
        if removed:
            logger.info(f"Dropped {removed} abandoned selection sessions")

    @bot.event
    async def on_ready():
        # Apply runtime log level
        logging.getLogger().setLevel(getattr(logging, (cfg.log_level or "INFO"), logging.INFO))
        logger.info(f"Logged in as {bot.user} (ID: {bot.user.id})")
        await register_slash_commands()
        if store.max_age > 0 and not session_sweep.is_running():
            session_sweep.start()

    @bot.event
    async def on_interaction(interaction: discord.Interaction):
        await controller.handle_interaction(interaction)

    return bot


def main():
    cfg = load_config()
    token = cfg.discord_token
    if not token:
        raise RuntimeError("DISCORD_TOKEN not set")
    bot = build_bot(cfg)
    bot.run(token)


if __name__ == "__main__":
    main()
