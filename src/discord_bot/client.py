import asyncio
import logging
from typing import Callable, Dict, Mapping, Optional

import discord
from discord.ext import commands

from config.loader import load_config
from config.models import Config
from discord_bot.dispatch import bind_commands
from discord_bot.embeds.custom_message import CommandTemplate
from discord_bot.placeholders import build_placeholders
from discord_bot.remote import DiscordCommandService
from storage.repository import Repository
from sync.errors import SyncError
from sync.service import CommandSynchronizer, SyncResult

logger = logging.getLogger(__name__)


class CustomCommandsBot(commands.Bot):
    def __init__(self, config: Config, repository: Repository,
                 config_loader: Callable[[str], Config] = load_config):
        intents = discord.Intents.default()
        intents.guilds = True

        self.config = config
        self.repo = repository
        self.config_loader = config_loader
        self.synchronizer: Optional[CommandSynchronizer] = None
        # Command name -> reply template of the handlers currently bound
        self.templates: Dict[str, CommandTemplate] = {}
        self._apply_lock = asyncio.Lock()
        self._reload_task: Optional[asyncio.Task] = None

        super().__init__(command_prefix=commands.when_mentioned, intents=intents)

    async def setup_hook(self):
        """Setup hook for Discord bot - sync the custom commands."""
        logger.info("Setting up bot hooks...")

        remote = DiscordCommandService(self.http, self.application_id)
        self.synchronizer = CommandSynchronizer(
            self.repo, remote, call_timeout=self.config.remote_call_timeout_seconds
        )
        await self.apply_custom_commands()

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} ({self.user.id})")

    def placeholders_for(self, interaction: discord.Interaction) -> Mapping[str, str]:
        return build_placeholders(self.config, interaction)

    async def apply_custom_commands(self) -> Optional[SyncResult]:
        """
        Synchronize the configured commands with Discord and bind their handlers.

        Returns None if the pass could not start because the registered names
        or Discord's command list were unavailable; the previous handlers stay bound.
        """
        async with self._apply_lock:
            try:
                result = await self.synchronizer.sync(self.config.custom_commands)
            except SyncError as e:
                logger.error(f"Custom commands not synced: {e}")
                return None

            try:
                self.templates = bind_commands(
                    self.tree, result.active, self.placeholders_for, previous=self.templates
                )
            except Exception as e:
                logger.error(f"Error binding custom command handlers, keeping the previous ones: {e!r}")
            return result

    async def reload_custom_commands(self) -> Optional[SyncResult]:
        """Reload the config file and run a new synchronization pass."""
        logger.info(f"Reloading config from {self.config.config_path}")
        try:
            config = self.config_loader(self.config.config_path)
        except (OSError, ValueError) as e:
            logger.error(f"Error reloading config, keeping the current one: {e}")
            return None

        # The token only applies on the next start
        config.discord_token = self.config.discord_token
        self.config = config
        if self.synchronizer is not None:
            self.synchronizer.call_timeout = config.remote_call_timeout_seconds
        return await self.apply_custom_commands()

    def schedule_reload(self) -> asyncio.Task:
        """Start a reload in the background, e.g. from a signal handler."""
        self._reload_task = asyncio.create_task(self.reload_custom_commands())
        return self._reload_task


__all__ = ['CustomCommandsBot']
