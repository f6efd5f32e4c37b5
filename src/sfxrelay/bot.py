from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from .config import Settings
from .error_handlers import setup_error_handlers
from .moderation.decisions import DecisionCollector
from .moderation.intake import SubmissionIntake
from .moderation.notifier import OutcomeNotifier
from .moderation.pending_inputs import PendingInputs
from .moderation.registry import SubmissionRegistry
from .services.messenger import DiscordMessenger
from .ui.review import ReviewButton

log = logging.getLogger("sfxrelay.bot")


class _CommandSyncManager:
    def __init__(self, bot: "SfxRelayBot") -> None:
        self.bot = bot
        self._lock = asyncio.Lock()

    async def sync_startup(self) -> None:
        if self.bot.settings.guild_id:
            await self.sync_guild(self.bot.settings.guild_id)
        else:
            await self.sync_global()

    async def sync_global(self) -> None:
        async with self._lock:
            synced = await self.bot.tree.sync()
            log.info("Commands synced globally (%d)", len(synced))

    async def sync_guild(self, guild_id: int) -> None:
        async with self._lock:
            guild = discord.Object(id=guild_id)
            # Guild commands show up immediately, global ones can take an hour
            self.bot.tree.copy_global_to(guild=guild)
            synced = await self.bot.tree.sync(guild=guild)
            log.info("Commands synced to guild %d (%d)", guild_id, len(synced))
            for c in synced:
                log.info(" - /%s", c.name)


class SfxRelayBot(commands.Bot):
    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        # Needed to read the moderator's follow-up name/reason.
        intents.message_content = bool(settings.message_content_intent)

        log.info("INTENTS: guilds=%s messages=%s message_content=%s", intents.guilds, intents.messages, intents.message_content)

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            allowed_mentions=discord.AllowedMentions.none(),
            application_id=settings.application_id or None,
            help_command=None,
        )

        self.settings = settings
        self.registry = SubmissionRegistry(ttl_seconds=settings.submission_ttl_hours * 3600)
        self.pending_inputs = PendingInputs()
        self.messenger = DiscordMessenger(
            self,
            submission_channel_id=settings.submission_channel_id,
            moderation_channel_id=settings.moderation_channel_id,
        )
        self.notifier = OutcomeNotifier(self.messenger)
        self.intake = SubmissionIntake(messenger=self.messenger, registry=self.registry)
        self.decisions = DecisionCollector(
            messenger=self.messenger,
            registry=self.registry,
            pending_inputs=self.pending_inputs,
            notifier=self.notifier,
            decider_role_id=settings.decider_role_id,
            timeout_seconds=settings.decision_timeout_seconds,
        )
        self._sync_mgr = _CommandSyncManager(self)

    async def setup_hook(self) -> None:
        # Buttons on posts from before a restart are routed by custom_id
        self.add_dynamic_items(ReviewButton)
        setup_error_handlers(self)

        from .cogs.review import ReviewRepliesCog
        from .cogs.submissions import SubmissionsCog
        from .cogs.utilities import UtilitiesCog

        for cog in (SubmissionsCog(self), UtilitiesCog(self), ReviewRepliesCog(self)):
            await self.add_cog(cog)
            log.info("Loaded cog: %s", type(cog).__name__)

        try:
            await self._sync_mgr.sync_startup()
        except discord.HTTPException:
            log.exception("Error refreshing application (/) commands")

    async def on_ready(self) -> None:
        log.info("Bot is online as %s (id=%s)", self.user, getattr(self.user, "id", None))
